import json
from dataclasses import asdict
from pathlib import Path

import typer

from iam.inject import prompts
from iam.plugin import create_plugin

from . import output
from .errors import error_feedback
from .session import Session, load_script
from .shell import Shell

app = typer.Typer(invoke_without_command=True, no_args_is_help=False, add_completion=False)


@app.callback(invoke_without_command=True)
def common_options_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format."),
    quiet_output: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
):
    """Inter-agent messaging

    Identities, mailboxes and conversation threads for parallel subagents."""
    output.init_context(ctx, json_output, quiet_output)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command()
def prompt():
    """Print the instructions injected into each agent's system prompt."""
    typer.echo(prompts.SYSTEM_PROMPT.strip())


@app.command()
def tools(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format."),
):
    """Print the tool schemas exposed to agents."""
    schemas = create_plugin().tool_schemas()
    if json_output:
        typer.echo(json.dumps(schemas, indent=2))
        return
    if output.echo_json(schemas, ctx):
        return
    for schema in schemas:
        typer.echo(f"{schema['name']}: {schema['description']}")


@app.command()
@error_feedback
def replay(
    ctx: typer.Context,
    script: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML list of steps"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format."),
):
    """Run a scripted multi-agent conversation against a fresh coordinator."""
    as_json = json_output or output.is_json_mode(ctx)
    session = Session(create_plugin())
    results = []
    for i, step in enumerate(load_script(script), 1):
        result = session.run(step)
        results.append(result)
        if as_json:
            continue
        output.echo_text(f"[{i}] {result.identity or '-'} {result.step}", ctx)
        typer.echo(result.output)
    if as_json:
        typer.echo(json.dumps([asdict(r) for r in results], indent=2))


@app.command()
def shell():
    """Interactive shell: act as several agents in one process."""
    Shell(create_plugin()).run()


def main() -> None:
    """Entry point for iam command."""
    try:
        app()
    except SystemExit:
        raise
    except BaseException as e:
        raise SystemExit(1) from e
