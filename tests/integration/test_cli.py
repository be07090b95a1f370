import json

from typer.testing import CliRunner

from iam.cli.app import app

runner = CliRunner()

SCRIPT = """\
- {as: ses_a, do: announce, message: fixing auth}
- {as: ses_b, do: announce, message: writing docs}
- {as: ses_a, do: send, to: agent2, message: ping}
- {as: ses_b, do: turn}
- {do: agents}
"""


def test_no_command_shows_help(workspace):
    result = runner.invoke(app, [])

    assert result.exit_code == 0
    assert "replay" in result.stdout


def test_prompt(workspace):
    result = runner.invoke(app, ["prompt"])

    assert result.exit_code == 0
    assert "announce(message=" in result.stdout


def test_tools_json(workspace):
    result = runner.invoke(app, ["--json", "tools"])

    assert result.exit_code == 0
    assert [t["name"] for t in json.loads(result.stdout)] == ["announce", "broadcast"]


def test_replay_text(workspace):
    script = workspace / "run.yaml"
    script.write_text(SCRIPT)

    result = runner.invoke(app, ["replay", str(script)])

    assert result.exit_code == 0
    assert "[3] ses_a send" in result.stdout
    assert "Message: ping" in result.stdout
    assert "agent2 is working on: writing docs" in result.stdout


def test_replay_json(workspace):
    script = workspace / "run.yaml"
    script.write_text(SCRIPT)

    result = runner.invoke(app, ["replay", str(script), "--json"])

    assert result.exit_code == 0
    steps = json.loads(result.stdout)
    assert [s["step"] for s in steps] == ["announce", "announce", "send", "turn", "agents"]
    assert steps[3]["identity"] == "ses_b"


def test_replay_bad_step_exits_nonzero(workspace):
    script = workspace / "bad.yaml"
    script.write_text("- {as: a, do: dance}\n")

    result = runner.invoke(app, ["replay", str(script)])

    assert result.exit_code == 1
    assert "Unknown step" in result.output


def test_replay_missing_file(workspace):
    result = runner.invoke(app, ["replay", str(workspace / "nope.yaml")])

    assert result.exit_code != 0


def test_tools_local_json_flag(workspace):
    result = runner.invoke(app, ["tools", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)[0]["input_schema"]["required"] == ["message"]
