import logging

from iam import config
from iam.lib import logs


def test_setup_logging_writes_to_workspace(workspace):
    cfg = config.load_config()
    logs.setup_logging(cfg)
    logging.getLogger("iam.test").info("hello log")

    log_path = workspace / ".logs" / "iam.log"
    for handler in logging.getLogger("iam").handlers:
        handler.flush()
    assert "hello log" in log_path.read_text()


def test_setup_logging_is_idempotent(workspace):
    cfg = config.load_config()
    logs.setup_logging(cfg)
    before = list(logging.getLogger("iam").handlers)

    logs.setup_logging(cfg)

    assert logging.getLogger("iam").handlers == before


def test_log_is_truncated_on_start(workspace):
    log_path = workspace / ".logs" / "iam.log"
    log_path.parent.mkdir()
    log_path.write_text("stale run\n")

    logs.setup_logging(config.load_config())

    assert "stale run" not in log_path.read_text()


def test_unwritable_log_dir_is_not_fatal(workspace, capsys):
    (workspace / "blocked").write_text("file, not dir")
    cfg = dict(config.load_config(), log_dir="blocked")

    logger = logs.setup_logging(cfg)

    assert logger.name == "iam"
    assert "file logging disabled" in capsys.readouterr().err
