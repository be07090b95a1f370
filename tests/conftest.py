import os
from unittest.mock import MagicMock

import pytest

from iam import config
from iam.core.coordinator import Coordinator
from iam.lib import logs
from iam.plugin import Plugin


@pytest.fixture
def coord(tmp_path):
    """Fresh coordinator per test, thread files under tmp_path/inbox."""
    return Coordinator(inbox_dir=tmp_path / "inbox")


@pytest.fixture
def memory_coord():
    """Coordinator with no inbox: threads live only in memory."""
    return Coordinator(inbox_dir=None)


@pytest.fixture
def workspace(monkeypatch, tmp_path):
    """Isolated workspace root with no config file and no inherited IAM_* overrides."""
    for key in list(os.environ):
        if key.startswith(config.ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    root = tmp_path / "workspace"
    root.mkdir()
    monkeypatch.setenv("IAM_ROOT", str(root))
    config._clear_cache()
    logs._reset_for_testing()

    yield root

    config._clear_cache()
    logs._reset_for_testing()


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def plugin(coord, notifier):
    coord.parent_notifier = notifier
    return Plugin(coord, cfg=dict(config.DEFAULT_CONFIG))
