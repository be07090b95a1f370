import os
from pathlib import Path


def iam_root() -> Path:
    """Workspace root: $IAM_ROOT if set, else the current directory."""
    root = os.environ.get("IAM_ROOT")
    return Path(root).expanduser() if root else Path.cwd()


def dot_iam() -> Path:
    return iam_root() / ".iam"


def config_file() -> Path:
    return dot_iam() / "config.yaml"


def inbox_dir(name: str) -> Path | None:
    """Resolve the thread inbox directory; an empty name means in-memory threads."""
    if not name:
        return None
    path = Path(name).expanduser()
    return path if path.is_absolute() else iam_root() / path


def log_file(log_dir: str, name: str) -> Path:
    path = Path(log_dir).expanduser()
    if not path.is_absolute():
        path = iam_root() / path
    return path / name
