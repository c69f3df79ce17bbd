from pathlib import Path

from aipcheck.app import AipcheckApp


def get_project_root(target: Path) -> Path:
    return target if target.is_dir() else target.parent


def make_app(target: Path) -> AipcheckApp:
    return AipcheckApp(root_path=get_project_root(target))
