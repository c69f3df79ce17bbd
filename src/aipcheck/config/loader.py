import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from aipcheck.spec import Severity

if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib

log = logging.getLogger(__name__)

PLUGIN_GROUP = "aipcheck.rules"
OUTPUT_FORMATS = ("text", "json")


class ConfigError(ValueError):
    pass


@dataclass
class AipcheckConfig:
    rules: List[str] = field(default_factory=list)
    disable: List[str] = field(default_factory=list)
    severity: Dict[str, Severity] = field(default_factory=dict)
    exclude: List[str] = field(default_factory=list)
    format: str = "text"
    baseline: Optional[str] = None
    jobs: int = 1
    plugins: Dict[str, str] = field(default_factory=dict)
    # Directory holding the pyproject.toml the settings came from.
    root: Optional[Path] = None


def _find_pyproject_toml(search_path: Path) -> Path:
    current_dir = search_path.resolve()
    if current_dir.is_file():
        current_dir = current_dir.parent
    while True:
        pyproject_path = current_dir / "pyproject.toml"
        if pyproject_path.is_file():
            return pyproject_path
        if current_dir.parent == current_dir:
            break
        current_dir = current_dir.parent
    raise FileNotFoundError("Could not find pyproject.toml in any parent directory.")


def _find_plugins(workspace_root: Path) -> Dict[str, str]:
    plugins: Dict[str, str] = {}
    for toml_file in sorted(workspace_root.rglob("pyproject.toml")):
        rel_parts = toml_file.relative_to(workspace_root).parts
        if any(part.startswith(".") for part in rel_parts):
            continue
        try:
            with open(toml_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            # Other projects' broken files are not our problem.
            log.debug(f"Ignoring {toml_file}: {e}")
            continue

        entry_points = data.get("project", {}).get("entry-points", {})
        plugins.update(entry_points.get(PLUGIN_GROUP, {}))
    return plugins


def _string_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data.get(key, [])
    if isinstance(value, str):
        value = [v for v in value.split(",")]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings.")
    return [v.strip() for v in value if v.strip()]


def parse_config(data: Dict[str, Any], root: Optional[Path] = None) -> AipcheckConfig:
    """Validates a [tool.aipcheck] table."""
    try:
        severity = {
            str(rule_id).upper(): Severity.parse(str(level))
            for rule_id, level in data.get("severity", {}).items()
        }
    except (AttributeError, ValueError) as e:
        raise ConfigError(f"'severity': {e}") from e

    fmt = str(data.get("format", "text")).lower()
    if fmt not in OUTPUT_FORMATS:
        raise ConfigError(f"'format' must be one of {', '.join(OUTPUT_FORMATS)}.")

    jobs = data.get("jobs", 1)
    if not isinstance(jobs, int) or isinstance(jobs, bool) or jobs < 1:
        raise ConfigError("'jobs' must be a positive integer.")

    baseline = data.get("baseline")
    if baseline is not None and not isinstance(baseline, str):
        raise ConfigError("'baseline' must be a path string.")

    return AipcheckConfig(
        rules=_string_list(data, "rules"),
        disable=_string_list(data, "disable"),
        severity=severity,
        exclude=_string_list(data, "exclude"),
        format=fmt,
        baseline=baseline,
        jobs=jobs,
        root=root,
    )


def load_config_from_path(search_path: Path) -> AipcheckConfig:
    try:
        config_path = _find_pyproject_toml(search_path)
    except FileNotFoundError:
        search_dir = search_path if search_path.is_dir() else search_path.parent
        config = AipcheckConfig(root=search_dir.resolve())
        config.plugins = _find_plugins(search_dir)
        return config

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{config_path}: {e}") from e

    tool_data: Dict[str, Any] = data.get("tool", {}).get("aipcheck", {})
    config = parse_config(tool_data, root=config_path.parent)
    config.plugins = _find_plugins(config_path.parent)
    return config
