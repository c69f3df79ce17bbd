from pathlib import Path
from textwrap import dedent
from typing import Any, Dict, List

import tomli_w


class WorkspaceFactory:
    """Builds a throwaway project of .proto files and a pyproject.toml."""

    def __init__(self, root_path: Path):
        self.root_path = root_path
        self._files_to_create: List[Dict[str, Any]] = []
        self._pyproject_data: Dict[str, Any] = {}

    def with_config(self, aipcheck_config: Dict[str, Any]) -> "WorkspaceFactory":
        tool = self._pyproject_data.setdefault("tool", {})
        tool["aipcheck"] = aipcheck_config
        return self

    def with_project_name(self, name: str) -> "WorkspaceFactory":
        project = self._pyproject_data.setdefault("project", {})
        project["name"] = name
        return self

    def with_entry_points(
        self, group: str, entry_points: Dict[str, str]
    ) -> "WorkspaceFactory":
        project = self._pyproject_data.setdefault("project", {})
        eps = project.setdefault("entry-points", {})
        eps[group] = entry_points
        return self

    def with_proto(self, path: str, content: str) -> "WorkspaceFactory":
        return self.with_source(path, content)

    def with_source(self, path: str, content: str) -> "WorkspaceFactory":
        self._files_to_create.append({"path": path, "content": dedent(content)})
        return self

    def build(self) -> Path:
        if self._pyproject_data:
            pyproject = self.root_path / "pyproject.toml"
            pyproject.parent.mkdir(parents=True, exist_ok=True)
            with pyproject.open("wb") as f:
                tomli_w.dump(self._pyproject_data, f)

        for file_spec in self._files_to_create:
            output_path = self.root_path / file_spec["path"]
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(file_spec["content"], encoding="utf-8")

        return self.root_path
