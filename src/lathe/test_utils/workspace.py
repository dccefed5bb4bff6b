from pathlib import Path
from textwrap import dedent
from typing import Any, Dict, List, Optional

import tomli_w


class WorkspaceFactory:
    """Builds a throwaway Clojure project on disk for a test."""

    def __init__(self, root_path: Path):
        self.root_path = root_path
        self._files_to_create: List[Dict[str, Any]] = []
        self._pyproject_data: Dict[str, Any] = {}

    def with_config(self, lathe_config: Dict[str, Any]) -> "WorkspaceFactory":
        tool = self._pyproject_data.setdefault("tool", {})
        tool["lathe"] = lathe_config
        return self

    def with_source(self, path: str, content: str) -> "WorkspaceFactory":
        self._files_to_create.append(
            {"path": path, "content": dedent(content).lstrip("\n"), "format": "raw"}
        )
        return self

    def with_raw_file(self, path: str, content: str) -> "WorkspaceFactory":
        self._files_to_create.append({"path": path, "content": content, "format": "raw"})
        return self

    def with_deps_edn(self, paths: Optional[List[str]] = None) -> "WorkspaceFactory":
        paths = paths or ["src"]
        rendered = " ".join(f'"{p}"' for p in paths)
        return self.with_raw_file("deps.edn", f"{{:paths [{rendered}]}}\n")

    def build(self) -> Path:
        if self._pyproject_data:
            self._files_to_create.append(
                {
                    "path": "pyproject.toml",
                    "content": self._pyproject_data,
                    "format": "toml",
                }
            )

        for entry in self._files_to_create:
            output_path = self.root_path / entry["path"]
            output_path.parent.mkdir(parents=True, exist_ok=True)
            if entry["format"] == "toml":
                with output_path.open("wb") as f:
                    tomli_w.dump(entry["content"], f)
            else:
                output_path.write_text(entry["content"], encoding="utf-8")

        return self.root_path
