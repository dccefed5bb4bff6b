import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib


DEFAULT_EXTENSIONS = [".clj", ".cljc"]
DEFAULT_NAMESPACE = "clojure.core"


@dataclass
class LatheConfig:
    source_roots: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    default_namespace: str = DEFAULT_NAMESPACE
    analyzer_command: List[str] = field(default_factory=list)
    config_path: Optional[Path] = None


def _find_pyproject_toml(search_path: Path) -> Path:
    current_dir = search_path.resolve()
    while True:
        pyproject_path = current_dir / "pyproject.toml"
        if pyproject_path.is_file():
            return pyproject_path
        if current_dir.parent == current_dir:
            break
        current_dir = current_dir.parent
    raise FileNotFoundError("Could not find pyproject.toml in any parent directory.")


def load_config_from_path(search_path: Path) -> LatheConfig:
    try:
        config_path = _find_pyproject_toml(search_path)
    except FileNotFoundError:
        return LatheConfig()

    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    lathe_data: Dict[str, Any] = data.get("tool", {}).get("lathe", {})

    defaults = LatheConfig()
    return LatheConfig(
        source_roots=list(lathe_data.get("source_roots", defaults.source_roots)),
        extensions=list(lathe_data.get("extensions", defaults.extensions)),
        default_namespace=lathe_data.get(
            "default_namespace", defaults.default_namespace
        ),
        analyzer_command=list(lathe_data.get("analyzer_command", [])),
        config_path=config_path,
    )
