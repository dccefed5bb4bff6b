import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

log = logging.getLogger(__name__)


class Loader:
    """Reads flat `{"message.key": "template"}` JSON catalogs from a directory tree."""

    def _load_file(self, path: Path) -> Dict[str, Any]:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def load_directory(self, root_path: Path) -> Dict[str, str]:
        registry: Dict[str, str] = {}

        if not root_path.is_dir():
            return registry

        for dirpath, _, filenames in os.walk(root_path):
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if file_path.suffix.lower() != ".json":
                    continue
                try:
                    content = self._load_file(file_path)
                except (OSError, ValueError) as e:
                    log.warning(f"Skipping unreadable message catalog {file_path}: {e}")
                    continue
                for key, value in content.items():
                    registry[key] = str(value)

        return registry
