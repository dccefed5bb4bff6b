import logging
import subprocess
from typing import Dict, List, Protocol, Sequence

from lathe.config import LatheConfig
from lathe.errors import AnalyzerError
from .ast import AstNode, load_forest

log = logging.getLogger(__name__)


class AstProvider(Protocol):
    def parse(self, source: str) -> List[AstNode]:
        """Analyzes source text and returns one tree per top-level form."""
        ...


class CommandAstProvider:
    """
    Delegates analysis to an external program: source text on stdin, a JSON
    array of analyzer nodes on stdout.
    """

    def __init__(self, command: Sequence[str], timeout: float = 120.0):
        if not command:
            raise AnalyzerError("No analyzer command configured")
        self.command = list(command)
        self.timeout = timeout

    def parse(self, source: str) -> List[AstNode]:
        try:
            result = subprocess.run(
                self.command,
                input=source,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise AnalyzerError(f"Analyzer {self.command[0]} failed to run: {e}") from e

        if result.returncode != 0:
            raise AnalyzerError(
                f"Analyzer exited with status {result.returncode}: {result.stderr.strip()}"
            )
        return load_forest(result.stdout)


def make_ast_provider(config: LatheConfig) -> AstProvider:
    log.debug(f"Using analyzer command {config.analyzer_command}")
    return CommandAstProvider(config.analyzer_command)


class JsonAstProvider:
    """
    Serves forests that were analyzed ahead of time.

    `documents` maps source text to the analyzer's JSON output for it.
    """

    def __init__(self, documents: Dict[str, str]):
        self.documents = documents

    def parse(self, source: str) -> List[AstNode]:
        if source not in self.documents:
            raise AnalyzerError("No analyzed document for this source")
        return load_forest(self.documents[source])
