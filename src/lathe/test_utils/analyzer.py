from typing import Callable, Dict, List, Union

from lathe.errors import AnalyzerError
from lathe.find.ast import AstNode


class StubAstProvider:
    """
    Stands in for the external analyzer.

    Accepts either a mapping from source text to forest or a callable that
    builds the forest; unknown sources raise AnalyzerError.
    """

    def __init__(
        self,
        forests: Union[Dict[str, List[AstNode]], Callable[[str], List[AstNode]]],
    ):
        self.forests = forests
        self.calls: List[str] = []

    def parse(self, source: str) -> List[AstNode]:
        self.calls.append(source)
        if callable(self.forests):
            return self.forests(source)
        try:
            return self.forests[source]
        except KeyError:
            raise AnalyzerError("No forest registered for this source") from None
