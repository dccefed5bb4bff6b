from dataclasses import dataclass, astuple
from typing import Optional, Tuple


@dataclass(frozen=True)
class SymbolReference:
    """A located occurrence of a symbol. Produced by queries, never stored."""

    line_beg: int
    line_end: Optional[int]
    col_beg: Optional[int]
    col_end: Optional[int]
    name: str
    file: Optional[str]
    match: str

    def as_tuple(self) -> Tuple:
        return astuple(self)

    def to_dict(self) -> dict:
        return {
            "line-beg": self.line_beg,
            "line-end": self.line_end,
            "col-beg": self.col_beg,
            "col-end": self.col_end,
            "name": self.name,
            "file": self.file,
            "match": self.match,
        }


def match_text(content: str, line: int, end_line: Optional[int] = None) -> str:
    """Source lines `line..end_line` (1-based, inclusive), trimmed."""
    last = end_line if isinstance(end_line, int) else line
    lines = content.splitlines()
    return "\n".join(lines[line - 1 : last]).strip()


def offset_to_position(text: str, offset: int) -> Tuple[int, int]:
    """1-based (line, column) of a character offset."""
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column
