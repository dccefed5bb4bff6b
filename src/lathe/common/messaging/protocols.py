from typing import Protocol


class Renderer(Protocol):
    def render(self, message: str, level: str) -> None:
        """Shows an already formatted `message`; `level` is the bus method that sent it."""
        ...
