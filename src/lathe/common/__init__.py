from pathlib import Path

from lathe.needle import needle
from .messaging.bus import MessageBus

# Packaged catalogs are the defaults; project-level `.lathe/needle` overrides them.
needle.add_root(Path(__file__).parent.parent / "assets")

bus = MessageBus(needle)

__all__ = ["bus", "needle", "MessageBus"]
