from .pointer import L, SemanticPointer
from .runtime import needle, Needle
from .loader import Loader

__all__ = ["L", "SemanticPointer", "needle", "Needle", "Loader"]
