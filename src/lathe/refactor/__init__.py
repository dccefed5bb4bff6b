from .engine import RenameEngine, RenamePlan
from .tracker import DependencyTracker, NamespaceTracker, TrackerFactory

__all__ = [
    "RenameEngine",
    "RenamePlan",
    "DependencyTracker",
    "NamespaceTracker",
    "TrackerFactory",
]
