import logging
from pathlib import Path
from typing import Callable, List, Protocol, Set

import networkx as nx

from lathe.errors import MalformedDeclaration
from lathe.lang.clojure.declaration import read_declaration_file
from lathe.workspace import Workspace

log = logging.getLogger(__name__)


class DependencyTracker(Protocol):
    def dependents(self, namespace: str) -> Set[Path]: ...


TrackerFactory = Callable[[Workspace], DependencyTracker]


class NamespaceTracker:
    """
    Namespace dependency graph of a workspace.

    Nodes are namespace names; an edge `a -> b` means a file declaring `a`
    lists `b` in a dependency clause. Each edge records the files that
    contributed it, so `dependents` answers with files, not namespaces.
    """

    def __init__(self, graph: nx.DiGraph):
        self.graph = graph

    @classmethod
    def build(cls, workspace: Workspace) -> "NamespaceTracker":
        graph = nx.DiGraph()
        for path in workspace.discover_files():
            try:
                decl = read_declaration_file(path)
            except (MalformedDeclaration, OSError, UnicodeDecodeError) as e:
                log.warning(f"Skipping {path} while building dependency graph: {e}")
                continue

            if not graph.has_node(decl.name):
                graph.add_node(decl.name, paths=set())
            graph.nodes[decl.name].setdefault("paths", set()).add(path)

            for clause in decl.dependencies:
                if clause.namespace == decl.name:
                    continue
                if not graph.has_edge(decl.name, clause.namespace):
                    graph.add_edge(decl.name, clause.namespace, files=set())
                graph[decl.name][clause.namespace]["files"].add(path)

        return cls(graph)

    def dependents(self, namespace: str) -> Set[Path]:
        if not self.graph.has_node(namespace):
            return set()
        files: Set[Path] = set()
        for _, _, data in self.graph.in_edges(namespace, data=True):
            files.update(data.get("files", ()))
        return files

    def paths_of(self, namespace: str) -> Set[Path]:
        if not self.graph.has_node(namespace):
            return set()
        return set(self.graph.nodes[namespace].get("paths", ()))

    def has_cycle(self) -> bool:
        return not nx.is_directed_acyclic_graph(self.graph)

    def cycles(self) -> List[List[str]]:
        return [list(cycle) for cycle in nx.simple_cycles(self.graph)]

    def cycles_through(self, namespace: str) -> List[List[str]]:
        return [cycle for cycle in self.cycles() if namespace in cycle]
