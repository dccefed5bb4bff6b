from pathlib import Path

from lathe.find import DefmacroFinder, SymbolLocator, make_ast_provider
from lathe.refactor import RenameEngine
from lathe.workspace import Workspace


def get_workspace() -> Workspace:
    return Workspace.discover(Path.cwd())


def make_rename_engine(workspace: Workspace) -> RenameEngine:
    return RenameEngine(workspace)


def make_locator(workspace: Workspace) -> SymbolLocator:
    return SymbolLocator(
        workspace,
        ast_provider=make_ast_provider(workspace.config),
        macro_finder=DefmacroFinder(workspace),
    )
