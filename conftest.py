import pytest
from lathe.test_utils.workspace import WorkspaceFactory


@pytest.fixture
def workspace_factory(tmp_path, monkeypatch):
    # Every test gets a clean project root as its working directory
    factory = WorkspaceFactory(tmp_path)
    monkeypatch.chdir(tmp_path)
    return factory
