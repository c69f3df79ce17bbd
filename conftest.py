import pytest
from aipcheck.needle import catalog
from aipcheck.test_utils import WorkspaceFactory


@pytest.fixture
def workspace_factory(tmp_path, monkeypatch):
    # A clean workspace per test, with cwd inside it
    factory = WorkspaceFactory(tmp_path)
    monkeypatch.chdir(tmp_path)
    return factory


@pytest.fixture(autouse=True)
def reset_message_overrides():
    yield
    catalog.set_project_root(None)
