"""
Shared fixtures.
"""

import os
import tempfile
import pytest

from core.catalog import ProjectCatalog
from core.labeling import LabelingSession
from core.models import Identity, ProjectKind
from core.store import SqliteEntityStore

from fakes import FakeObjectStore, InMemoryEntityStore


@pytest.fixture
def store():
    return InMemoryEntityStore()


@pytest.fixture
def objects():
    return FakeObjectStore()


@pytest.fixture
def identity():
    return Identity(id="user-1", email="ada@example.com")


@pytest.fixture
def catalog(store):
    return ProjectCatalog(store)


@pytest.fixture
def session(store, objects):
    return LabelingSession(store, objects)


@pytest.fixture
def text_project(catalog, identity):
    return catalog.create_project(identity, "Reviews", "Product reviews", ProjectKind.TEXT)


@pytest.fixture
def image_project(catalog, identity):
    return catalog.create_project(identity, "Birds", "", ProjectKind.IMAGE)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for database and storage files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def sqlite_store(temp_dir):
    store = SqliteEntityStore.open(os.path.join(temp_dir, "labelled.db"))
    yield store
    store.close()
