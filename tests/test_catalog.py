"""
Tests for the project catalog.
"""

from datetime import datetime, timezone

import pytest

from core.catalog import ProjectCatalog, compute_coverage
from core.errors import IdentityMissing, StoreUnavailable, ValidationError
from core.models import (
    Coverage, DatasetItem, EntityKind, Identity, ImageContent, Project, ProjectKind, TextContent
)

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _project(pid):
    return Project(pid, "user-1", pid, "", ProjectKind.IMAGE, NOW, NOW)


def _item(project_id, file_type, content=None):
    return DatasetItem(
        id=f"{project_id}-{file_type}-{id(object())}",
        project_id=project_id,
        file_name="f",
        content=content or ImageContent("https://x/y"),
        file_type=file_type,
        created_at=NOW,
    )


class TestProjectCatalog:

    def test_empty_list_is_valid(self, catalog, identity):
        assert catalog.list_projects(identity) == []

    def test_create_then_list_newest_first(self, catalog, identity):
        catalog.create_project(identity, "First", "", "image")
        catalog.create_project(identity, "Second", "", "text")
        created = catalog.create_project(identity, "Third", "desc", ProjectKind.TEXT)

        projects = catalog.list_projects(identity)

        assert [p.name for p in projects] == ["Third", "Second", "First"]
        assert projects[0].id == created.id
        assert projects[0].kind is ProjectKind.TEXT
        assert projects[0].description == "desc"

    def test_create_prepends_without_reload(self, catalog, identity, store):
        catalog.create_project(identity, "First", "", "image")
        selects_before = store.calls.count(("select", EntityKind.PROJECTS))

        catalog.create_project(identity, "Second", "", "image")

        assert [p.name for p in catalog.projects] == ["Second", "First"]
        assert store.calls.count(("select", EntityKind.PROJECTS)) == selects_before

    def test_create_upserts_profile_first(self, catalog, identity, store):
        catalog.create_project(identity, "First", "", "image")
        catalog.create_project(identity, "Second", "", "image")

        ops = [call for call in store.calls if call[0] in ("upsert", "insert")]
        assert ops[0] == ("upsert", EntityKind.PROFILES)
        assert ops[1] == ("insert", EntityKind.PROJECTS)
        assert len(store.tables[EntityKind.PROFILES]) == 1

    def test_profile_failure_creates_nothing(self, catalog, identity, store):
        store.fail_when(lambda op, kind, record: kind is EntityKind.PROFILES, "profiles offline")

        with pytest.raises(StoreUnavailable, match="profiles offline"):
            catalog.create_project(identity, "First", "", "image")

        assert store.tables[EntityKind.PROJECTS] == []
        assert catalog.projects == []

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, catalog, identity, name):
        with pytest.raises(ValidationError):
            catalog.create_project(identity, name, "", "image")

    def test_unknown_kind_rejected(self, catalog, identity):
        with pytest.raises(ValidationError):
            catalog.create_project(identity, "Audio", "", "audio")

    def test_requires_identity(self, catalog):
        with pytest.raises(IdentityMissing):
            catalog.create_project(None, "First", "", "image")
        with pytest.raises(IdentityMissing):
            catalog.list_projects(None)

    def test_list_only_own_projects(self, catalog, identity):
        other = Identity(id="user-2", email="grace@example.com")
        catalog.create_project(identity, "Mine", "", "image")
        catalog.create_project(other, "Theirs", "", "image")

        assert [p.name for p in catalog.list_projects(identity)] == ["Mine"]

    def test_list_failure_keeps_previous_view(self, catalog, identity, store):
        catalog.create_project(identity, "First", "", "image")
        store.fail_when(lambda op, kind, record: op == "select")

        with pytest.raises(StoreUnavailable):
            catalog.list_projects(identity)
        assert [p.name for p in catalog.projects] == ["First"]

    def test_delete_project(self, catalog, identity, store):
        keep = catalog.create_project(identity, "Keep", "", "text")
        drop = catalog.create_project(identity, "Drop", "", "text")
        store.insert(EntityKind.DATASETS, {
            "project_id": drop.id, "file_name": "a.txt", "content": "hi", "file_type": "text/plain",
        })

        catalog.delete_project(drop.id)

        assert [p.id for p in catalog.projects] == [keep.id]
        assert store.tables[EntityKind.DATASETS] == []

    def test_delete_failure_keeps_project(self, catalog, identity, store):
        project = catalog.create_project(identity, "Keep", "", "text")
        store.fail_when(lambda op, kind, record: op == "delete")

        with pytest.raises(StoreUnavailable):
            catalog.delete_project(project.id)
        assert [p.id for p in catalog.projects] == [project.id]

    def test_coverage_for_reads_items(self, catalog, identity, store):
        project = catalog.create_project(identity, "Mixed", "", "text")
        for file_type in ["text/plain", "application/json", "application/octet-stream"]:
            store.insert(EntityKind.DATASETS, {
                "project_id": project.id, "file_name": "f", "content": "x", "file_type": file_type,
            })

        coverage = catalog.coverage_for()

        assert coverage[project.id] == Coverage(
            file_count=3, text_item_count=2, image_item_count=0, percent=67
        )


class TestComputeCoverage:

    def test_zero_items(self):
        coverage = compute_coverage([_project("p1")], [])
        assert coverage["p1"] == Coverage(0, 0, 0, 0)

    def test_three_of_four_identified(self):
        items = [
            _item("p1", "image/png"),
            _item("p1", "image/jpeg"),
            _item("p1", "text/plain", TextContent("hi")),
            _item("p1", ""),
        ]

        coverage = compute_coverage([_project("p1")], items)

        assert coverage["p1"] == Coverage(
            file_count=4, text_item_count=1, image_item_count=2, percent=75
        )

    def test_rounds_half_up(self):
        items = [_item("p1", "image/png")] + [_item("p1", "") for _ in range(7)]
        # 1/8 = 12.5%
        assert compute_coverage([_project("p1")], items)["p1"].percent == 13

    def test_items_of_other_projects_ignored(self):
        items = [_item("p1", "image/png"), _item("p2", "image/png")]

        coverage = compute_coverage([_project("p1")], items)

        assert set(coverage) == {"p1"}
        assert coverage["p1"].file_count == 1

    def test_available_on_catalog(self):
        assert ProjectCatalog.compute_coverage([_project("p1")], [])["p1"].percent == 0
