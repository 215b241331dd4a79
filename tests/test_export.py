"""
Tests for the JSON export.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from core.export_json import (
    build_export, collect_project, export_filename, export_labeled_json, write_export
)
from core.models import DatasetItem, EntityKind, ImageContent, Label, Project, ProjectKind, TextContent

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
PROJECT = Project("p1", "user-1", "Demo", "", ProjectKind.TEXT, NOW, NOW)


def _items():
    return [
        DatasetItem("a", "p1", "a.txt", TextContent("hello"), "text/plain", NOW),
        DatasetItem("b", "p1", "b.png", ImageContent("https://x/y.png"), "image/png", NOW),
    ]


def _label(label_id, dataset_id, text):
    return Label(label_id, dataset_id, text, NOW, NOW)


def test_export_two_items():
    document = export_labeled_json(PROJECT, _items(), [_label("l1", "a", "greeting")])

    assert json.loads(document) == [
        {"file_name": "a.txt", "content": "hello", "labels": ["greeting"]},
        {"file_name": "b.png", "content": "https://x/y.png", "labels": []},
    ]
    assert "\n  " in document


def test_export_empty_project():
    assert json.loads(export_labeled_json(PROJECT, [], [])) == []


def test_labels_grouped_in_given_order():
    labels = [
        _label("l1", "b", "bird"),
        _label("l2", "a", "greeting"),
        _label("l3", "b", "flying"),
        _label("l4", "b", "bird"),
    ]

    entries = build_export(_items(), labels)

    assert entries[0]["labels"] == ["greeting"]
    assert entries[1]["labels"] == ["bird", "flying", "bird"]


def test_labels_of_unknown_items_ignored():
    entries = build_export(_items()[:1], [_label("l1", "zzz", "stray")])
    assert entries == [{"file_name": "a.txt", "content": "hello", "labels": []}]


def test_export_does_not_mutate_inputs():
    items = _items()
    labels = [_label("l1", "a", "greeting")]

    export_labeled_json(PROJECT, items, labels)

    assert items == _items()
    assert labels == [_label("l1", "a", "greeting")]


def test_non_ascii_preserved():
    items = [DatasetItem("a", "p1", "ü.txt", TextContent("héllo"), "text/plain", NOW)]
    assert "héllo" in export_labeled_json(PROJECT, items, [])


def test_export_filename():
    assert export_filename(PROJECT) == "Demo-labeled-data.json"


def test_write_export(temp_dir):
    path = write_export(PROJECT, _items(), [], temp_dir)

    assert path.name == "Demo-labeled-data.json"
    assert json.loads(path.read_text(encoding="utf-8"))[1]["content"] == "https://x/y.png"


@pytest.mark.parametrize("name,expected", [
    ("cats/dogs", "cats_dogs-labeled-data.json"),
    ("../up", ".._up-labeled-data.json"),
    ("a\\b", "a_b-labeled-data.json"),
])
def test_write_export_keeps_file_inside_out_dir(temp_dir, name, expected):
    project = Project("p1", "user-1", name, "", ProjectKind.TEXT, NOW, NOW)

    path = write_export(project, _items(), [], temp_dir)

    assert path.name == expected
    assert path.parent == Path(temp_dir)
    assert json.loads(path.read_text(encoding="utf-8"))[0]["file_name"] == "a.txt"
    assert export_filename(project) == f"{name}-labeled-data.json"


def test_collect_project_from_session_data(store, session, text_project):
    store.insert(EntityKind.DATASETS, {
        "project_id": text_project.id, "file_name": "a.txt", "content": "hello",
        "file_type": "text/plain",
    })
    session.open(text_project)
    session.add_label("greeting")

    project, items, labels = collect_project(store, text_project.id)

    assert project.id == text_project.id
    assert build_export(items, labels) == build_export(session.items, session.all_labels())
