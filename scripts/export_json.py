#!/usr/bin/env python
"""
Export a project's labeled data to JSON.

Usage:
    python scripts/export_json.py <db_path> <project_id> <output_dir>
    python scripts/export_json.py <db_path> --list
"""

import sys
import argparse
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import StoreUnavailable
from core.export_json import collect_project, write_export
from core.models import EntityKind, Project
from core.store import SqliteEntityStore


def main():
    parser = argparse.ArgumentParser(description="Export a project's labeled data to JSON")
    parser.add_argument("db_path", help="Path to the Labelled database")
    parser.add_argument("project_id", nargs="?", help="ID of the project to export")
    parser.add_argument("output_dir", nargs="?", default=".", help="Output directory (default: .)")
    parser.add_argument("--list", action="store_true", help="List projects and exit")

    args = parser.parse_args()

    if not Path(args.db_path).exists():
        print(f"✗ Database not found: {args.db_path}")
        sys.exit(1)

    store = SqliteEntityStore.open(args.db_path)
    try:
        if args.list:
            records = store.select(EntityKind.PROJECTS, order=("created_at", False))
            for project in (Project.from_record(r) for r in records):
                print(f"{project.id}  {project.kind.value:5}  {project.name}")
            return

        if not args.project_id:
            parser.error("project_id is required unless --list is given")

        try:
            project, items, labels = collect_project(store, args.project_id)
        except (ValueError, StoreUnavailable) as e:
            print(f"✗ Export failed: {e}")
            sys.exit(1)

        path = write_export(project, items, labels, args.output_dir)
    finally:
        store.close()

    labeled = len({label.dataset_id for label in labels})
    print(f"Project: {project.name} ({project.kind.value})")
    print(f"  Items: {len(items)}")
    print(f"  Labeled items: {labeled}")
    print(f"  Labels: {len(labels)}")
    print(f"\n✓ Export complete: {path}")


if __name__ == "__main__":
    main()
