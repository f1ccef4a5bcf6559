"""CLI utility to create the MongoDB indexes for the CSV files collection.

Idempotent: running it again leaves the same index set in place. Driver
errors (for example duplicate filenames already stored) stop the script.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pymongo.collection import Collection

from csvfiles_api.app import configure_logging
from csvfiles_api.app.config import config
from csvfiles_api.app.db import CSV_FILE_INDEXES, csv_files, describe_indexes, ttl_index

PHASES = [
    ("Phase 1: Essential Indexes", ["idx_filename_exact"]),
    ("Phase 2: Recommended Indexes", ["idx_uploadedAt_desc", "idx_lastModified_desc"]),
    ("Phase 3: Future-Proofing Indexes", ["idx_filename_uploadedAt"]),
]


def _label(options: dict[str, Any], keys: tuple) -> str:
    if options.get("unique"):
        return f"{options['name']} (UNIQUE)"
    if len(keys) > 1:
        return f"{options['name']} (COMPOUND)"
    return options["name"]


def create_phase_indexes(coll: Collection) -> None:
    definitions = {options["name"]: (keys, options) for keys, options in CSV_FILE_INDEXES}
    for title, names in PHASES:
        print(f"=== Creating {title} ===\n")
        for name in names:
            keys, options = definitions[name]
            print(f"Creating: {_label(options, keys)}")
            coll.create_index(list(keys), **options)
            print(f"Index {name} created successfully\n")


def report_ttl_index(coll: Collection, enabled: bool) -> None:
    keys, options = ttl_index()
    if enabled:
        print(f"Creating: {options['name']} (TTL)")
        coll.create_index(list(keys), **options)
        print(f"Index {options['name']} created successfully\n")
        return
    key_doc = json.dumps(dict(keys))
    print("// INDEX 5 (OPTIONAL): TTL Index")
    print("// Set INDEX_TTL_ENABLED=true ONLY if a retention policy is required\n")
    print(f"// db.{coll.name}.createIndex(")
    print(f"//   {key_doc},")
    print(f'//   {{ expireAfterSeconds: {options["expireAfterSeconds"]}, name: "{options["name"]}" }}')
    print("// );\n")


def print_index_list(coll: Collection) -> list[dict[str, Any]]:
    print("=== Verifying Index Creation ===\n")
    indexes = describe_indexes(coll)
    print(f"Total indexes: {len(indexes)}")
    print("\nIndex List:")
    for position, index in enumerate(indexes, start=1):
        print(f"\n{position}. {index['name']}")
        print(f"   Key: {json.dumps(index['key'])}")
        if index.get("unique"):
            print("   Unique: true")
        if index.get("expireAfterSeconds") is not None:
            print(f"   TTL: {index['expireAfterSeconds']} seconds")
    print("\n=== Index Creation Complete ===\n")
    return indexes


def print_reference(coll_name: str, ttl_enabled: bool) -> None:
    print("=== Sample Query Plans ===\n")
    print("1. Find by filename (should use idx_filename_exact):")
    print(f"   db.{coll_name}.find({{ filename: 'users.csv' }}).explain('executionStats')\n")
    print("2. List recent files with pagination (should use idx_uploadedAt_desc):")
    print(f"   db.{coll_name}.find().sort({{ uploadedAt: -1 }}).limit(50).explain('executionStats')\n")
    print("3. Range query on upload time:")
    print(f"   db.{coll_name}.find({{ uploadedAt: {{ $gte: ISODate('2026-01-01') }} }}).explain('executionStats')\n")

    print("=== Maintenance Commands ===\n")
    print("Check index usage statistics:")
    print(f"   db.{coll_name}.aggregate([ {{ $indexStats: {{}} }} ])\n")
    print("Check collection statistics:")
    print(f"   db.{coll_name}.stats()\n")
    print("Drop a specific index if needed:")
    print(f"   db.{coll_name}.dropIndex('idx_filename_exact')\n")

    print("=== Expected Index Summary ===\n")
    print("After running this script, you should have:")
    print("  _id_ (auto-created by MongoDB)")
    for keys, options in CSV_FILE_INDEXES:
        print(f"  {_label(options, keys)}")
    declared = len(CSV_FILE_INDEXES)
    if ttl_enabled:
        print(f"  {ttl_index()[1]['name']} (TTL)")
        declared += 1
    print(f"\nTotal: {declared} indexes + 1 auto-created = {declared + 1} indexes\n")


def main(coll: Optional[Collection] = None, ttl_enabled: Optional[bool] = None) -> list[dict[str, Any]]:
    configure_logging()
    coll = coll if coll is not None else csv_files()
    ttl_enabled = config.INDEX_TTL_ENABLED if ttl_enabled is None else ttl_enabled

    print(f"\n=== Creating indexes on {coll.full_name} ===\n")
    create_phase_indexes(coll)
    report_ttl_index(coll, ttl_enabled)
    indexes = print_index_list(coll)
    print_reference(coll.name, ttl_enabled)
    return indexes


if __name__ == "__main__":
    main()
