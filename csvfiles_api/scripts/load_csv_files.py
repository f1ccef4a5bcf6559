"""Import every ``*.csv`` file in a directory into the CSV files collection.

Usage: python -m csvfiles_api.scripts.load_csv_files [directory]
"""

from __future__ import annotations

import pathlib
import sys
from typing import Optional

from csvfiles_api.app import configure_logging
from csvfiles_api.app.csv_format import CsvFormatError
from csvfiles_api.app.db import ensure_indexes
from csvfiles_api.app.records import save_upload


def import_file(path: pathlib.Path) -> None:
    try:
        text = path.read_text(encoding="utf-8")
        doc, created = save_upload(path.name, text)
    except (UnicodeDecodeError, CsvFormatError) as exc:
        print(f"Skipping {path.name}: {exc}")
        return
    action = "Imported" if created else "Updated"
    print(f"{action} {path.name} with {len(doc['users'])} users")


def main(argv: Optional[list[str]] = None) -> None:
    configure_logging()
    args = sys.argv[1:] if argv is None else argv
    base_path = pathlib.Path(args[0]) if args else pathlib.Path.cwd()
    if not base_path.is_dir():
        print(f"Skipping import: {base_path} is not a directory")
        return

    ensure_indexes()
    for path in sorted(base_path.glob("*.csv")):
        import_file(path)


if __name__ == "__main__":
    main()
