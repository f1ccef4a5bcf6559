"""Parsing and rendering of the ``id=..,email=..,name=..`` user CSV format."""

from __future__ import annotations

from typing import Any, Iterable


class CsvFormatError(ValueError):
    """Raised when a CSV line cannot be turned into a user row."""


def parse_line(line: str) -> dict[str, Any]:
    fields: dict[str, str] = {}
    for pair in line.split(","):
        key, sep, value = pair.partition("=")
        if sep:
            fields[key.strip()] = value.strip()
    try:
        return {
            "id": int(fields["id"]),
            "email": fields.get("email"),
            "name": fields.get("name"),
        }
    except (KeyError, ValueError) as exc:
        raise CsvFormatError(f"Invalid CSV format in line: {line}") from exc


def parse_csv(text: str) -> list[dict[str, Any]]:
    return [parse_line(line) for line in text.splitlines() if line.strip()]


def render_csv(users: Iterable[dict[str, Any]]) -> str:
    return "".join(
        f"id={user['id']},email={user.get('email') or ''},name={user.get('name') or ''}\n" for user in users
    )
