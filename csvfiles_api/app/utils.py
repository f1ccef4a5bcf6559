from __future__ import annotations

from typing import Any, Iterable, Optional

from flask import jsonify, request
from marshmallow import ValidationError

from .config import config


def parse_pagination() -> tuple[int, int]:
    default = config.PAGINATION_DEFAULT
    page = max(request.args.get("page", 1, type=int) or 1, 1)
    page_size = request.args.get("page_size", default, type=int) or default
    page_size = max(1, min(page_size, config.PAGINATION_MAX))
    return page, page_size


def pagination_envelope(data: Iterable[Any], page: int, page_size: int, total: int):
    total_pages = (total + page_size - 1) // page_size if page_size else 1
    return jsonify(
        {
            "page": page,
            "page_size": page_size,
            "total_pages": total_pages,
            "total_items": total,
            "data": list(data),
        }
    )


def parse_sort(default: str = "_id") -> list[tuple[str, int]]:
    sort_param = request.args.get("sort", default)
    sort_fields: list[tuple[str, int]] = []
    for field in sort_param.split(","):
        direction = -1 if field.startswith("-") else 1
        field_name = field[1:] if field.startswith("-") else field
        if field_name:
            sort_fields.append((field_name, direction))
    return sort_fields or [("_id", 1)]


def error_response(code: str, message: str, status: int, details: Optional[list[dict[str, Any]]] = None):
    payload: dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        payload["error"]["details"] = details
    return jsonify(payload), status


def validation_details(exc: ValidationError) -> list[dict[str, Any]]:
    return [{"field": key, "issue": ", ".join(map(str, value))} for key, value in exc.messages.items()]
