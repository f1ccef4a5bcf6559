from __future__ import annotations

from typing import Any, Optional

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from ..records import find_by_filename, replace_users
from ..utils import error_response, validation_details
from ..validators import UserSchema, UserUpdateSchema

users_bp = Blueprint("users", __name__, url_prefix="/api/v1/files/<filename>/users")


def _conflict():
    return error_response("CONFLICT", "File was modified concurrently, retry the request", 409)


def _find_user(users: list[dict[str, Any]], user_id: int) -> Optional[dict[str, Any]]:
    return next((user for user in users if user.get("id") == user_id), None)


@users_bp.get("")
def list_users(filename: str):
    doc = find_by_filename(filename)
    if not doc:
        return error_response("NOT_FOUND", "File not found", 404)
    users = doc.get("users") or []
    return jsonify({"filename": filename, "count": len(users), "users": users})


@users_bp.post("")
def create_user(filename: str):
    data = request.get_json(silent=True) or {}
    try:
        payload = UserSchema().load(data)
    except ValidationError as exc:
        return error_response("VALIDATION_ERROR", "Invalid user payload", 422, validation_details(exc))

    doc = find_by_filename(filename)
    if not doc:
        return error_response("NOT_FOUND", "File not found", 404)
    users = doc.get("users") or []
    if _find_user(users, payload["id"]):
        return error_response("DUPLICATE", f"User with ID {payload['id']} already exists", 409)

    user = {"id": payload["id"], "email": payload["email"], "name": payload["name"]}
    if replace_users(filename, users + [user], doc.get("lastModified")) is None:
        return _conflict()
    return jsonify(user), 201


def _update_user(filename: str, user_id: int, partial: bool):
    data = request.get_json(silent=True) or {}
    try:
        payload = UserUpdateSchema(partial=partial).load(data)
    except ValidationError as exc:
        return error_response("VALIDATION_ERROR", "Invalid user payload", 422, validation_details(exc))

    doc = find_by_filename(filename)
    if not doc:
        return error_response("NOT_FOUND", "File not found", 404)
    users = doc.get("users") or []
    user = _find_user(users, user_id)
    if user is None:
        return error_response("NOT_FOUND", f"User with ID {user_id} not found", 404)

    user.update(payload)
    if replace_users(filename, users, doc.get("lastModified")) is None:
        return _conflict()
    return jsonify(user)


@users_bp.put("/<int(signed=True):user_id>")
def update_user(filename: str, user_id: int):
    return _update_user(filename, user_id, partial=False)


@users_bp.patch("/<int(signed=True):user_id>")
def patch_user(filename: str, user_id: int):
    return _update_user(filename, user_id, partial=True)


@users_bp.delete("/<int(signed=True):user_id>")
def delete_user(filename: str, user_id: int):
    doc = find_by_filename(filename)
    if not doc:
        return error_response("NOT_FOUND", "File not found", 404)
    users = doc.get("users") or []
    remaining = [user for user in users if user.get("id") != user_id]
    if len(remaining) == len(users):
        return error_response("NOT_FOUND", f"User with ID {user_id} not found", 404)

    if replace_users(filename, remaining, doc.get("lastModified")) is None:
        return _conflict()
    return ("", 204)
