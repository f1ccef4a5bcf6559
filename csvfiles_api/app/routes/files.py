from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from werkzeug.utils import secure_filename

from ..csv_format import CsvFormatError
from ..db import csv_files
from ..records import delete_by_filename, file_info, find_by_filename, save_upload
from ..utils import error_response, pagination_envelope, parse_pagination, parse_sort

files_bp = Blueprint("files", __name__, url_prefix="/api/v1/files")

ALLOWED_CONTENT_TYPES = {"text/csv", "text/plain"}
SORTABLE_FIELDS = {"_id", "filename", "uploadedAt", "lastModified"}


@files_bp.post("")
def upload_file():
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return error_response("VALIDATION_ERROR", "A file with a filename is required", 422)
    filename = secure_filename(upload.filename)
    if not filename:
        return error_response("VALIDATION_ERROR", "Filename contains no usable characters", 422)
    if upload.mimetype not in ALLOWED_CONTENT_TYPES:
        return error_response("VALIDATION_ERROR", "Only text/csv or text/plain files are allowed", 422)

    raw = upload.read()
    if not raw:
        return error_response("VALIDATION_ERROR", "File is empty", 422)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        return error_response("VALIDATION_ERROR", "File must be UTF-8 encoded", 422)

    try:
        doc, created = save_upload(filename, text)
    except CsvFormatError as exc:
        return error_response("INVALID_CSV", str(exc), 422)
    return jsonify(file_info(doc)), 201 if created else 200


@files_bp.get("")
def list_files():
    page, page_size = parse_pagination()
    sort_spec = parse_sort("-uploadedAt")
    unknown = [field for field, _ in sort_spec if field not in SORTABLE_FIELDS]
    if unknown:
        details = [{"field": "sort", "issue": f"cannot sort by {field}"} for field in unknown]
        return error_response("VALIDATION_ERROR", "Invalid sort parameter", 422, details)

    coll = csv_files()
    total = coll.count_documents({})
    cursor = coll.find({}, {"csvContent": 0}).sort(sort_spec)
    items = cursor.skip((page - 1) * page_size).limit(page_size)
    return pagination_envelope((file_info(doc) for doc in items), page, page_size, total)


@files_bp.get("/<filename>")
def get_file(filename: str):
    doc = find_by_filename(filename)
    if not doc:
        return error_response("NOT_FOUND", "File not found", 404)
    return jsonify(file_info(doc))


@files_bp.get("/<filename>/content")
def get_file_content(filename: str):
    doc = find_by_filename(filename)
    if not doc:
        return error_response("NOT_FOUND", "File not found", 404)
    return Response(doc.get("csvContent", ""), mimetype="text/csv")


@files_bp.delete("/<filename>")
def delete_file(filename: str):
    if not delete_by_filename(filename):
        return error_response("NOT_FOUND", "File not found", 404)
    return ("", 204)
