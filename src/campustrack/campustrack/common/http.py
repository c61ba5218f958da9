"""Shared helpers for the JSON controllers."""

from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, Mapping, Sequence

from flask import Flask, jsonify, request

from ..core.exceptions import (
    ConflictError,
    DomainError,
    MDCNotConfiguredError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from .app_logging import get_logger
from .datetime_utils import parse_iso_date

_logger = get_logger("campustrack.http")

_STATUS_BY_ERROR = (
    (ValidationError, 400, "INVALID"),
    (NotFoundError, 404, "NOT_FOUND"),
    (ConflictError, 409, "CONFLICT"),
    (MDCNotConfiguredError, 422, "MDC_NOT_CONFIGURED"),
    (StoreUnavailableError, 503, "STORE_UNAVAILABLE"),
)


def register_error_handlers(app: Flask) -> None:
    """Map domain errors to JSON error responses."""

    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        for error_type, status, code in _STATUS_BY_ERROR:
            if isinstance(error, error_type):
                break
        else:
            status, code = 400, "DOMAIN_ERROR"

        if status >= 500:
            _logger.error("store call failed", extra={"error_type": type(error).__name__, "error": str(error)})
        return jsonify({"error": str(error), "code": code}), status


def arg_date(name: str) -> date | None:
    value = request.args.get(name)
    return parse_iso_date(value) if value else None


def arg_int(name: str) -> int | None:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Missing JSON payload")
    return data


def csv_response(app: Flask, *, rows: Iterable[Mapping], fieldnames: Sequence[str], filename: str):
    """Write rows to a CSV attachment (UTF-8 with BOM so spreadsheets pick the encoding)."""

    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(fieldnames), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    csv_bytes = out.getvalue().encode("utf-8-sig")
    return app.response_class(
        csv_bytes,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
