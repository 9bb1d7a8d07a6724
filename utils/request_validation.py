"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from typing import Iterable, TypeVar

from flask import Request
from pydantic import BaseModel, ValidationError
from werkzeug.exceptions import BadRequest

from services.errors import InvalidFields

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(
                    ", ".join(sorted(missing))
                )
            )

    return data


def validate_payload(schema: type[SchemaT], payload: dict) -> SchemaT:
    """Validate ``payload`` against ``schema`` or raise ``InvalidFields``."""

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        details = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or None,
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        raise InvalidFields(details) from exc


def parse_form(req: Request, schema: type[SchemaT]) -> SchemaT:
    """Parse a JSON request body and validate it in one step."""

    return validate_payload(schema, parse_json_request(req, allow_empty=True))
