"""Boundary parsing for operation batches.

Raw operation lists arrive as JSON produced by an external planner. This
module validates the envelope once with jsonschema and turns every item into
either a typed ``Operation`` or an ``InvalidOperation`` marker, so the apply
engine never re-checks field shapes.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match
from pydantic import TypeAdapter, ValidationError

from codeforge_apply.core.constants import UNKNOWN_PATH
from codeforge_apply.core.errors import ShapeError
from codeforge_apply.core.schemas import (
    CreateOperation,
    DeleteOperation,
    InvalidOperation,
    Operation,
    UpdateOperation,
)

__all__ = [
    "EMIT_FILES_SCHEMA",
    "load_payload",
    "parse_operation",
    "parse_operations",
]

#: Envelope accepted from the planner. Items are only required to be objects;
#: their fields are validated per item so one bad entry fails in position.
EMIT_FILES_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "projectId": {"type": "string"},
        "operations": {
            "type": "array",
            "items": {"type": "object"},
        },
    },
    "required": ["operations"],
}

_ENVELOPE_VALIDATOR = Draft202012Validator(EMIT_FILES_SCHEMA)
_OPERATION_ADAPTER: TypeAdapter[Operation] = TypeAdapter(Operation)


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "operation"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_operation(raw: Any) -> Operation | InvalidOperation:
    """Validate a single raw operation mapping.

    Args:
        raw: Decoded JSON value for one operation

    Returns:
        The typed operation, or an InvalidOperation describing the problem
    """
    if isinstance(
        raw, (CreateOperation, UpdateOperation, DeleteOperation, InvalidOperation)
    ):
        return raw
    try:
        return _OPERATION_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        path = UNKNOWN_PATH
        action = None
        if isinstance(raw, dict):
            if isinstance(raw.get("path"), str) and raw["path"]:
                path = raw["path"]
            if isinstance(raw.get("action"), str):
                action = raw["action"]
        return InvalidOperation(path=path, action=action, reason=_summarize(exc))


def parse_operations(raw_items: Iterable[Any]) -> list[Operation | InvalidOperation]:
    """Validate a sequence of raw operations, preserving order."""
    return [parse_operation(raw) for raw in raw_items]


def load_payload(text: str) -> tuple[str | None, list[Operation | InvalidOperation]]:
    """Parse an emit-files JSON payload.

    Accepts either ``{"projectId": ..., "operations": [...]}`` or a bare JSON
    array of operations.

    Args:
        text: Raw JSON text

    Returns:
        Tuple of (project id or None, parsed operations)

    Raises:
        ShapeError: If the text is not JSON or the envelope is malformed; an
            operation that is not an object is reported with its index
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ShapeError(f"payload is not valid JSON: {exc.msg}") from exc

    if isinstance(data, list):
        data = {"operations": data}

    first = best_match(_ENVELOPE_VALIDATOR.iter_errors(data))
    if first is not None:
        location = list(first.absolute_path)
        index = location[1] if len(location) > 1 else None
        if location[:1] == ["operations"] and isinstance(index, int):
            raise ShapeError(first.message, index=index)
        where = "/".join(str(p) for p in location) or "payload"
        raise ShapeError(f"{where}: {first.message}")

    return data.get("projectId"), parse_operations(data["operations"])
