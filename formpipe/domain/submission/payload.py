"""Decoding of raw submission bodies into SubmittedFields.

Expected shape::

    {"replyTo": "a@example.com", "fields": [{"key": "subject", "value": "Hi"}]}

Entries without a ``key`` or ``value`` are skipped. Everything else that does not
fit the shape raises MalformedRequestError, which the caller reports before the
rate check runs.
"""

import json
from typing import Any, Dict, Union

from formpipe.core.exceptions import MalformedRequestError

REPLY_TO_FIELD = "replyTo"

SubmittedFields = Dict[str, str]


def decode_body(body: Union[bytes, str]) -> Any:
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedRequestError(detail=f"Body is not valid JSON: {e}") from e


def parse_submission(payload: Any) -> SubmittedFields:
    """Turn a decoded JSON payload (or raw body) into a field map.

    Args:
        payload: Raw request body as bytes/str, or an already decoded object.

    Returns:
        SubmittedFields: Field name to value; always contains ``replyTo``.

    Raises:
        MalformedRequestError: If the payload does not have the expected shape.
    """
    if isinstance(payload, (bytes, str)):
        payload = decode_body(payload)

    if not isinstance(payload, dict) or not payload:
        raise MalformedRequestError(detail="Body must be a non-empty JSON object")

    reply_to = payload.get(REPLY_TO_FIELD, "")
    if reply_to is None:
        reply_to = ""
    if not isinstance(reply_to, str):
        raise MalformedRequestError(detail="replyTo must be a string")

    fields: SubmittedFields = {REPLY_TO_FIELD: reply_to}

    entries = payload.get("fields", [])
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        raise MalformedRequestError(detail="fields must be a list")

    for entry in entries:
        if not isinstance(entry, dict):
            raise MalformedRequestError(detail="Each field entry must be an object")
        key, value = entry.get("key"), entry.get("value")
        if key is None or value is None:
            continue
        if not isinstance(key, str) or not isinstance(value, str):
            raise MalformedRequestError(detail="Field keys and values must be strings")
        fields[key] = value

    return fields
