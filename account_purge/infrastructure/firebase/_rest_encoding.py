"""Encode/decode Python values to/from Firestore REST API formats.

Covers document ``fields`` values, the write objects sent to
``documents:commit`` (delete and field-transform writes), and document
names (``projects/p/databases/(default)/documents/<path>``).
"""

import base64
from datetime import datetime
from typing import Any

from account_purge.application.dtos.account_deletion import (
    ArrayRemove,
    FieldChange,
    Increment,
)


def encode_value(v: Any) -> dict:
    if v is None:
        return {"nullValue": None}
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, datetime):
        return {"timestampValue": v.strftime("%Y-%m-%dT%H:%M:%S.%fZ")}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, bytes):
        return {"bytesValue": base64.standard_b64encode(v).decode("ascii")}
    if isinstance(v, list):
        return {"arrayValue": {"values": [encode_value(x) for x in v]}}
    if isinstance(v, dict):
        return {"mapValue": {"fields": {k: encode_value(x) for k, x in v.items()}}}
    raise TypeError(f"Unsupported Firestore value type: {type(v)}")


def decode_value(obj: dict) -> Any:
    if "nullValue" in obj:
        return None
    if "booleanValue" in obj:
        return obj["booleanValue"]
    if "integerValue" in obj:
        return int(obj["integerValue"])
    if "doubleValue" in obj:
        return obj["doubleValue"]
    if "timestampValue" in obj:
        return datetime.fromisoformat(obj["timestampValue"].replace("Z", "+00:00"))
    if "stringValue" in obj:
        return obj["stringValue"]
    if "referenceValue" in obj:
        return obj["referenceValue"]
    if "bytesValue" in obj:
        return base64.standard_b64decode(obj["bytesValue"])
    if "arrayValue" in obj:
        vals = obj.get("arrayValue", {}).get("values") or []
        return [decode_value(x) for x in vals]
    if "mapValue" in obj:
        fields = obj["mapValue"].get("fields") or {}
        return {k: decode_value(x) for k, x in fields.items()}
    return None


def decode_fields(fields: dict | None) -> dict:
    """Convert a REST Document's ``fields`` map to a Python dict."""
    if not fields:
        return {}
    return {k: decode_value(v) for k, v in fields.items()}


def relative_path(name: str, documents_root: str) -> str:
    """Strip the database prefix from a full document name."""
    prefix = documents_root.rstrip("/") + "/"
    return name[len(prefix):] if name.startswith(prefix) else name


def encode_field_transform(change: FieldChange) -> dict:
    """Convert one field change to a REST FieldTransform."""
    if isinstance(change, ArrayRemove):
        return {
            "fieldPath": change.field,
            "removeAllFromArray": {"values": [encode_value(change.value)]},
        }
    if isinstance(change, Increment):
        return {"fieldPath": change.field, "increment": encode_value(change.amount)}
    raise TypeError(f"Unsupported field change: {change!r}")


def delete_write(document_name: str) -> dict:
    """REST Write that deletes a document (no precondition: absent is a no-op)."""
    return {"delete": document_name}


def transform_write(document_name: str, changes: list[FieldChange]) -> dict:
    """REST Write that applies server-side transforms to an existing document.

    The ``exists`` precondition keeps a transform from creating a stub
    document when the target disappeared between query and commit.
    """
    return {
        "transform": {
            "document": document_name,
            "fieldTransforms": [encode_field_transform(c) for c in changes],
        },
        "currentDocument": {"exists": True},
    }
