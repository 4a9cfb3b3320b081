"""Conversion between tenant records and protobuf Struct messages."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from google.protobuf import json_format
from google.protobuf.struct_pb2 import Struct

from iam.domain.entities import Tenant


def to_struct(fields: Mapping[str, Any]) -> Struct:
    """Build a Struct from a mapping, dropping None values."""
    message = Struct()
    message.update({key: value for key, value in fields.items() if value is not None})
    return message


def from_struct(message: Struct) -> dict[str, Any]:
    return json_format.MessageToDict(message)


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def tenant_from_dict(data: Mapping[str, Any]) -> Tenant:
    """Map a tenant document to the domain type.

    Raises:
        KeyError: If the document has no id
    """
    return Tenant(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        created_at=_parse_timestamp(data.get("createdAt")),
        updated_at=_parse_timestamp(data.get("updatedAt")),
    )
