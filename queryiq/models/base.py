"""Shared pydantic base for payloads handed to the model and the client."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python


def to_jsonable(value: Any) -> Any:
    """
    JSON-safe copy of driver values.

    Binary columns (bytea, BLOB) become hex strings, matching how MongoDB
    binary fields are normalised; types pydantic does not know (BSON
    Timestamp, Regex, MinKey) fall back to ``str()``.
    """
    return to_jsonable_python(value, bytes_mode="hex", fallback=str)


class CamelModel(BaseModel):
    """Model whose JSON form uses camelCase keys (``rowCount``, ``hasMore``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Dump to a JSON-safe dict with camelCase keys."""
        return to_jsonable(self.model_dump(by_alias=True))
