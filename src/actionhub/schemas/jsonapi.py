"""JSON:API response envelopes using Pydantic v2.

Discovery endpoints return catalog records as JSON:API resources so every
response shares the data/type/id/attributes structure.

Reference: https://jsonapi.org/format/
"""

from typing import Any

from pydantic import BaseModel


class JSONAPIResource(BaseModel):
    """A single JSON:API resource object with type, id, and attributes."""

    type: str
    id: str
    attributes: dict[str, Any]


class JSONAPISingleResponse(BaseModel):
    """JSON:API response envelope containing a single resource."""

    data: JSONAPIResource


class JSONAPIListResponse(BaseModel):
    """JSON:API response envelope containing a list of resources."""

    data: list[JSONAPIResource]
    meta: dict[str, Any] | None = None
