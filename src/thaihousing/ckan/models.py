"""Data models for CKAN datastore responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DatastoreField(BaseModel):
    """Column description returned alongside datastore records."""

    id: str
    type: str = "text"


class DatastoreResult(BaseModel):
    """The ``result`` object of a datastore_search / datastore_search_sql call."""

    model_config = {"extra": "allow"}

    records: list[dict[str, Any]] = Field(default_factory=list)
    fields: list[DatastoreField] = Field(default_factory=list)
    total: int | None = None
    resource_id: str | None = None
    sql: str | None = None
