"""Pydantic model for event specification records."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class EventSpecificationRecord(BaseModel):
    """The specification document attached to one event definition.

    ``id`` is the owning event definition's id. ``spec_data`` is the raw
    document text (AsyncAPI, OpenAPI, ...); ``None`` means nothing has been
    attached yet, which is not the same as an empty document.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: UUID
    spec_data: str | None = None
