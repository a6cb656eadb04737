"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from specstore.db.models.event_specification import EventSpecificationRow

__all__ = [
    "EventSpecificationRow",
]
