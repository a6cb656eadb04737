"""Event specification table.

Shares ``event_api_definitions`` with the event definitions that own the
rows; only the id and the specification payload are mapped here.
"""

from uuid import UUID

from sqlalchemy.orm import Mapped, mapped_column

from specstore.db.base import Base
from specstore.db.lob import LargeObjectHandle
from specstore.db.types import GUID, LargeText


class EventSpecificationRow(Base):
    __tablename__ = "event_api_definitions"

    id: Mapped[UUID] = mapped_column(GUID, primary_key=True)
    spec_data: Mapped[LargeObjectHandle | None] = mapped_column("spec_data", LargeText, nullable=True)
