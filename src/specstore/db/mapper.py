"""Translation between event specification records and table rows."""

from uuid import UUID

from specstore.db.lob import LargeObjectHandle, decode_payload, encode_payload
from specstore.db.models.event_specification import EventSpecificationRow
from specstore.db.types import decode_identifier, encode_identifier
from specstore.errors.exceptions import EncodingError
from specstore.models.specification import EventSpecificationRecord


class SpecificationRecordMapper:
    """Map ``EventSpecificationRecord`` to ``EventSpecificationRow`` and back.

    The identifier codec is the one registered on the ``GUID`` column type,
    so rows built here bind exactly the values returned by
    ``encode_identifier``. The mapper is stateless and safe to share.
    """

    def encode_identifier(self, value: UUID) -> str:
        return encode_identifier(value)

    def decode_identifier(self, value) -> UUID:
        return decode_identifier(value)

    def encode_payload(self, text: str | None) -> LargeObjectHandle:
        return encode_payload(text)

    def decode_payload(self, handle: LargeObjectHandle | None) -> str | None:
        return decode_payload(handle)

    def to_row(self, record: EventSpecificationRecord) -> EventSpecificationRow:
        # Boundary check only; the GUID column type encodes again at bind time.
        self.encode_identifier(record.id)
        return EventSpecificationRow(
            id=record.id,
            spec_data=self.encode_payload(record.spec_data),
        )

    def from_row(self, row: EventSpecificationRow) -> EventSpecificationRecord:
        return EventSpecificationRecord(
            id=self.decode_identifier(row.id),
            spec_data=self.decode_payload(row.spec_data),
        )

    def apply(self, record: EventSpecificationRecord, row: EventSpecificationRow) -> EventSpecificationRow:
        """Copy a revised payload onto an existing row."""
        if self.encode_identifier(record.id) != self.encode_identifier(row.id):
            raise EncodingError(
                "Identifiers are immutable",
                details={"row_id": str(row.id), "record_id": str(record.id)},
            )
        row.spec_data = self.encode_payload(record.spec_data)
        return row
