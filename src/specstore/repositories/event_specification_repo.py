"""Event specification repository."""

import logging
from collections.abc import AsyncIterator, Iterable
from uuid import UUID

from sqlalchemy import Integer, Text, func, insert, literal, null, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from specstore.config import settings
from specstore.db.lob import LargeObjectHandle
from specstore.db.mapper import SpecificationRecordMapper
from specstore.db.models.event_specification import EventSpecificationRow
from specstore.errors.exceptions import EncodingError, NotFoundError
from specstore.logging_config import bind_context, unbind_context
from specstore.models.specification import EventSpecificationRecord
from specstore.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

RESOURCE = "EventSpecification"


class EventSpecificationRepository(BaseRepository):
    def __init__(self, session: AsyncSession, mapper: SpecificationRecordMapper | None = None):
        super().__init__(session, EventSpecificationRow)
        self.mapper = mapper or SpecificationRecordMapper()

    async def _get_row(self, spec_id: UUID) -> EventSpecificationRow | None:
        return await self.get_by_id("id", spec_id)

    async def get(self, spec_id: UUID) -> EventSpecificationRecord | None:
        row = await self._get_row(spec_id)
        if row is None:
            return None
        return self.mapper.from_row(row)

    async def create(self, record: EventSpecificationRecord) -> EventSpecificationRecord:
        """Insert a new row.

        Goes straight to the database, so a duplicate id is always rejected
        by the primary key (``IntegrityError``) rather than by the session.
        """
        row = self.mapper.to_row(record)
        stmt = insert(EventSpecificationRow).values(id=row.id, spec_data=row.spec_data)
        await self.session.execute(stmt)
        logger.debug("Created event specification %s", record.id)
        return record

    async def update_spec_data(self, spec_id: UUID, spec_data: str | None) -> EventSpecificationRecord:
        row = await self._get_row(spec_id)
        if row is None:
            raise NotFoundError(RESOURCE, str(spec_id))
        self.mapper.apply(EventSpecificationRecord(id=spec_id, spec_data=spec_data), row)
        await self.session.flush()
        return self.mapper.from_row(row)

    async def list_by_ids(self, spec_ids: list[UUID]) -> list[EventSpecificationRecord]:
        rows = await self.list_by_field_in("id", spec_ids)
        return [self.mapper.from_row(row) for row in rows]

    async def list_for_event(self, event_definition_id: UUID) -> list[EventSpecificationRecord]:
        """All specification records of one event definition.

        Rows are keyed by the event definition id, so this returns at most
        one record for now. Callers should still treat it as a sequence.
        """
        record = await self.get(event_definition_id)
        return [record] if record is not None else []

    async def stream_spec_data(self, spec_id: UUID, chunk_size: int | None = None) -> AsyncIterator[str]:
        """Yield the payload in windows of ``chunk_size`` characters.

        Each window is fetched with its own ``substr`` query, so the whole
        payload is never held in memory. Yields nothing for an absent payload
        and a single empty string for an empty one.
        """
        chunk_size = chunk_size or settings.lob_chunk_size
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")

        length_stmt = select(func.length(EventSpecificationRow.spec_data, type_=Integer)).where(
            EventSpecificationRow.id == spec_id
        )
        result = await self.session.execute(length_stmt)
        found = result.one_or_none()
        if found is None:
            raise NotFoundError(RESOURCE, str(spec_id))

        total = found[0]
        if total is None:
            return
        if total == 0:
            yield ""
            return

        for offset in range(0, total, chunk_size):
            window = select(
                func.substr(EventSpecificationRow.spec_data, offset + 1, chunk_size, type_=Text)
            ).where(EventSpecificationRow.id == spec_id)
            chunk = (await self.session.execute(window)).scalar_one()
            yield self.mapper.decode_payload(LargeObjectHandle(chunk))

    async def write_spec_stream(self, spec_id: UUID, chunks: Iterable[str]) -> int:
        """Replace the payload by appending chunks in place.

        Zero chunks store NULL and a single empty chunk stores ``''``, the
        inverse of ``stream_spec_data``. The rewrite runs in a savepoint, so
        a chunk that fails to encode leaves the previous payload untouched.
        Returns the number of characters written.
        """
        # Pending changes on the row must land before the in-place updates.
        await self.session.flush()

        bind_context(event_definition_id=str(spec_id))
        try:
            async with self.session.begin_nested():
                written = await self._rewrite_spec_data(spec_id, chunks)
            logger.debug("Streamed %d characters into event specification %s", written, spec_id)
        finally:
            unbind_context("event_definition_id")

        return written

    async def _rewrite_spec_data(self, spec_id: UUID, chunks: Iterable[str]) -> int:
        reset = (
            update(EventSpecificationRow)
            .where(EventSpecificationRow.id == spec_id)
            .values(spec_data=null())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(reset)
        if result.rowcount == 0:
            raise NotFoundError(RESOURCE, str(spec_id))

        written = 0
        for chunk in chunks:
            if chunk is None:
                raise EncodingError("Specification stream chunks must be text")
            handle = self.mapper.encode_payload(chunk)
            current = func.coalesce(EventSpecificationRow.spec_data, literal("", Text), type_=Text)
            append = (
                update(EventSpecificationRow)
                .where(EventSpecificationRow.id == spec_id)
                .values(spec_data=current.concat(literal(handle.read(), Text)))
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(append)
            written += handle.char_length
        return written
