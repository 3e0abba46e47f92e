"""Client store access for the resolution engine.

The engine talks to persistence through the ClientStore protocol:

- find_exact(): fetch-first-results query over a filter
- stream(): forward-only cursor over a filtered record set, released
  when the context exits

SQLClientStore implements it on top of an async SQLAlchemy session.
"""

from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Protocol
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import Select, exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncResult, AsyncSession

from ..logging import get_context_logger
from ..models import ClientRecord, client_campaigns, clients
from .query import ClientFilter

logger = get_context_logger(__name__)


class StoreUnavailable(Exception):
    """The client store could not answer a query.

    Distinct from an empty result: the search did not run to completion.
    """


class ClientStore(Protocol):
    """Read-only, campaign-scoped access to client records."""

    async def find_exact(
        self, client_filter: ClientFilter, limit: int = 2
    ) -> list[ClientRecord]:
        ...

    def stream(
        self, client_filter: ClientFilter
    ) -> AsyncContextManager[AsyncIterator[ClientRecord]]:
        ...


class SQLClientStore:
    """ClientStore backed by the clients/client_campaigns tables."""

    def __init__(self, session: AsyncSession, batch_size: int = 100):
        self._session = session
        self.batch_size = batch_size

    def build_select(self, client_filter: ClientFilter) -> Select:
        """Translate a ClientFilter into a campaign-scoped SELECT."""
        membership = exists().where(
            client_campaigns.c.client_id == clients.c.id,
            client_campaigns.c.campaign_id == client_filter.campaign_id,
        )
        stmt = select(
            clients.c.id,
            clients.c.name,
            clients.c.firstname,
            clients.c.phone,
        ).where(membership)

        for pattern in client_filter.patterns:
            column = clients.c[pattern.field]
            stmt = stmt.where(
                column.regexp_match(
                    pattern.pattern,
                    flags="i" if pattern.case_insensitive else None,
                )
            )
        return stmt

    async def find_exact(
        self, client_filter: ClientFilter, limit: int = 2
    ) -> list[ClientRecord]:
        stmt = self.build_select(client_filter).limit(limit)
        try:
            result = await self._session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Exact client query failed: {e}")
            raise StoreUnavailable("Exact client query failed") from e
        try:
            return [self._to_record(row, client_filter.campaign_id) for row in rows]
        except ValidationError as e:
            logger.error(f"Corrupt client row: {e}")
            raise StoreUnavailable("Corrupt client row") from e

    @asynccontextmanager
    async def stream(
        self, client_filter: ClientFilter
    ) -> AsyncIterator[AsyncIterator[ClientRecord]]:
        stmt = self.build_select(client_filter).execution_options(
            yield_per=self.batch_size
        )
        try:
            result = await self._session.stream(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Opening client cursor failed: {e}")
            raise StoreUnavailable("Opening client cursor failed") from e

        records = self._iter_records(result, client_filter.campaign_id)
        try:
            yield records
        finally:
            await records.aclose()
            await result.close()

    async def _iter_records(
        self, result: AsyncResult, campaign_id: UUID
    ) -> AsyncIterator[ClientRecord]:
        try:
            async for row in result:
                yield self._to_record(row, campaign_id)
        except SQLAlchemyError as e:
            logger.error(f"Client cursor failed mid-stream: {e}")
            raise StoreUnavailable("Client cursor failed mid-stream") from e
        except ValidationError as e:
            logger.error(f"Corrupt client row: {e}")
            raise StoreUnavailable("Corrupt client row") from e

    @staticmethod
    def _to_record(row, campaign_id: UUID) -> ClientRecord:
        return ClientRecord(
            id=row.id,
            name=row.name,
            firstname=row.firstname,
            phone=row.phone,
            campaign_ids=frozenset({campaign_id}),
        )
