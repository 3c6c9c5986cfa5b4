"""Document-style store contract used by the booking core, and its SQL implementation.

The core only ever talks to collections by name. ``SqlStoreGateway`` maps each
collection onto a SQLModel table and runs every call through the caller's
``AsyncSession``, so one request sees its own writes.
"""

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from medbook.core.errors import NotFoundError, StoreError, ValidationError
from medbook.models import Booking, Doctor, Notification, Patient

logger = logging.getLogger(__name__)

BOOKINGS = "Bookings"
NOTIFICATIONS = "Notifications"
USERS = "Users"
DOCTORS = "Doctors"

COLLECTIONS: dict[str, type[SQLModel]] = {
    BOOKINGS: Booking,
    NOTIFICATIONS: Notification,
    USERS: Patient,
    DOCTORS: Doctor,
}


class StoreGateway(Protocol):
    async def insert(self, collection: str, document: Mapping[str, Any]) -> int: ...

    async def get(self, collection: str, doc_id: int) -> Any | None: ...

    async def query(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Any]: ...

    async def update(self, collection: str, doc_id: int, changes: Mapping[str, Any]) -> None: ...

    async def update_if(
        self,
        collection: str,
        doc_id: int,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> bool: ...

    async def delete(
        self, collection: str, doc_id: int, expected: Mapping[str, Any] | None = None
    ) -> bool: ...

    async def server_timestamp(self) -> datetime: ...


def _model(collection: str) -> type[SQLModel]:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}") from None


def _conditions(model: type[SQLModel], fields: Mapping[str, Any]) -> list[Any]:
    return [getattr(model, name) == value for name, value in fields.items()]


class SqlStoreGateway:
    """StoreGateway backed by SQLAlchemy's AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _guard(self, op: str, collection: str) -> AsyncIterator[None]:
        try:
            yield
        except IntegrityError as e:
            # Unknown doctor/patient or a missing field: bad input
            logger.info("Store %s on %s rejected: %s", op, collection, e.orig)
            raise ValidationError(f"{op} on {collection} violates a constraint") from e
        except SQLAlchemyError as e:
            logger.exception("Store %s on %s failed: %s", op, collection, e)
            raise StoreError(f"{op} on {collection} failed: {type(e).__name__}") from e

    async def insert(self, collection: str, document: Mapping[str, Any]) -> int:
        model = _model(collection)
        row = model(**dict(document))
        async with self._guard("insert", collection):
            self.session.add(row)
            await self.session.flush()
            # Pull server defaults (created_at) back into the instance
            await self.session.refresh(row)
        return row.id

    async def get(self, collection: str, doc_id: int) -> Any | None:
        model = _model(collection)
        # populate_existing: never serve a stale identity-map copy
        q = select(model).where(model.id == doc_id).execution_options(populate_existing=True)
        async with self._guard("get", collection):
            result = await self.session.execute(q)
            return result.scalar_one_or_none()

    async def query(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Any]:
        model = _model(collection)
        q = select(model).where(*_conditions(model, filters or {}))
        if order_by:
            col = getattr(model, order_by)
            # Ties fall back to insertion order
            if descending:
                q = q.order_by(col.desc(), model.id.desc())
            else:
                q = q.order_by(col, model.id)
        else:
            q = q.order_by(model.id)
        q = q.execution_options(populate_existing=True)
        async with self._guard("query", collection):
            result = await self.session.execute(q)
            return list(result.scalars().all())

    async def update(self, collection: str, doc_id: int, changes: Mapping[str, Any]) -> None:
        if not await self.update_if(collection, doc_id, {}, changes):
            raise NotFoundError(f"{collection}/{doc_id} not found")

    async def update_if(
        self,
        collection: str,
        doc_id: int,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> bool:
        """Single-statement compare-and-set: applies changes only when every expected field matches."""
        model = _model(collection)
        stmt = (
            update(model)
            .where(model.id == doc_id, *_conditions(model, expected))
            .values(**dict(changes))
            .execution_options(synchronize_session=False)
        )
        async with self._guard("update", collection):
            result = await self.session.execute(stmt)
            await self.session.flush()
        return (result.rowcount or 0) > 0

    async def delete(
        self, collection: str, doc_id: int, expected: Mapping[str, Any] | None = None
    ) -> bool:
        """Idempotent: deleting a missing row is not an error. Returns whether a row went away."""
        model = _model(collection)
        stmt = (
            delete(model)
            .where(model.id == doc_id, *_conditions(model, expected or {}))
            .execution_options(synchronize_session=False)
        )
        async with self._guard("delete", collection):
            result = await self.session.execute(stmt)
            await self.session.flush()
        return (result.rowcount or 0) > 0

    async def server_timestamp(self) -> datetime:
        async with self._guard("now", "server"):
            result = await self.session.execute(select(func.now()))
            return result.scalar_one()
