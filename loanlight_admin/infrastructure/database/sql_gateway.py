"""SQLAlchemy implementation of the Remote Data Gateway (direct database access)"""

import enum
import uuid
from typing import Any, List

from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from loanlight_admin.domain.exceptions import GatewayError, NotFoundError
from loanlight_admin.infrastructure.clients.gateway import Filter, Query, Row
from loanlight_admin.infrastructure.database.models import Base
from loanlight_admin.infrastructure.observability.metrics import gateway_latency_histogram


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _condition(table: Table, item: Filter):
    column = table.c[item.column]
    value = _plain(item.value)
    if item.op == "eq":
        return column.is_(None) if value is None else column == value
    if item.op == "neq":
        return column.is_not(None) if value is None else column != value
    if item.op == "gt":
        return column > value
    if item.op == "gte":
        return column >= value
    if item.op == "lt":
        return column < value
    if item.op == "lte":
        return column <= value
    return column.in_(value)


class SqlGateway:
    """
    Gateway over a SQLAlchemy session factory.

    Blocking database calls run in the threadpool so the event loop stays free.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError as e:
            raise GatewayError(f"Unknown table: {name}") from e

    async def _run(self, operation: str, table: str, fn):
        def work():
            with gateway_latency_histogram.labels(operation=operation, table=table).time():
                with self.session_factory() as db:
                    try:
                        result = fn(db)
                        db.commit()
                        return result
                    except SQLAlchemyError as e:
                        db.rollback()
                        raise GatewayError(f"Database error on {operation} {table}: {e}") from e

        return await run_in_threadpool(work)

    async def select(self, query: Query) -> List[Row]:
        table = self._table(query.table)
        columns = [table.c[name] for name in query.columns] if query.columns else [table]
        stmt = select(*columns).where(*[_condition(table, f) for f in query.filters])
        if query.order_by:
            order_column = table.c[query.order_by]
            stmt = stmt.order_by(order_column.desc() if query.descending else order_column.asc())
        if query.max_rows is not None:
            stmt = stmt.limit(query.max_rows)

        def fn(db: Session) -> List[Row]:
            return [dict(row._mapping) for row in db.execute(stmt)]

        return await self._run("SELECT", query.table, fn)

    async def count(self, query: Query) -> int:
        table = self._table(query.table)
        stmt = select(func.count()).select_from(table).where(*[_condition(table, f) for f in query.filters])
        return await self._run("COUNT", query.table, lambda db: db.execute(stmt).scalar_one())

    async def insert(self, table: str, values: Row) -> Row:
        target = self._table(table)
        payload = {key: _plain(value) for key, value in values.items()}
        payload.setdefault("id", str(uuid.uuid4()))

        def fn(db: Session) -> Row:
            db.execute(insert(target).values(**payload))
            return dict(db.execute(select(target).where(target.c.id == payload["id"])).one()._mapping)

        return await self._run("INSERT", table, fn)

    async def update(self, table: str, row_id: str, values: Row) -> Row:
        target = self._table(table)
        payload = {key: _plain(value) for key, value in values.items()}

        def fn(db: Session) -> Row:
            db.execute(update(target).where(target.c.id == row_id).values(**payload))
            row = db.execute(select(target).where(target.c.id == row_id)).one_or_none()
            if row is None:
                raise NotFoundError(f"No {table} row with id {row_id}")
            return dict(row._mapping)

        return await self._run("UPDATE", table, fn)

    async def delete(self, table: str, row_id: str) -> None:
        target = self._table(table)
        await self._run("DELETE", table, lambda db: db.execute(delete(target).where(target.c.id == row_id)))
