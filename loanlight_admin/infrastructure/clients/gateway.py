"""Remote Data Gateway interface and the query description shared by all backends"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

Row = Dict[str, Any]

# Supported filter operators (PostgREST names)
OPERATORS = ("eq", "neq", "gt", "gte", "lt", "lte", "in")


@dataclass(frozen=True)
class Filter:
    column: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class Query:
    """
    Immutable select description: table, columns, filters, ordering and limit.

    Built fluently, each call returns a new Query:

        Query("loans", ("amount",)).in_("status", ["ACTIVE", "DISBURSED"]).limit(5)
    """

    table: str
    columns: Tuple[str, ...] = ()
    filters: Tuple[Filter, ...] = ()
    order_by: Optional[str] = None
    descending: bool = False
    max_rows: Optional[int] = None

    def _where(self, column: str, op: str, value: Any) -> "Query":
        return replace(self, filters=self.filters + (Filter(column, op, value),))

    def eq(self, column: str, value: Any) -> "Query":
        return self._where(column, "eq", value)

    def neq(self, column: str, value: Any) -> "Query":
        return self._where(column, "neq", value)

    def gt(self, column: str, value: Any) -> "Query":
        return self._where(column, "gt", value)

    def gte(self, column: str, value: Any) -> "Query":
        return self._where(column, "gte", value)

    def lt(self, column: str, value: Any) -> "Query":
        return self._where(column, "lt", value)

    def lte(self, column: str, value: Any) -> "Query":
        return self._where(column, "lte", value)

    def in_(self, column: str, values: Sequence[Any]) -> "Query":
        return self._where(column, "in", tuple(values))

    def order(self, column: str, descending: bool = False) -> "Query":
        return replace(self, order_by=column, descending=descending)

    def limit(self, count: int) -> "Query":
        return replace(self, max_rows=count)


class DataGateway(Protocol):
    """
    Generic access to the remote relational store.

    Implementations raise GatewayError (or GatewayTimeoutError) on any backend
    failure and must let asyncio.CancelledError propagate.
    """

    async def select(self, query: Query) -> List[Row]:
        ...

    async def count(self, query: Query) -> int:
        ...

    async def insert(self, table: str, values: Row) -> Row:
        ...

    async def update(self, table: str, row_id: str, values: Row) -> Row:
        ...

    async def delete(self, table: str, row_id: str) -> None:
        ...


def table(name: str, *columns: str) -> Query:
    """Shorthand for Query(name, columns)"""
    return Query(name, tuple(columns))
