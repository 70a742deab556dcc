import asyncio
import logging
import sqlite3
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

import databases
import sqlalchemy
from databases.core import Connection
from sqlalchemy.exc import SQLAlchemyError

from .cancellation import CancelToken
from .errors import StoreUnavailable
from .page_request import Direction

logger = logging.getLogger(__name__)

N = TypeVar("N")
T = TypeVar("T")

STORE_ERRORS: Tuple[Type[BaseException], ...] = (
    SQLAlchemyError,
    sqlite3.Error,
    OSError,
    asyncio.TimeoutError,
)


class TableStore(Generic[N]):
    """
    `OrderedStore` over a sqlalchemy table, queried through `databases`.

    `order_by` names the columns making up the ordering key. With more than one
    column the key is a tuple compared as a row value, e.g. `(price, id)`, which
    needs a unique column last to be a strict total order. `where` is the caller's
    filter and applies to counts and fetches alike. `key` must return, for a node
    built by `to_node`, the same value the ordering columns hold for its row.

    Driver errors vary by backend; pass extra exception types in `errors` to have
    them reported as `StoreUnavailable` too.
    """

    def __init__(
        self,
        database: databases.Database,
        table: sqlalchemy.Table,
        order_by: Sequence[str],
        to_node: Callable[[Any], N],
        key: Callable[[N], Any],
        where: Optional[sqlalchemy.ColumnElement] = None,
        errors: Tuple[Type[BaseException], ...] = (),
    ) -> None:
        if not order_by:
            raise ValueError("order_by needs at least one column")
        self._database = database
        self._table = table
        self._columns = [table.c[name] for name in order_by]
        self._to_node = to_node
        self._key = key
        self._where = where
        self._errors = STORE_ERRORS + errors

    def ordering_key(self, node: N) -> Any:
        return self._key(node)

    def _key_expression(self) -> Any:
        if len(self._columns) == 1:
            return self._columns[0]
        return sqlalchemy.tuple_(*self._columns)

    def _key_value(self, key: Any) -> Any:
        if len(self._columns) == 1:
            return key
        return sqlalchemy.tuple_(*key)

    def _beyond(self, key: Any, direction: Direction) -> sqlalchemy.ColumnElement:
        if direction is Direction.FORWARD:
            return self._key_expression() > self._key_value(key)
        return self._key_expression() < self._key_value(key)

    def _filtered(self, query: sqlalchemy.Select) -> sqlalchemy.Select:
        if self._where is not None:
            query = query.where(self._where)
        return query

    async def _run(
        self, call: Callable[[Connection], Awaitable[T]], token: CancelToken
    ) -> T:
        token.raise_if_cancelled()
        if not self._database.is_connected:
            raise StoreUnavailable(f"Database for `{self._table.name}` is not connected")
        try:
            async with self._database.connection() as connection:
                return await call(connection)
        except self._errors as e:
            logger.warning("Query against `%s` failed: %r", self._table.name, e)
            raise StoreUnavailable(f"Could not read `{self._table.name}`: {e}") from e

    async def count(self, token: CancelToken) -> int:
        query = self._filtered(
            sqlalchemy.select(sqlalchemy.func.count()).select_from(self._table)
        )

        async def call(connection: Connection) -> int:
            return int(await connection.fetch_val(query=query))

        return await self._run(call, token)

    async def _fetch(self, query: sqlalchemy.Select, token: CancelToken) -> List[N]:
        async def call(connection: Connection) -> List[N]:
            rows = await connection.fetch_all(query=query)
            return [self._to_node(row) for row in rows]

        return await self._run(call, token)

    async def fetch_forward(
        self, after_key: Optional[Any], limit: int, token: CancelToken
    ) -> List[N]:
        query = self._filtered(self._table.select())
        if after_key is not None:
            query = query.where(self._beyond(after_key, Direction.FORWARD))
        query = query.order_by(*self._columns).limit(limit)
        return await self._fetch(query, token)

    async def fetch_backward(
        self, before_key: Optional[Any], limit: int, token: CancelToken
    ) -> List[N]:
        """
        Reads the rows closest to `before_key` in descending order, then flips them
        back to ascending.
        """
        query = self._filtered(self._table.select())
        if before_key is not None:
            query = query.where(self._beyond(before_key, Direction.BACKWARD))
        query = query.order_by(*(column.desc() for column in self._columns)).limit(limit)
        nodes = await self._fetch(query, token)
        nodes.reverse()
        return nodes

    async def exists_beyond(
        self, key: Any, direction: Direction, token: CancelToken
    ) -> bool:
        query = self._filtered(
            sqlalchemy.select(self._columns[0]).where(self._beyond(key, direction))
        ).limit(1)

        async def call(connection: Connection) -> bool:
            return await connection.fetch_one(query=query) is not None

        return await self._run(call, token)
