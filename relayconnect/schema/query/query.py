from typing import Any, Optional, Tuple

import strawberry
from strawberry.types import Info

from ...database import database
from ...models import MODELS  # noqa: F401 registers the tables
from ...relay.cancellation import CancelToken
from ...relay.cursor import CursorCodec
from ...relay.page_request import PagePolicy
from ...relay.resolver import paginate
from ...relay.schema import Connection, Node
from ...relay.sql_store import TableStore
from ...settings import CURSOR_PREFIX, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, STORE_TIMEOUT

PRODUCT_CURSORS: CursorCodec[Tuple[int, int]] = CursorCodec(
    Tuple[int, int], prefix=CURSOR_PREFIX
)


@strawberry.type
class Product(Node):
    name: str
    price: int
    pk: strawberry.Private[int]

    @classmethod
    def from_row(cls, row: Any) -> "Product":
        return cls(id=f"products:{row.id}", pk=row.id, name=row.name, price=row.price)


def product_key(product: Product) -> Tuple[int, int]:
    return product.price, product.pk


def make_context(**extra: Any) -> dict:
    """
    Context for a request or a websocket connection: the page size policy and the
    store deadline. A websocket shares one context between all its operations, so no
    cancellation token lives here unless the caller passes its own `cancel_token`.
    """
    return {
        "page_policy": PagePolicy(
            default_page_size=DEFAULT_PAGE_SIZE, max_page_size=MAX_PAGE_SIZE
        ),
        "store_timeout": STORE_TIMEOUT,
        **extra,
    }


def _from_context(info: Info, name: str) -> Any:
    context = info.context if isinstance(info.context, dict) else {}
    value = context.get(name)
    return value if value is not None else make_context()[name]


def _cancel_token(info: Info) -> CancelToken:
    """
    A token of its own for every resolution, so its deadline starts now and
    cancelling it touches no other operation.
    """
    context = info.context if isinstance(info.context, dict) else {}
    if context.get("cancel_token") is not None:
        return context["cancel_token"]
    return CancelToken(timeout=_from_context(info, "store_timeout"))


_NODES = {"products": Product}


@strawberry.type
class Query:
    @strawberry.field
    async def node(self, info: Info, id: strawberry.ID) -> Optional[Node]:
        """
        `node` root field required for Relay (refetching etc)
        """
        typename, _, pk = id.partition(":")
        if typename not in _NODES or not pk.isdigit():
            return None
        table = database.get_table_by_name(typename)
        row = await database.database.fetch_one(
            query=table.select().where(table.c.id == int(pk))
        )
        if row is None:
            return None
        return _NODES[typename].from_row(row)

    @strawberry.field
    async def products(
        self,
        info: Info,
        first: Optional[int] = None,
        after: Optional[str] = None,
        last: Optional[int] = None,
        before: Optional[str] = None,
        min_price: Optional[int] = None,
    ) -> Connection[Product]:
        """
        Products ordered by price, ties broken by id.
        """
        table = database.get_table_by_name("products")
        store = TableStore(
            database.database,
            table,
            order_by=["price", "id"],
            to_node=Product.from_row,
            key=product_key,
            where=None if min_price is None else table.c.price >= min_price,
        )
        return await paginate(
            store,
            PRODUCT_CURSORS,
            first=first,
            after=after,
            last=last,
            before=before,
            policy=_from_context(info, "page_policy"),
            token=_cancel_token(info),
        )
