from bisect import bisect_left, bisect_right
from typing import Any, Callable, Generic, Iterable, List, Optional, TypeVar

from typing_extensions import Protocol

from .cancellation import CancelToken
from .page_request import Direction

N = TypeVar("N")


class OrderedStore(Protocol[N]):
    """
    What the connection resolver needs from a data layer. Any filtering the caller
    asked for (a minimum price, an owner...) is baked into the store instance, so
    `count` and the fetches all see the same filtered collection.

    Every fetch returns nodes in ascending ordering-key order, including
    `fetch_backward`. I/O failures must be raised as `StoreUnavailable`.
    """

    def ordering_key(self, node: N) -> Any:
        ...

    async def count(self, token: CancelToken) -> int:
        ...

    async def fetch_forward(
        self, after_key: Optional[Any], limit: int, token: CancelToken
    ) -> List[N]:
        ...

    async def fetch_backward(
        self, before_key: Optional[Any], limit: int, token: CancelToken
    ) -> List[N]:
        ...

    async def exists_beyond(
        self, key: Any, direction: Direction, token: CancelToken
    ) -> bool:
        ...


class InMemoryStore(Generic[N]):
    """
    Reference `OrderedStore` over an in-memory collection. The items are filtered and
    sorted once, up front; every fetch after that is a bisect and a slice.
    """

    def __init__(
        self,
        items: Iterable[N],
        key: Callable[[N], Any],
        where: Optional[Callable[[N], bool]] = None,
    ) -> None:
        self._key = key
        selected = [item for item in items if where is None or where(item)]
        self._items: List[N] = sorted(selected, key=key)
        self._keys = [key(item) for item in self._items]

    def ordering_key(self, node: N) -> Any:
        return self._key(node)

    async def count(self, token: CancelToken) -> int:
        token.raise_if_cancelled()
        return len(self._items)

    async def fetch_forward(
        self, after_key: Optional[Any], limit: int, token: CancelToken
    ) -> List[N]:
        token.raise_if_cancelled()
        start = 0 if after_key is None else bisect_right(self._keys, after_key)
        return self._items[start : start + limit]

    async def fetch_backward(
        self, before_key: Optional[Any], limit: int, token: CancelToken
    ) -> List[N]:
        token.raise_if_cancelled()
        end = len(self._items) if before_key is None else bisect_left(self._keys, before_key)
        return self._items[max(end - limit, 0) : end]

    async def exists_beyond(
        self, key: Any, direction: Direction, token: CancelToken
    ) -> bool:
        token.raise_if_cancelled()
        if direction is Direction.FORWARD:
            return bisect_right(self._keys, key) < len(self._keys)
        return bisect_left(self._keys, key) > 0
