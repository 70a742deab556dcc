import asyncio
import logging
from typing import Any, Awaitable, List, Optional, Tuple, TypeVar

from .cancellation import CancelToken
from .cursor import CursorCodec
from .page_request import Direction, PagePolicy, PageRequest, build_page_request
from .schema import Connection, Edge, PageInfo
from .store import OrderedStore

logger = logging.getLogger(__name__)

N = TypeVar("N")


async def _fetch_window_and_count(
    window: Awaitable[List[N]], count: Awaitable[int], token: CancelToken
) -> Tuple[List[N], int]:
    """
    The window and the total count are read concurrently. Unless the store runs both
    against one snapshot, a write landing in between can make `total_count` disagree
    with the page by a row or two; that's accepted.

    If either read fails the other is cancelled, so nothing keeps running once the
    resolution has given up.
    """
    tasks = [
        asyncio.ensure_future(token.run(window)),
        asyncio.ensure_future(token.run(count)),
    ]
    try:
        nodes, total_count = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return nodes, total_count


async def resolve_connection(
    store: OrderedStore[N],
    request: PageRequest,
    codec: CursorCodec,
    token: Optional[CancelToken] = None,
    exact_page_info: bool = False,
) -> Connection[N]:
    """
    Adapted from the Relay cursor connections algorithms:
    https://relay.dev/graphql/connections.htm

    One extra row is fetched past the page to tell whether more edges exist in the
    paging direction. On the other side Relay only requires `true` when it's
    cheap to know, so by default `hasPreviousPage` (forward) is just "an `after`
    cursor was given" and `hasNextPage` (backward) is "a `before` cursor was given".
    With `exact_page_info` the store is asked with `exists_beyond` instead, whenever
    the page isn't empty. That trades the "a cursor means a page on that side" rule
    for an exact answer: an `after` cursor with nothing before the page yields
    `hasPreviousPage=False` (and `before` likewise for `hasNextPage`). An empty
    collection reports no pages either way.

    Cursors that fail to decode are treated as absent. Edges always come back in
    ascending key order, whichever direction was paged.
    """
    token = token or CancelToken()
    size = request.page_size
    logger.debug(
        "Resolving %s page of %d (after=%r, before=%r)",
        request.direction.value,
        size,
        request.after,
        request.before,
    )

    if request.is_forward:
        after_key = codec.decode(request.after)
        window = store.fetch_forward(after_key, size + 1, token)
    else:
        before_key = codec.decode(request.before)
        window = store.fetch_backward(before_key, size + 1, token)
    nodes, total_count = await _fetch_window_and_count(window, store.count(token), token)

    if request.is_forward:
        has_next_page = len(nodes) > size
        nodes = nodes[:size]
        has_previous_page = after_key is not None
        if exact_page_info and nodes:
            has_previous_page = await token.run(
                store.exists_beyond(
                    store.ordering_key(nodes[0]), Direction.BACKWARD, token
                )
            )
    else:
        has_previous_page = len(nodes) > size
        nodes = nodes[len(nodes) - size :] if has_previous_page else nodes
        has_next_page = before_key is not None
        if exact_page_info and nodes:
            has_next_page = await token.run(
                store.exists_beyond(
                    store.ordering_key(nodes[-1]), Direction.FORWARD, token
                )
            )

    if total_count == 0:
        # Nothing on either side of a bound in an empty collection
        has_next_page = has_previous_page = False

    edges = [Edge(cursor=codec.encode(store.ordering_key(node)), node=node) for node in nodes]
    return Connection(
        edges=edges,
        page_info=PageInfo(
            has_next_page=has_next_page,
            has_previous_page=has_previous_page,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        ),
        total_count=total_count,
    )


async def paginate(
    store: OrderedStore[N],
    codec: CursorCodec,
    first: Optional[int] = None,
    after: Optional[str] = None,
    last: Optional[int] = None,
    before: Optional[str] = None,
    policy: Optional[PagePolicy] = None,
    token: Optional[CancelToken] = None,
    **kwargs: Any,
) -> Connection[N]:
    """
    Validate the raw arguments and resolve them. Argument errors are raised before
    the store is touched.
    """
    request = build_page_request(
        first=first, after=after, last=last, before=before, policy=policy
    )
    return await resolve_connection(store, request, codec, token=token, **kwargs)
