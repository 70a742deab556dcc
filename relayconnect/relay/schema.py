from typing import Generic, List, Optional, TypeVar

import strawberry

NodeType = TypeVar("NodeType")


@strawberry.type
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None


@strawberry.interface
class Node:
    """
    Global object identification for Relay refetching. IDs look like `<table>:<pk>`.
    """

    id: strawberry.ID


@strawberry.type
class Edge(Generic[NodeType]):
    cursor: str
    node: NodeType


@strawberry.type
class Connection(Generic[NodeType]):
    """
    One page of a collection. Built fresh by every resolution and never cached, since
    the collection may change between requests.
    """

    edges: List[Edge[NodeType]]
    page_info: PageInfo
    total_count: int
