from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, PositiveInt, model_validator

from .errors import InvalidArgument


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class PagePolicy(BaseModel):
    default_page_size: PositiveInt = 20
    max_page_size: PositiveInt = 100

    @model_validator(mode="after")
    def check_default_within_max(self) -> "PagePolicy":
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size {self.default_page_size} exceeds max_page_size "
                f"{self.max_page_size}"
            )
        return self


@dataclass(frozen=True)
class PageRequest:
    direction: Direction
    page_size: int
    max_page_size: int
    after: Optional[str] = None
    before: Optional[str] = None

    @property
    def is_forward(self) -> bool:
        return self.direction is Direction.FORWARD


def _check_size(name: str, value: Optional[int], max_page_size: int) -> None:
    if value is None:
        return
    if value < 0:
        raise InvalidArgument(f"`{name}` must be non-negative, got {value}")
    if value > max_page_size:
        raise InvalidArgument(
            f"`{name}` must not exceed the maximum page size {max_page_size}, got {value}"
        )


def build_page_request(
    first: Optional[int] = None,
    after: Optional[str] = None,
    last: Optional[int] = None,
    before: Optional[str] = None,
    policy: Optional[PagePolicy] = None,
) -> PageRequest:
    """
    Normalize the four Relay pagination arguments into one paging intent.

    Both `first` and `last` may be given, in which case `first` wins and the page is
    read forward. A cursor of one pair can't be mixed with the other pair though:
    `after` with `before`, `first` with `before` and `last` with `after` are rejected,
    since one of the bounds would have to be silently dropped.

    Empty cursor strings count as not given.
    """
    policy = policy or PagePolicy()
    _check_size("first", first, policy.max_page_size)
    _check_size("last", last, policy.max_page_size)

    after = after or None
    before = before or None
    if after is not None and before is not None:
        raise InvalidArgument("`after` and `before` cannot be used together")
    if first is not None and before is not None:
        raise InvalidArgument("`first` cannot be combined with `before`")
    if last is not None and after is not None:
        raise InvalidArgument("`last` cannot be combined with `after`")

    if first is not None or after is not None:
        direction = Direction.FORWARD
    elif last is not None or before is not None:
        direction = Direction.BACKWARD
    else:
        direction = Direction.FORWARD

    if first is not None:
        page_size = first
    elif last is not None:
        page_size = last
    else:
        page_size = policy.default_page_size

    return PageRequest(
        direction=direction,
        page_size=page_size,
        max_page_size=policy.max_page_size,
        after=after,
        before=before,
    )
