from base64 import b64decode, b64encode
from binascii import Error as Base64Error
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import InvalidKey

K = TypeVar("K")

DEFAULT_CURSOR_PREFIX = "connection"
CURSOR_SEPARATOR = ":"


class CursorCodec(Generic[K]):
    """
    Turns ordering keys into opaque cursors and back, in the same spirit as the
    `arrayconnection:OFFSET` cursors of `graphql-relay-js`, except the part after the
    colon is the key itself rather than a list offset:

        base64("<prefix>:<canonical key>")

    The canonical key is the compact JSON pydantic produces for `key_type`, so `3`
    becomes `3` and `(10, 4)` becomes `[10,4]`. Decoding is strict: `"3"`, `3.0` or
    `true` are not the int 3. Clients hold on to cursors across releases, so neither
    the prefix nor the canonical form may change.
    """

    def __init__(self, key_type: Type[K], prefix: str = DEFAULT_CURSOR_PREFIX) -> None:
        if not prefix or CURSOR_SEPARATOR in prefix:
            raise ValueError(f"Cursor prefix must be non-empty and free of ':': {prefix!r}")
        self.key_type = key_type
        self.prefix = prefix
        self._adapter: TypeAdapter[K] = TypeAdapter(key_type)

    def __repr__(self) -> str:
        return f"CursorCodec(key_type={self.key_type!r}, prefix={self.prefix!r})"

    def encode(self, key: Optional[K]) -> str:
        if key is None:
            raise InvalidKey("Cannot build a cursor from a missing ordering key")
        try:
            canonical = self._adapter.dump_json(key, warnings="error").decode()
        except PydanticSerializationError as e:
            raise InvalidKey(f"Ordering key {key!r} is not serializable: {e}") from e
        return b64encode(
            f"{self.prefix}{CURSOR_SEPARATOR}{canonical}".encode()
        ).decode()

    def decode(self, cursor: Optional[str]) -> Optional[K]:
        """
        Inverse of `encode`. Cursors come back from clients, who may replay stale ones
        or mangle them, so anything that doesn't decode cleanly means "no bound"
        instead of an error.
        """
        if not cursor:
            return None
        try:
            text = b64decode(cursor.encode(), validate=True).decode()
        except (Base64Error, UnicodeError):
            return None
        head = f"{self.prefix}{CURSOR_SEPARATOR}"
        if not text.startswith(head):
            return None
        try:
            return self._adapter.validate_json(text[len(head) :], strict=True)
        except ValidationError:
            return None


default_codec: CursorCodec[int] = CursorCodec(int)


def encode_cursor(key: Any) -> str:
    return default_codec.encode(key)


def decode_cursor(cursor: Optional[str]) -> Optional[int]:
    return default_codec.decode(cursor)
