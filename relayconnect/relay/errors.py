"""
Failure conditions a connection resolution can end in. A malformed cursor is not one
of them: it decodes to "no bound".
"""


class PaginationError(Exception):
    client_fault = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidArgument(PaginationError, ValueError):
    """
    Negative or oversized `first`/`last`, or pagination arguments that can't be used
    together. Raised before the store is touched.
    """

    client_fault = True


class InvalidKey(PaginationError):
    """
    An entity came back from the store without a usable ordering key.
    """


class StoreUnavailable(PaginationError):
    pass


class Cancelled(PaginationError):
    """
    The caller's cancellation token fired (or its deadline passed) before the
    resolution finished. Kept apart from `StoreUnavailable` so the query layer can
    stay quiet about cancellations the client asked for.
    """

    client_fault = True
