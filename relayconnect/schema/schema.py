from typing import List, Optional

import strawberry
from graphql import GraphQLError
from strawberry.extensions import ParserCache, QueryDepthLimiter, ValidationCache
from strawberry.extensions.tracing.apollo import ApolloTracingExtension
from strawberry.types import ExecutionContext

from ..settings import (
    APOLLO_TRACING_ENABLED,
    PARSER_CACHE_MAX_SIZE,
    QUERY_MAX_DEPTH_LIMIT,
    VALIDATION_CACHE_MAX_SIZE,
)
from .query.query import Product, Query


class ConnectionSchema(strawberry.Schema):
    """
    Bad pagination arguments and client cancellations still show up in the response
    `errors`, but aren't logged as server errors.
    """

    def process_errors(
        self,
        errors: List[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        server_errors = [
            error
            for error in errors
            if not getattr(error.original_error, "client_fault", False)
        ]
        super().process_errors(server_errors, execution_context)


extensions = [
    ParserCache(maxsize=PARSER_CACHE_MAX_SIZE),
    QueryDepthLimiter(max_depth=QUERY_MAX_DEPTH_LIMIT),
    ValidationCache(maxsize=VALIDATION_CACHE_MAX_SIZE),
]

if APOLLO_TRACING_ENABLED:
    extensions.append(ApolloTracingExtension)

schema = ConnectionSchema(query=Query, types=[Product], extensions=extensions)
