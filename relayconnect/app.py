import contextlib
import logging
from typing import Any, AsyncIterator, Optional, Union

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket
from strawberry.asgi import GraphQL

from .database import database
from .schema.query.query import make_context
from .schema.schema import schema
from .settings import DEBUG, GRAPHQL_ROUTE, LOG_LEVEL

logger = logging.getLogger(__name__)


class ConnectionGraphQL(GraphQL):
    async def get_context(
        self, request: Union[Request, WebSocket], response: Optional[Response] = None
    ) -> Any:
        return make_context(request=request, response=response)


async def on_startup() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    await database.connect()
    logger.info("Connected to %s", database.url.obscure_password)


async def on_shutdown() -> None:
    await database.disconnect()
    logger.info("Database disconnected")


@contextlib.asynccontextmanager
async def lifespan(app: Starlette) -> AsyncIterator[None]:
    await on_startup()
    try:
        yield
    finally:
        await on_shutdown()


graphql_app = ConnectionGraphQL(schema, debug=DEBUG)
app = Starlette(
    debug=DEBUG,
    routes=[
        Route(GRAPHQL_ROUTE, graphql_app),
        WebSocketRoute(GRAPHQL_ROUTE, graphql_app),
    ],
    middleware=[
        Middleware(
            CORSMiddleware,
            allow_headers=["*"],
            allow_origins=["*"],
            allow_methods=["*"],
        )
    ],
    lifespan=lifespan,
)
