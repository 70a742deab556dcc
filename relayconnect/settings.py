from databases import DatabaseURL
from starlette.config import Config

config = Config(".env")

DEBUG = config("DEBUG", cast=bool, default=False)
LOG_LEVEL = config("LOG_LEVEL", default="INFO")
APOLLO_TRACING_ENABLED = config("APOLLO_TRACING_ENABLED", cast=bool, default=False)
DATABASE_URL = config(
    "DATABASE_URL", cast=DatabaseURL, default="sqlite:///./relayconnect.db"
)
GRAPHQL_ROUTE = config("GRAPHQL_ROUTE", default="/graphql")
PARSER_CACHE_MAX_SIZE = config("PARSER_CACHE_MAX_SIZE", cast=int, default=100)
VALIDATION_CACHE_MAX_SIZE = config("VALIDATION_CACHE_MAX_SIZE", cast=int, default=100)
QUERY_MAX_DEPTH_LIMIT = config("QUERY_MAX_DEPTH_LIMIT", cast=int, default=20)
DEFAULT_PAGE_SIZE = config("DEFAULT_PAGE_SIZE", cast=int, default=20)
MAX_PAGE_SIZE = config("MAX_PAGE_SIZE", cast=int, default=100)
# Changing this invalidates every cursor already handed out to clients
CURSOR_PREFIX = config("CURSOR_PREFIX", default="connection")
STORE_TIMEOUT = config("STORE_TIMEOUT", cast=float, default=10.0)
