import pytest
from databases import DatabaseURL

from relayconnect.database import database
from relayconnect.models import MODELS  # noqa: F401
from relayconnect.relay.cancellation import CancelToken
from relayconnect.relay.store import InMemoryStore

# Inserted in this order, so ids run 1..6. By (price, id) the order is
# Pen, Eraser, Notebook, Mug, Lamp, Chair.
PRODUCTS = [
    {"name": "Pen", "price": 150},
    {"name": "Notebook", "price": 400},
    {"name": "Mug", "price": 900},
    {"name": "Lamp", "price": 2500},
    {"name": "Chair", "price": 4900},
    {"name": "Eraser", "price": 150},
]


@pytest.fixture
def numbers():
    return InMemoryStore([3, 1, 5, 2, 4], key=lambda n: n)


@pytest.fixture
def token():
    return CancelToken()


@pytest.fixture
def database_url(tmp_path):
    """
    Using in memory sqlite ":memory:" causes issues:
    https://stackoverflow.com/questions/21766960/operationalerror-no-such-table-in-flask-with-sqlalchemy

    Better to just use a temp db file.
    """
    url = DatabaseURL(f"sqlite:///{tmp_path / 'test.db'}")
    database.rebind(url)
    return url


@pytest.fixture
async def products_db(database_url):
    await database.connect()
    table = database.get_table_by_name("products")
    await database.database.execute_many(query=table.insert(), values=PRODUCTS)
    yield database
    await database.disconnect()
