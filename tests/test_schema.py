import asyncio

import pytest

from relayconnect.relay.cancellation import CancelToken
from relayconnect.relay.cursor import encode_cursor
from relayconnect.relay.page_request import PagePolicy
from relayconnect.schema.query.query import PRODUCT_CURSORS, make_context
from relayconnect.schema.schema import schema

PRODUCTS_QUERY = """
    query Products(
        $first: Int, $after: String, $last: Int, $before: String, $minPrice: Int
    ) {
        products(
            first: $first, after: $after, last: $last, before: $before, minPrice: $minPrice
        ) {
            totalCount
            pageInfo {
                hasNextPage
                hasPreviousPage
                startCursor
                endCursor
            }
            edges {
                cursor
                node {
                    id
                    name
                    price
                }
            }
        }
    }
"""


async def run_products(**variables):
    result = await schema.execute(
        PRODUCTS_QUERY, variable_values=variables, context_value=make_context()
    )
    return result


def names(data):
    return [edge["node"]["name"] for edge in data["products"]["edges"]]


@pytest.mark.asyncio
async def test_first_page(products_db):
    result = await run_products(first=2)
    assert not result.errors
    products = result.data["products"]
    assert names(result.data) == ["Pen", "Eraser"]
    assert products["totalCount"] == 6
    assert products["pageInfo"]["hasNextPage"]
    assert not products["pageInfo"]["hasPreviousPage"]
    assert products["pageInfo"]["endCursor"] == PRODUCT_CURSORS.encode((150, 6))


@pytest.mark.asyncio
async def test_next_page_from_end_cursor(products_db):
    first = await run_products(first=2)
    end_cursor = first.data["products"]["pageInfo"]["endCursor"]
    result = await run_products(first=2, after=end_cursor)
    assert not result.errors
    assert names(result.data) == ["Notebook", "Mug"]
    assert result.data["products"]["pageInfo"]["hasPreviousPage"]


@pytest.mark.asyncio
async def test_last_page(products_db):
    result = await run_products(last=2)
    assert not result.errors
    assert names(result.data) == ["Lamp", "Chair"]
    assert result.data["products"]["pageInfo"]["hasPreviousPage"]
    assert not result.data["products"]["pageInfo"]["hasNextPage"]


@pytest.mark.asyncio
async def test_min_price_filters_count_and_edges(products_db):
    result = await run_products(first=10, minPrice=1000)
    assert not result.errors
    assert names(result.data) == ["Lamp", "Chair"]
    assert result.data["products"]["totalCount"] == 2


@pytest.mark.asyncio
async def test_default_page_size_from_context(products_db):
    result = await schema.execute(
        PRODUCTS_QUERY,
        context_value=make_context(
            page_policy=PagePolicy(default_page_size=3, max_page_size=5)
        ),
    )
    assert not result.errors
    assert names(result.data) == ["Pen", "Eraser", "Notebook"]


@pytest.mark.asyncio
async def test_cursor_from_another_codec_is_ignored(products_db):
    result = await run_products(first=1, after=encode_cursor(3))
    assert not result.errors
    assert names(result.data) == ["Pen"]
    assert not result.data["products"]["pageInfo"]["hasPreviousPage"]


@pytest.mark.asyncio
async def test_negative_first_is_an_error(products_db):
    result = await run_products(first=-1)
    assert result.errors
    assert "non-negative" in result.errors[0].message
    assert result.data is None


@pytest.mark.asyncio
async def test_first_over_maximum_is_an_error(products_db):
    result = await run_products(first=101)
    assert result.errors
    assert "maximum page size" in result.errors[0].message


@pytest.mark.asyncio
async def test_conflicting_bounds_are_an_error(products_db):
    result = await run_products(first=1, before=PRODUCT_CURSORS.encode((400, 2)))
    assert result.errors


@pytest.mark.asyncio
async def test_cancelled_request(products_db):
    token = CancelToken()
    token.cancel()
    context = make_context(cancel_token=token)
    result = await schema.execute(
        PRODUCTS_QUERY, variable_values={"first": 1}, context_value=context
    )
    assert result.errors
    assert "cancelled" in result.errors[0].message


@pytest.mark.asyncio
async def test_node_refetch(products_db):
    query = """
        query {
            node(id: "products:3") {
                id
                ... on Product {
                    name
                    price
                }
            }
        }
    """
    result = await schema.execute(query, context_value=make_context())
    assert not result.errors
    assert result.data["node"] == {"id": "products:3", "name": "Mug", "price": 900}


@pytest.mark.asyncio
@pytest.mark.parametrize("node_id", ["products:99", "orders:1", "products:abc"])
async def test_unknown_node_is_null(products_db, node_id):
    result = await schema.execute(
        'query { node(id: "NODE") { id } }'.replace("NODE", node_id),
        context_value=make_context(),
    )
    assert not result.errors
    assert result.data["node"] is None


@pytest.mark.asyncio
async def test_shared_context_gives_each_operation_its_own_deadline(products_db):
    # A websocket reuses one context for every operation on the connection
    context = make_context(store_timeout=0.5)
    first = await schema.execute(
        PRODUCTS_QUERY, variable_values={"first": 1}, context_value=context
    )
    assert not first.errors
    await asyncio.sleep(0.6)
    second = await schema.execute(
        PRODUCTS_QUERY, variable_values={"first": 1}, context_value=context
    )
    assert not second.errors
    assert names(second.data) == ["Pen"]
