"""Tests for the board API client."""

import json

import httpx
import pytest
import respx

from screenflow.clients import BoardClient
from screenflow.core.errors import BoardApiError, ExternalRateLimit


API = "https://board.test/1"


@pytest.fixture
def client():
    return BoardClient(API, api_key="app-key")


@pytest.mark.unit
def test_board_client_initialization():
    """Test board client initialization."""
    client = BoardClient(API + "/", api_key="k", timeout=5.0)
    assert client.api_url == API


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_list_lists_authenticates(client):
    """Test key and token travel as query params."""
    route = respx.get(url__startswith=f"{API}/boards/b1/lists").mock(
        return_value=httpx.Response(
            200,
            json=[
                {"id": "l1", "name": "Ideas", "closed": False},
                {"id": "l2", "name": "Backlog"},
                {"name": "no id"},
            ],
        )
    )
    lists = await client.list_lists("b1", "user-token")

    assert [(item.id, item.name) for item in lists] == [("l1", "Ideas"), ("l2", "Backlog")]
    params = route.calls.last.request.url.params
    assert params["key"] == "app-key"
    assert params["token"] == "user-token"


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_list_boards(client):
    route = respx.get(url__startswith=f"{API}/members/me/boards").mock(
        return_value=httpx.Response(200, json=[{"id": "b1", "name": "Roadmap", "url": "https://trello.com/b/b1"}])
    )
    boards = await client.list_boards("t")

    assert boards[0].name == "Roadmap"
    assert route.calls.last.request.url.params["filter"] == "open"


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_create_list_at_top(client):
    route = respx.post(url__startswith=f"{API}/lists").mock(
        return_value=httpx.Response(200, json={"id": "l9", "name": "To Do"})
    )
    created = await client.create_list("b1", "t")

    assert created.id == "l9"
    params = route.calls.last.request.url.params
    assert params["name"] == "To Do"
    assert params["idBoard"] == "b1"
    assert params["pos"] == "top"


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_create_card_body(client):
    route = respx.post(url__startswith=f"{API}/cards").mock(return_value=httpx.Response(200, json={"id": "c1"}))
    card_id = await client.create_card("l1", "t", "[MUST] Login", "Users sign in")

    assert card_id == "c1"
    request = route.calls.last.request
    assert request.url.params["idList"] == "l1"
    assert json.loads(request.content) == {"name": "[MUST] Login", "desc": "Users sign in", "pos": "bottom"}


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
@pytest.mark.parametrize("body", [{"name": "To Do"}, {"id": ""}, ["l9"], "l9"])
async def test_create_list_rejects_body_without_id(client, body):
    respx.post(url__startswith=f"{API}/lists").mock(return_value=httpx.Response(200, json=body))

    with pytest.raises(BoardApiError) as exc_info:
        await client.create_list("b1", "t")

    assert exc_info.value.status == 200
    assert "invalid response body" in str(exc_info.value)


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_list_lists_rejects_non_list_body(client):
    respx.get(url__startswith=f"{API}/boards/b1/lists").mock(
        return_value=httpx.Response(200, json={"message": "ok"})
    )
    with pytest.raises(BoardApiError):
        await client.list_lists("b1", "t")


class TestBoardErrors:
    """Test status classification."""

    @pytest.mark.asyncio
    @respx.mock
    @pytest.mark.parametrize("status", [429, 409])
    async def test_retryable_statuses(self, client, status):
        respx.post(url__startswith=f"{API}/cards").mock(return_value=httpx.Response(status))
        with pytest.raises(ExternalRateLimit) as exc_info:
            await client.create_card("l1", "t", "x", "y")
        assert exc_info.value.status == status

    @pytest.mark.asyncio
    @respx.mock
    async def test_other_status(self, client):
        respx.post(url__startswith=f"{API}/cards").mock(return_value=httpx.Response(401))
        with pytest.raises(BoardApiError) as exc_info:
            await client.create_card("l1", "t", "Login", "y")

        assert not isinstance(exc_info.value, ExternalRateLimit)
        assert exc_info.value.status == 401
        assert exc_info.value.message == 'Create card "Login" failed: 401 Unauthorized'

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_failure(self, client):
        respx.get(url__startswith=f"{API}/boards/b1/lists").mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(BoardApiError) as exc_info:
            await client.list_lists("b1", "t")
        assert exc_info.value.status == 0
