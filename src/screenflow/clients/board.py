"""Board API client (Trello-compatible REST)."""

from typing import Any

import httpx

from ..core import get_logger
from ..core.errors import RETRYABLE_BOARD_STATUSES, BoardApiError, ExternalRateLimit
from ..models.export import BoardList, BoardSummary

logger = get_logger(__name__)

DEFAULT_LIST_NAME = "To Do"


class BoardClient:
    """
    Thin async wrapper over the board REST API.

    Every call authenticates with the application key plus the user token
    passed in by the caller. 429 and 409 responses raise ``ExternalRateLimit``;
    other failures raise ``BoardApiError``. Retrying is the caller's job.
    """

    def __init__(
        self,
        api_url: str = "https://api.trello.com/1",
        api_key: str = "",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

        logger.info("client_init", url=self.api_url)

    def _auth(self, token: str) -> dict[str, str]:
        return {"key": self.api_key, "token": token}

    async def _request(
        self,
        method: str,
        path: str,
        token: str,
        action: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        expect: type | None = None,
        required: tuple[str, ...] = (),
    ) -> Any:
        query = {**(params or {}), **self._auth(token)}
        try:
            response = await self._client.request(
                method, f"{self.api_url}{path}", params=query, json=json
            )
        except httpx.HTTPError as e:
            # Request URLs carry the token; log the action only
            logger.warning("board_request_failed", action=action, error=type(e).__name__)
            raise BoardApiError(0, f"{action} failed: {type(e).__name__}") from e

        if response.status_code in RETRYABLE_BOARD_STATUSES:
            raise ExternalRateLimit(
                response.status_code,
                f"{action} failed: {response.status_code} {response.reason_phrase}",
            )
        if not response.is_success:
            logger.warning("board_api_error", action=action, status=response.status_code)
            raise BoardApiError(
                response.status_code,
                f"{action} failed: {response.status_code} {response.reason_phrase}",
            )

        try:
            body = response.json()
        except ValueError as e:
            raise BoardApiError(response.status_code, f"{action} failed: invalid JSON body") from e

        valid = expect is None or isinstance(body, expect)
        if valid and required:
            valid = isinstance(body, dict) and all(body.get(key) for key in required)
        if not valid:
            logger.warning("board_invalid_body", action=action, status=response.status_code)
            raise BoardApiError(response.status_code, f"{action} failed: invalid response body")
        return body

    async def list_boards(self, token: str) -> list[BoardSummary]:
        """Open boards of the token's member."""
        data = await self._request(
            "GET", "/members/me/boards", token, "List boards", params={"filter": "open"}, expect=list
        )
        return [
            BoardSummary(id=item["id"], name=item.get("name", ""), url=item.get("url", ""))
            for item in data
            if isinstance(item, dict) and item.get("id")
        ]

    async def list_lists(self, board_id: str, token: str) -> list[BoardList]:
        """Lists on a board, in board order."""
        data = await self._request("GET", f"/boards/{board_id}/lists", token, "Fetch lists", expect=list)
        return [
            BoardList(id=item["id"], name=item.get("name", ""), closed=bool(item.get("closed", False)))
            for item in data
            if isinstance(item, dict) and item.get("id")
        ]

    async def create_list(self, board_id: str, token: str, name: str = DEFAULT_LIST_NAME) -> BoardList:
        """Create a list at the top of the board."""
        data = await self._request(
            "POST",
            "/lists",
            token,
            f"Create {name} list",
            params={"name": name, "idBoard": board_id, "pos": "top"},
            expect=dict,
            required=("id",),
        )
        logger.info("board_list_created", board_id=board_id, list_id=data["id"])
        return BoardList(id=data["id"], name=data.get("name", name))

    async def create_card(self, list_id: str, token: str, name: str, description: str) -> str:
        """Append a card to a list. Returns the new card id."""
        data = await self._request(
            "POST",
            "/cards",
            token,
            f'Create card "{name}"',
            params={"idList": list_id},
            json={"name": name, "desc": description, "pos": "bottom"},
        )
        return data.get("id", "") if isinstance(data, dict) else ""

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "BoardClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
