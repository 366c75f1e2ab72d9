"""Chat completion client with classified failures."""

from typing import Any

import httpx

from ..core import get_logger
from ..core.errors import ApiError, GenerationTimeout, ParseError, TransportError
from ..models.config import CompletionConfig

logger = get_logger(__name__)


def _error_detail(response: httpx.Response) -> str | None:
    """Best-effort error message from a non-2xx body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) else None
    return error if isinstance(error, str) else None


class CompletionClient:
    """
    Client for one-shot, non-streaming chat completions.

    Failures surface as classified errors: ``GenerationTimeout`` for client-side
    timeouts, ``TransportError`` for network failures, ``ApiError`` for non-2xx
    responses and ``ParseError`` for bodies without completion text.
    """

    def __init__(
        self,
        config: CompletionConfig,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize completion client.

        Args:
            config: Endpoint, credentials and sampling parameters
            timeout: Request timeout in seconds
            client: Shared AsyncClient (owned by the caller when given)
        """
        self.config = config
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

        logger.info("client_init", url=config.url, model=config.model_name)

    def _payload(self, prompt: str, system: str | None) -> dict[str, Any]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return {
            "model": self.config.model_name,
            "messages": messages,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    async def complete(self, prompt: str, system: str | None = None) -> str:
        """
        Request one completion.

        Args:
            prompt: User prompt
            system: Optional system message

        Returns:
            Completion text of the first choice

        Raises:
            GenerationTimeout: Request timed out
            TransportError: Network-level failure
            ApiError: Non-2xx response
            ParseError: Response body has no completion text
        """
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        try:
            response = await self._client.post(
                self.config.url, json=self._payload(prompt, system), headers=headers
            )
        except httpx.TimeoutException as e:
            logger.warning("completion_timeout", error=str(e))
            raise GenerationTimeout(self.timeout) from e
        except httpx.TransportError as e:
            logger.warning("completion_transport_error", error=str(e))
            raise TransportError(f"Completion request failed: {e}") from e

        if not response.is_success:
            detail = _error_detail(response)
            logger.warning("completion_api_error", status=response.status_code, detail=detail)
            message = f"Completion API request failed with status {response.status_code}"
            raise ApiError(response.status_code, f"{message}: {detail}" if detail else message)

        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning("completion_body_invalid", error=str(e))
            raise ParseError("Invalid completion response format") from e

        if not isinstance(content, str) or not content.strip():
            raise ParseError("Completion response has no content")

        logger.info("completion_received", content_length=len(content))
        return content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "CompletionClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
