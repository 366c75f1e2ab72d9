"""Screen Generator - bounded-time AI generation with classified fallback."""

import asyncio
import time
from dataclasses import dataclass
from typing import Literal, Protocol

from ..core import LogContext, get_logger
from ..core.errors import ApiError, GenerationError, GenerationTimeout, ParseError, TransportError
from ..core.id import new_request_id
from ..core.validate import ValidationError
from ..models.documents import GenerationRequest
from ..models.screens import ScreenSet
from ..monitoring import MetricsCollector, metrics_collector
from ..parsing import ScreenSetParser
from .fallback import FallbackGenerator
from .prompt import SYSTEM_PROMPT, build_screen_prompt

logger = get_logger(__name__)

FALLBACK_NOTICE = (
    "We encountered an issue generating detailed screens. Basic screens have been created "
    "instead. You can try again later or continue with these screens."
)


class CompletionBackend(Protocol):
    async def complete(self, prompt: str, system: str | None = None) -> str: ...


@dataclass
class GenerationResult:
    """A generated screen set and where it came from."""

    screen_set: ScreenSet
    source: Literal["ai", "fallback"]
    notice: str | None = None
    error: GenerationError | None = None

    @property
    def used_fallback(self) -> bool:
        return self.source == "fallback"


class ScreenGenerator:
    """
    Generates a ScreenSet with exactly one completion call under a hard deadline.

    - Deadline elapsed: ``GenerationTimeout`` is raised, never masked by fallback.
    - ``TransportError`` / ``ApiError`` / ``ParseError``: the fallback generator
      runs once; if it fails too, the original error is raised.
    """

    def __init__(
        self,
        client: CompletionBackend,
        fallback: FallbackGenerator | None = None,
        parser: ScreenSetParser | None = None,
        timeout: float = 120.0,
        summary_max_chars: int = 800,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.client = client
        self.fallback = fallback or FallbackGenerator()
        self.parser = parser or ScreenSetParser()
        self.timeout = timeout
        self.summary_max_chars = summary_max_chars
        self.metrics = metrics or metrics_collector

        logger.info("initialized", timeout=timeout)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Generate screens for one parent document.

        Args:
            request: Brief, document and pre-truncated feature summary

        Returns:
            GenerationResult with ``source="ai"`` or ``source="fallback"``

        Raises:
            ValidationError: Feature summary exceeds the prompt size limit
            GenerationTimeout: Completion did not arrive before the deadline
            GenerationError: Both the completion and the fallback failed
        """
        if len(request.feature_summary) > self.summary_max_chars:
            raise ValidationError(
                f"Feature summary too long: {len(request.feature_summary)} > {self.summary_max_chars}"
            )

        parent_id = request.parent_document_id
        prompt = build_screen_prompt(request.brief, request.feature_summary)
        start = time.monotonic()

        with LogContext(request_id=new_request_id(), parent_id=parent_id):
            logger.info("generation_started", prompt_length=len(prompt))
            try:
                text = await asyncio.wait_for(
                    self.client.complete(prompt, system=SYSTEM_PROMPT), timeout=self.timeout
                )
                screen_set = self.parser.parse(text, parent_id)
            except asyncio.TimeoutError as e:
                self._record("timeout", start)
                logger.error("generation_timeout", timeout=self.timeout)
                raise GenerationTimeout(self.timeout) from e
            except GenerationTimeout:
                self._record("timeout", start)
                logger.error("generation_timeout", timeout=self.timeout)
                raise
            except (TransportError, ApiError, ParseError) as e:
                return self._fall_back(request, e, start)

            self._record("ai", start)
            logger.info(
                "generation_complete",
                screens=len(screen_set.screens),
                steps=len(screen_set.app_flow.steps),
            )
            return GenerationResult(screen_set=screen_set, source="ai")

    def _fall_back(
        self, request: GenerationRequest, error: GenerationError, start: float
    ) -> GenerationResult:
        logger.warning("generation_failed", kind=error.kind.value, error=error.message)
        try:
            screen_set = self.fallback.generate(request.brief, request.document)
        except Exception as fallback_error:
            self._record("failed", start, source="fallback")
            logger.error("fallback_failed", error=str(fallback_error), exc_info=True)
            raise error from fallback_error

        self._record("fallback", start, source="fallback")
        return GenerationResult(
            screen_set=screen_set, source="fallback", notice=FALLBACK_NOTICE, error=error
        )

    def _record(self, outcome: str, start: float, source: str = "ai") -> None:
        self.metrics.record_generation(outcome, time.monotonic() - start, source=source)


__all__ = ["ScreenGenerator", "GenerationResult", "CompletionBackend", "FALLBACK_NOTICE"]
