"""Screens Handler."""

import asyncio
import contextvars
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal, TypeVar

from ..agents.features import summarize_document
from ..agents.screen_generator import ScreenGenerator
from ..core import get_logger
from ..core.errors import GenerationError, describe_error
from ..models.documents import Brief, FeatureDocument, GenerationRequest
from ..models.screens import AppFlow, Screen, ScreenSet
from ..storage import ScreenRepository

logger = get_logger(__name__)

T = TypeVar("T")

LOCAL_DATA_NOTICE = (
    "We couldn't reach the database, so basic local data is being used for now. "
    "Your changes are kept on this server only."
)


@dataclass
class ScreensOutcome:
    """A screen set plus the informational notices to show alongside it."""

    screen_set: ScreenSet
    source: Literal["ai", "fallback", "stored"] = "stored"
    notices: list[str] = field(default_factory=list)

    @property
    def message(self) -> str | None:
        return " ".join(self.notices) if self.notices else None


class ScreensHandler:
    """Generation, retrieval and editing of screen sets."""

    def __init__(
        self,
        generator: ScreenGenerator,
        repository: ScreenRepository,
        summary_max_chars: int = 800,
    ) -> None:
        self.generator = generator
        self.repository = repository
        self.summary_max_chars = summary_max_chars

    async def generate(self, brief: Brief, document: FeatureDocument) -> ScreensOutcome:
        """
        Generate and persist screens for ``document``.

        Raises:
            GenerationError: Timeout, or both the AI call and the fallback failed.
                ``user_message`` gives the wording to show.
        """
        start_time = time.time()
        request = GenerationRequest(
            brief=brief,
            document=document,
            feature_summary=summarize_document(document.content, self.summary_max_chars),
        )

        try:
            result = await self.generator.generate(request)
        except GenerationError as e:
            logger.error(
                "screens_generate_failed",
                parent_id=document.id,
                kind=e.kind.value,
                duration=time.time() - start_time,
            )
            raise

        saved, degraded = await self._in_executor(
            self.repository.save, document.id, result.screen_set.screens, result.screen_set.app_flow
        )
        outcome = ScreensOutcome(screen_set=saved, source=result.source)
        if result.notice:
            outcome.notices.append(result.notice)
        if degraded:
            outcome.notices.append(LOCAL_DATA_NOTICE)

        logger.info(
            "screens_generated",
            parent_id=document.id,
            source=result.source,
            screens=len(saved.screens),
            duration=time.time() - start_time,
        )
        return outcome

    async def get(self, parent_id: str) -> ScreensOutcome:
        screen_set, degraded = await self._in_executor(self.repository.get_by_parent_id, parent_id)
        outcome = ScreensOutcome(screen_set=screen_set)
        if degraded:
            outcome.notices.append(LOCAL_DATA_NOTICE)
        return outcome

    async def delete(self, app_flow_id: str) -> bool:
        deleted, _ = await self._in_executor(self.repository.delete, app_flow_id)
        return deleted

    async def add_step(
        self, parent_id: str, description: str, screen_id: str | None = None, index: int | None = None
    ) -> AppFlow:
        flow, _ = await self._in_executor(
            self.repository.add_step, parent_id, description, screen_id, index
        )
        return flow

    async def edit_step(
        self, parent_id: str, step_id: str, description: str, screen_id: str | None
    ) -> AppFlow:
        flow, _ = await self._in_executor(
            self.repository.edit_step, parent_id, step_id, description, screen_id
        )
        return flow

    async def delete_step(self, parent_id: str, step_id: str) -> AppFlow:
        flow, _ = await self._in_executor(self.repository.delete_step, parent_id, step_id)
        return flow

    async def update_screen(self, screen: Screen) -> Screen:
        updated, _ = await self._in_executor(self.repository.update_screen, screen)
        return updated

    async def update_screen_set(self, parent_id: str, screen_set: ScreenSet) -> ScreensOutcome:
        """Rewrite the screens and flow of ``parent_id`` together."""
        stored, degraded = await self._in_executor(
            self.repository.update_screen_set, parent_id, screen_set
        )
        outcome = ScreensOutcome(screen_set=stored)
        if degraded:
            outcome.notices.append(LOCAL_DATA_NOTICE)
        return outcome

    @staticmethod
    def user_message(error: BaseException) -> str:
        """Wording for a failed generation, by error kind."""
        return describe_error(error)

    async def _in_executor(self, fn: Callable[..., T], *args: Any) -> tuple[T, bool]:
        """Run a blocking repository call in the thread pool.

        Returns the result and whether the local store served that call.
        """

        def call() -> tuple[T, bool]:
            return fn(*args), self.repository.degraded

        # Carry bound log context into the worker thread
        context = contextvars.copy_context()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, context.run, call)
