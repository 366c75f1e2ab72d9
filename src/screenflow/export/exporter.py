"""Feature export to a board with throttling and bounded retries."""

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable

from ..clients.board import DEFAULT_LIST_NAME, BoardClient
from ..core import LogContext, get_logger
from ..core.errors import BoardApiError, ExternalRateLimit
from ..models.export import CardError, ExportFeature, ExportResult
from ..monitoring import MetricsCollector, metrics_collector

logger = get_logger(__name__)

TARGET_LIST_NAMES = frozenset({"to do", "todo", "to-do", "backlog"})
MAX_DESCRIPTION_LENGTH = 16_000
EMPTY_DESCRIPTION = "No description provided"


def card_title(feature: ExportFeature) -> str:
    return f"[{feature.priority.value}] {feature.title}" if feature.priority else feature.title


def card_description(feature: ExportFeature) -> str:
    return feature.description[:MAX_DESCRIPTION_LENGTH] if feature.description else EMPTY_DESCRIPTION


class ExportDeadlineExceeded(BoardApiError):
    """No time left in the caller's export deadline."""

    def __init__(self) -> None:
        super().__init__(0, "Export deadline exceeded")


class FeatureExporter:
    """
    Creates one board card per MUST/SHOULD feature.

    Cards are created one at a time with a fixed delay between calls. A 429 or
    409 response is retried with exponential backoff (``backoff_base`` doubling,
    at most ``max_retries`` times); any other failure gives up on that card
    only. ``sleep`` and ``clock`` are injectable so tests control time.
    """

    def __init__(
        self,
        client: BoardClient,
        board_web_url: str = "https://trello.com/b",
        card_delay: float = 0.3,
        backoff_base: float = 1.0,
        max_retries: int = 3,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.client = client
        self.board_web_url = board_web_url.rstrip("/")
        self.card_delay = card_delay
        self.backoff_base = backoff_base
        self.max_retries = max_retries
        self.sleep = sleep
        self.clock = clock
        self.metrics = metrics or metrics_collector

    async def export_features(
        self,
        board_id: str,
        features: Iterable[ExportFeature],
        token: str,
        list_id: str | None = None,
        deadline: float | None = None,
    ) -> ExportResult:
        """
        Export features as cards on ``board_id``.

        Args:
            board_id: Target board
            features: Candidates; COULD/WONT and unprioritized ones are skipped
            token: User token for the board API
            list_id: Target list; resolved from the board when omitted
            deadline: Absolute ``clock()`` time after which no call is started

        Returns:
            ExportResult; ``success`` is False only when nothing was created
            despite at least one attempt, or the target list is unavailable
        """
        board_url = f"{self.board_web_url}/{board_id}"
        candidates = list(features)
        selected = [feature for feature in candidates if feature.exportable]
        skipped = len(candidates) - len(selected)
        for _ in range(skipped):
            self.metrics.record_card("skipped")

        with LogContext(board_id=board_id):
            logger.info("export_started", selected=len(selected), skipped=skipped)
            if not selected:
                return ExportResult(
                    success=True,
                    message="No MUST or SHOULD features to export",
                    board_url=board_url,
                    skipped=skipped,
                )

            try:
                target_list = list_id or await self.resolve_list(board_id, token)
            except BoardApiError as e:
                logger.error("export_list_failed", error=e.message)
                return ExportResult(
                    success=False, message=e.message, board_url=board_url, skipped=skipped
                )

            created = 0
            errors: list[CardError] = []
            for index, feature in enumerate(selected):
                if index > 0 and self.card_delay > 0:
                    await self.sleep(self.card_delay)
                try:
                    self._check_deadline(deadline)
                    await self._create_card(target_list, token, feature, deadline)
                except BoardApiError as e:
                    self.metrics.record_card("failed")
                    logger.warning("card_failed", feature=feature.title, status=e.status, error=e.message)
                    errors.append(CardError(feature=feature.title, error=e.message))
                    continue
                created += 1
                self.metrics.record_card("created")

            logger.info("export_complete", created=created, failed=len(errors))
            return self._summarize(created, errors, board_url, skipped)

    async def resolve_list(self, board_id: str, token: str) -> str:
        """First list named like a to-do/backlog list, creating "To Do" if none exists."""
        for board_list in await self.client.list_lists(board_id, token):
            if board_list.name.strip().lower() in TARGET_LIST_NAMES:
                logger.info("export_list_found", list_id=board_list.id, name=board_list.name)
                return board_list.id

        created = await self.client.create_list(board_id, token, DEFAULT_LIST_NAME)
        return created.id

    async def _create_card(
        self, list_id: str, token: str, feature: ExportFeature, deadline: float | None
    ) -> str:
        attempt = 0
        while True:
            try:
                return await self.client.create_card(
                    list_id, token, card_title(feature), card_description(feature)
                )
            except ExternalRateLimit as e:
                if attempt >= self.max_retries:
                    raise
                delay = self.backoff_base * (2**attempt)
                if deadline is not None and self.clock() + delay > deadline:
                    raise
                attempt += 1
                self.metrics.record_retry()
                logger.info(
                    "card_retry", feature=feature.title, status=e.status, attempt=attempt, delay=delay
                )
                await self.sleep(delay)

    def _check_deadline(self, deadline: float | None) -> None:
        if deadline is not None and self.clock() >= deadline:
            raise ExportDeadlineExceeded()

    @staticmethod
    def _summarize(
        created: int, errors: list[CardError], board_url: str, skipped: int
    ) -> ExportResult:
        if errors and created:
            message = (
                f"Exported {created} features to Trello board. "
                f"{len(errors)} features failed to export."
            )
            success = True
        elif errors:
            message = f"Failed to export features: {errors[0].error}"
            success = False
        else:
            message = f"Successfully exported {created} features to Trello board"
            success = True

        return ExportResult(
            success=success,
            message=message,
            cards_created=created,
            board_url=board_url,
            errors=errors,
            skipped=skipped,
        )


__all__ = [
    "FeatureExporter",
    "ExportDeadlineExceeded",
    "TARGET_LIST_NAMES",
    "card_title",
    "card_description",
]
