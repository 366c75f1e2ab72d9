"""Screen repository - primary store with local fallback."""

import threading
from collections.abc import Callable
from typing import Literal, TypeVar

import pybreaker
from returns.pipeline import is_successful

from ..core import get_logger
from ..core.errors import ConflictError, NotFoundError, StoreError
from ..core.validate import ValidationError
from ..models.screens import AppFlow, Screen, ScreenSet, check_invariants
from ..monitoring import MetricsCollector, metrics_collector
from .local import LocalCache
from .relational import SqlScreenStore

logger = get_logger(__name__)

T = TypeVar("T")

Source = Literal["primary", "local"]

# Primary-store failures handled by degrading to the local store
_DEGRADING_ERRORS = (StoreError, pybreaker.CircuitBreakerError)


class ScreenRepository:
    """
    Persistence for screen sets.

    Every operation tries the primary store first, through a circuit breaker.
    Store failures never reach the caller: reads fall back to the local cache
    (or an empty set), writes and deletes are mirrored into it. The two stores
    are not reconciled. ``last_source`` tells callers which store served the
    most recent operation on the calling thread.
    """

    def __init__(
        self,
        store: SqlScreenStore,
        cache: LocalCache,
        fail_max: int = 5,
        reset_timeout: int = 30,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.metrics = metrics or metrics_collector
        self._state = threading.local()

        class BreakerListener(pybreaker.CircuitBreakerListener):
            """Listener for circuit breaker state changes."""

            def state_change(self, cb, old_state, new_state):
                logger.warning(
                    "breaker_state_change",
                    breaker=cb.name,
                    from_state=str(old_state),
                    to_state=str(new_state),
                )

        self._breaker = pybreaker.CircuitBreaker(
            fail_max=fail_max,
            reset_timeout=reset_timeout,
            exclude=[NotFoundError, ConflictError],
            name="primary-store",
            listeners=[BreakerListener()],
        )

        logger.info("repository_init", fail_max=fail_max, reset_timeout=reset_timeout)

    @property
    def last_source(self) -> Source:
        return getattr(self._state, "source", "primary")

    @last_source.setter
    def last_source(self, source: Source) -> None:
        self._state.source = source

    @property
    def degraded(self) -> bool:
        """True when the last operation was served by the local store."""
        return self.last_source == "local"

    def _primary(self, fn: Callable[..., T], *args) -> T:
        result = self._breaker.call(fn, *args)
        self.last_source = "primary"
        return result

    def _degrade(self, op: str, error: Exception) -> None:
        self.last_source = "local"
        self.metrics.record_store_fallback(op)
        self.metrics.set_local_cache_size(len(self.cache))
        logger.warning("primary_store_failed", op=op, error=str(error), kind=type(error).__name__)

    # ========================================================================
    # Whole-set operations
    # ========================================================================

    def save(self, parent_id: str, screens: list[Screen], app_flow: AppFlow) -> ScreenSet:
        """
        Replace the screen set of ``parent_id``.

        Raises:
            ValidationError: A step links to a screen outside ``screens``
        """
        return self._replace(self._bind(parent_id, screens, app_flow), "save")

    def get_by_parent_id(self, parent_id: str) -> ScreenSet:
        """Stored set, or an empty set with a fresh flow id. Never None."""
        screen_set, _ = self._load(parent_id)
        return screen_set

    def delete(self, app_flow_id: str) -> bool:
        """Delete the set owning ``app_flow_id``. False if no store knows it."""
        try:
            deleted = self._primary(self.store.delete, app_flow_id)
        except _DEGRADING_ERRORS as e:
            self._degrade("delete", e)
            return self.cache.delete_by_flow_id(app_flow_id)

        if not deleted:
            logger.info("delete_not_found", app_flow_id=app_flow_id)
        return deleted

    def update_screen_set(self, parent_id: str, screen_set: ScreenSet) -> ScreenSet:
        """
        Overwrite the flow and screens of a set in one write.

        Screens missing from ``screen_set`` are removed, new ones added; the
        stored flow keeps its id.

        Raises:
            ValidationError: A step links to a screen outside ``screen_set``
        """
        bound = self._bind(parent_id, screen_set.screens, screen_set.app_flow)
        return self._replace(bound, "update_screen_set")

    # ========================================================================
    # Incremental edits
    # ========================================================================

    def update_app_flow(self, app_flow: AppFlow) -> AppFlow:
        """
        Replace the steps of an existing flow, renumbering positions.

        Raises:
            ValidationError: A step links to a screen the set does not contain
        """
        flow = app_flow.renumbered()
        current, exists = self._load(flow.parent_document_id)
        if exists:
            self._check_links(flow, current.screen_ids())

        try:
            return self._primary(self.store.update_app_flow, flow)
        except _DEGRADING_ERRORS as e:
            self._degrade("update_app_flow", e)
            return self.cache.update_app_flow(flow) or flow

    def update_screen(self, screen: Screen) -> Screen:
        try:
            return self._primary(self.store.update_screen, screen)
        except _DEGRADING_ERRORS as e:
            self._degrade("update_screen", e)
            return self.cache.update_screen(screen) or screen

    def add_step(
        self,
        parent_id: str,
        description: str,
        screen_id: str | None = None,
        index: int | None = None,
    ) -> AppFlow:
        """Insert a step (appended unless ``index`` is given)."""
        current, exists = self._load(parent_id)
        flow = current.app_flow.with_step_added(description, screen_id, index)
        return self._store_flow(current, flow, exists)

    def edit_step(
        self, parent_id: str, step_id: str, description: str, screen_id: str | None
    ) -> AppFlow:
        current, exists = self._load(parent_id)
        flow = current.app_flow.with_step_edited(step_id, description, screen_id)
        return self._store_flow(current, flow, exists)

    def delete_step(self, parent_id: str, step_id: str) -> AppFlow:
        current, exists = self._load(parent_id)
        flow = current.app_flow.with_step_removed(step_id)
        return self._store_flow(current, flow, exists)

    # ========================================================================
    # Helpers
    # ========================================================================

    def _replace(self, screen_set: ScreenSet, op: str) -> ScreenSet:
        parent_id = screen_set.parent_document_id
        try:
            try:
                stored = self._primary(self.store.replace, screen_set)
            except ConflictError:
                # Lost the race to create the flow row; the retry replaces it
                logger.info("replace_conflict_retry", op=op, parent_id=parent_id)
                stored = self._primary(self.store.replace, screen_set)
        except _DEGRADING_ERRORS as e:
            self._degrade(op, e)
            return self.cache.put(screen_set)

        logger.info("set_saved", op=op, parent_id=parent_id, app_flow_id=stored.app_flow.id)
        return stored

    def _load(self, parent_id: str) -> tuple[ScreenSet, bool]:
        """Current set and whether any store holds it."""
        try:
            found = self._primary(self.store.fetch, parent_id)
        except _DEGRADING_ERRORS as e:
            self._degrade("get", e)
            found = self.cache.get(parent_id)

        if found is None:
            return ScreenSet.empty(parent_id), False
        return found, True

    def _store_flow(self, current: ScreenSet, flow: AppFlow, exists: bool) -> AppFlow:
        if exists:
            return self.update_app_flow(flow)
        # Nothing stored yet: the first edit creates the set
        stored = self.save(current.parent_document_id, current.screens, flow)
        return stored.app_flow

    @staticmethod
    def _bind(parent_id: str, screens: list[Screen], app_flow: AppFlow) -> ScreenSet:
        """Attach everything to ``parent_id`` and enforce link and position invariants."""
        screen_set = ScreenSet(
            screens=[
                s if s.parent_document_id == parent_id else s.model_copy(update={"parent_document_id": parent_id})
                for s in screens
            ],
            app_flow=app_flow.model_copy(update={"parent_document_id": parent_id}).renumbered(),
        )
        result = check_invariants(screen_set)
        if not is_successful(result):
            raise ValidationError(result.failure().message)
        return screen_set

    @staticmethod
    def _check_links(flow: AppFlow, screen_ids: set[str]) -> None:
        for step in flow.steps:
            if step.screen_id is not None and step.screen_id not in screen_ids:
                raise ValidationError(f"Step {step.id} references unknown screen {step.screen_id}")


__all__ = ["ScreenRepository"]
