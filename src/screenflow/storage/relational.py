"""Primary relational store for screen sets."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import create_engine, delete, event, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from ..core import get_logger
from ..core.errors import ConflictError, NotFoundError, StoreError
from ..core.json import JSONParseError, loads, safe_json_dumps
from ..models.screens import (
    METADATA_ELEMENT_TYPE,
    AppFlow,
    FlowStep,
    Screen,
    ScreenSet,
    element_from_record,
    element_to_record,
    utcnow,
)
from .tables import app_flows, flow_steps, metadata, screens

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_store_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the primary store.

    In-memory SQLite gets a single shared connection so every session sees
    the same database; SQLite connections enforce foreign keys.
    """
    kwargs: dict[str, Any] = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url:
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


# ============================================================================
# Row mapping
# ============================================================================


def _encode_elements(screen: Screen) -> str:
    records = [element_to_record(element) for element in screen.elements]
    if screen.feature_id:
        records.append(
            {
                "id": METADATA_ELEMENT_TYPE,
                "type": METADATA_ELEMENT_TYPE,
                "properties": {"featureId": screen.feature_id},
            }
        )
    return safe_json_dumps(records)


def _decode_elements(raw: str, screen_id: str) -> tuple[list[Any], str | None]:
    try:
        records = loads(raw or "[]")
    except JSONParseError as e:
        logger.warning("elements_json_invalid", screen_id=screen_id, error=str(e))
        return [], None
    if not isinstance(records, list):
        return [], None

    elements = []
    feature_id = None
    for record in records:
        if not isinstance(record, dict):
            continue
        if record.get("type") == METADATA_ELEMENT_TYPE:
            properties = record.get("properties") or {}
            feature_id = properties.get("featureId") or None
            continue
        elements.append(element_from_record(record))
    return elements, feature_id


def _screen_from_row(row: Any) -> Screen:
    elements, feature_id = _decode_elements(row.elements_json, row.id)
    return Screen(
        id=row.id,
        parent_document_id=row.parent_id,
        name=row.name,
        description=row.description or "",
        feature_id=feature_id,
        elements=elements,
        created_at=row.created_at,
    )


# ============================================================================
# Store
# ============================================================================


def _is_foreign_key_violation(error: IntegrityError) -> bool:
    # 23503: SQLSTATE foreign_key_violation; SQLite only reports it in the message
    code = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
    return code == "23503" or "foreign key" in str(error.orig).lower()


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    """Map driver errors onto the store error hierarchy."""
    try:
        yield
    except StoreError:
        raise
    except IntegrityError as e:
        if _is_foreign_key_violation(e):
            logger.error("store_broken_reference", operation=operation, error=str(e.orig))
            raise StoreError(f"{operation} referenced a missing row: {e.orig}") from e
        logger.warning("store_conflict", operation=operation, error=str(e.orig))
        raise ConflictError(f"{operation} conflicted with a concurrent write: {e.orig}") from e
    except SQLAlchemyError as e:
        logger.error("store_error", operation=operation, error=str(e))
        raise StoreError(f"{operation} failed: {e}") from e


class SqlScreenStore:
    """
    Screen sets in three related tables: ``screens``, ``app_flows``, ``flow_steps``.

    Each operation runs in one transaction, so a replace either fully lands or
    leaves the previous set untouched. ``app_flows.parent_id`` is unique: two
    writers racing to create the first set for a parent surface as
    ``ConflictError`` instead of producing two flows.
    """

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        self.engine = engine
        if create_schema:
            with _translate_errors("create schema"):
                metadata.create_all(engine)

    def fetch(self, parent_id: str) -> ScreenSet | None:
        """Stored set for ``parent_id``, or None when no flow row exists."""
        with _translate_errors("fetch"), self.engine.connect() as conn:
            flow_row = conn.execute(
                select(app_flows).where(app_flows.c.parent_id == parent_id)
            ).first()
            if flow_row is None:
                return None

            screen_rows = conn.execute(
                select(screens)
                .where(screens.c.parent_id == parent_id)
                .order_by(screens.c.position, screens.c.created_at)
            ).all()
            step_rows = conn.execute(
                select(flow_steps)
                .where(flow_steps.c.app_flow_id == flow_row.id)
                .order_by(flow_steps.c.position)
            ).all()

        steps = [
            FlowStep(id=row.id, description=row.description or "", screen_id=row.screen_id, position=index)
            for index, row in enumerate(step_rows)
        ]
        return ScreenSet(
            screens=[_screen_from_row(row) for row in screen_rows],
            app_flow=AppFlow(
                id=flow_row.id,
                parent_document_id=parent_id,
                steps=steps,
                created_at=flow_row.created_at,
            ),
        )

    def replace(self, screen_set: ScreenSet) -> ScreenSet:
        """
        Store ``screen_set`` as the only set of its parent.

        An existing flow row keeps its id; its steps and the parent's screens
        are deleted and re-inserted. Otherwise a new flow row is created.

        Returns:
            The set as stored (flow id possibly replaced, positions renumbered)

        Raises:
            ConflictError: A concurrent writer created the flow row first
            StoreError: Any other driver failure
        """
        parent_id = screen_set.parent_document_id
        now = utcnow()

        with _translate_errors("replace"), self.engine.begin() as conn:
            existing_id = conn.execute(
                select(app_flows.c.id).where(app_flows.c.parent_id == parent_id)
            ).scalar_one_or_none()

            if existing_id is not None:
                conn.execute(delete(flow_steps).where(flow_steps.c.app_flow_id == existing_id))
                conn.execute(delete(screens).where(screens.c.parent_id == parent_id))
                conn.execute(
                    update(app_flows).where(app_flows.c.id == existing_id).values(updated_at=now)
                )
                flow_id = existing_id
            else:
                flow_id = screen_set.app_flow.id
                conn.execute(
                    insert(app_flows).values(
                        id=flow_id,
                        parent_id=parent_id,
                        created_at=screen_set.app_flow.created_at,
                        updated_at=now,
                    )
                )

            self._insert_screens(conn, screen_set.screens, now)
            flow = screen_set.app_flow.model_copy(update={"id": flow_id}).renumbered()
            self._insert_steps(conn, flow)

        logger.info(
            "set_replaced",
            parent_id=parent_id,
            app_flow_id=flow_id,
            replaced=existing_id is not None,
            screens=len(screen_set.screens),
            steps=len(flow.steps),
        )
        return screen_set.model_copy(update={"app_flow": flow})

    def delete(self, app_flow_id: str) -> bool:
        """Delete a flow, its steps and its parent's screens. False if the flow is unknown."""
        with _translate_errors("delete"), self.engine.begin() as conn:
            parent_id = conn.execute(
                select(app_flows.c.parent_id).where(app_flows.c.id == app_flow_id)
            ).scalar_one_or_none()
            if parent_id is None:
                return False

            conn.execute(delete(flow_steps).where(flow_steps.c.app_flow_id == app_flow_id))
            conn.execute(delete(screens).where(screens.c.parent_id == parent_id))
            conn.execute(delete(app_flows).where(app_flows.c.id == app_flow_id))

        logger.info("set_deleted", app_flow_id=app_flow_id, parent_id=parent_id)
        return True

    def update_app_flow(self, app_flow: AppFlow) -> AppFlow:
        """Replace the steps of an existing flow.

        Raises:
            NotFoundError: No flow with this id
        """
        flow = app_flow.renumbered()
        with _translate_errors("update app flow"), self.engine.begin() as conn:
            result = conn.execute(
                update(app_flows).where(app_flows.c.id == flow.id).values(updated_at=utcnow())
            )
            if result.rowcount == 0:
                raise NotFoundError(f"App flow not found: {flow.id}")
            conn.execute(delete(flow_steps).where(flow_steps.c.app_flow_id == flow.id))
            self._insert_steps(conn, flow)
        return flow

    def update_screen(self, screen: Screen) -> Screen:
        """Overwrite name, description and elements of an existing screen.

        Raises:
            NotFoundError: No screen with this id
        """
        with _translate_errors("update screen"), self.engine.begin() as conn:
            result = conn.execute(
                update(screens)
                .where(screens.c.id == screen.id)
                .values(
                    name=screen.name,
                    description=screen.description,
                    elements_json=_encode_elements(screen),
                    updated_at=utcnow(),
                )
            )
            if result.rowcount == 0:
                raise NotFoundError(f"Screen not found: {screen.id}")
        return screen

    def parent_id_of(self, app_flow_id: str) -> str | None:
        with _translate_errors("lookup"), self.engine.connect() as conn:
            return conn.execute(
                select(app_flows.c.parent_id).where(app_flows.c.id == app_flow_id)
            ).scalar_one_or_none()

    @staticmethod
    def _insert_screens(conn: Connection, items: list[Screen], now: datetime) -> None:
        if not items:
            return
        conn.execute(
            insert(screens),
            [
                {
                    "id": screen.id,
                    "parent_id": screen.parent_document_id,
                    "name": screen.name,
                    "description": screen.description,
                    "elements_json": _encode_elements(screen),
                    "position": index,
                    "created_at": screen.created_at,
                    "updated_at": now,
                }
                for index, screen in enumerate(items)
            ],
        )

    @staticmethod
    def _insert_steps(conn: Connection, flow: AppFlow) -> None:
        if not flow.steps:
            return
        conn.execute(
            insert(flow_steps),
            [
                {
                    "id": step.id,
                    "app_flow_id": flow.id,
                    "description": step.description,
                    "screen_id": step.screen_id,
                    "position": step.position,
                }
                for step in flow.steps
            ],
        )


__all__ = ["SqlScreenStore", "create_store_engine"]
