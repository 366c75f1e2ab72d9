"""Tests for the relational primary store."""

import pytest
from sqlalchemy import func, select

from screenflow.core.errors import ConflictError, NotFoundError, StoreError
from screenflow.models import AppFlow, FlowStep, Screen, ScreenSet, UnknownElement, make_element
from screenflow.storage.tables import app_flows, flow_steps, screens


def count_rows(engine, table):
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(table)).scalar_one()


def shape(screen_set):
    """Comparable view of a set, ignoring timestamps."""
    return (
        [(s.id, s.name, s.description, s.feature_id, [e.properties for e in s.elements]) for s in screen_set.screens],
        [(st.id, st.description, st.screen_id, st.position) for st in screen_set.app_flow.steps],
    )


@pytest.mark.unit
def test_fetch_missing_parent_returns_none(store):
    assert store.fetch("nope") is None


@pytest.mark.unit
def test_replace_then_fetch_round_trip(store, screen_set):
    """Test a stored set reads back equal, in order, with feature ids kept."""
    stored = store.replace(screen_set)
    fetched = store.fetch("doc-1")

    assert fetched is not None
    assert shape(fetched) == shape(screen_set)
    assert fetched.app_flow.id == stored.app_flow.id == screen_set.app_flow.id
    assert fetched.screens[0].feature_id == "authentication"
    assert fetched.screens[1].feature_id is None


@pytest.mark.unit
def test_unknown_element_types_survive(store):
    screen = Screen(
        parent_document_id="doc-u",
        name="Gallery",
        elements=[make_element("carousel", {"items": "3"})],
    )
    store.replace(ScreenSet(screens=[screen], app_flow=AppFlow(parent_document_id="doc-u")))

    element = store.fetch("doc-u").screens[0].elements[0]
    assert isinstance(element, UnknownElement)
    assert element.stored_type == "carousel"


@pytest.mark.unit
def test_replace_keeps_existing_flow_id(store, engine, screen_set):
    """Test a second save swaps content but keeps one flow row per parent."""
    first = store.replace(screen_set)
    replacement = ScreenSet(
        screens=[Screen(parent_document_id="doc-1", name="Only")],
        app_flow=AppFlow(parent_document_id="doc-1", steps=[FlowStep(description="one")]),
    )
    second = store.replace(replacement)

    assert second.app_flow.id == first.app_flow.id
    fetched = store.fetch("doc-1")
    assert [s.name for s in fetched.screens] == ["Only"]
    assert [s.description for s in fetched.app_flow.steps] == ["one"]
    assert count_rows(engine, app_flows) == 1
    assert count_rows(engine, screens) == 1
    assert count_rows(engine, flow_steps) == 1


@pytest.mark.unit
def test_replace_renumbers_positions(store):
    flow = AppFlow(
        parent_document_id="doc-2",
        steps=[FlowStep(description="a", position=5), FlowStep(description="b", position=9)],
    )
    stored = store.replace(ScreenSet(screens=[], app_flow=flow))
    assert [s.position for s in stored.app_flow.steps] == [0, 1]
    assert [s.position for s in store.fetch("doc-2").app_flow.steps] == [0, 1]


@pytest.mark.unit
def test_empty_set_is_stored(store):
    """Test an empty set is a real, fetchable state."""
    empty = ScreenSet.empty("doc-e")
    store.replace(empty)

    fetched = store.fetch("doc-e")
    assert fetched is not None
    assert fetched.is_empty


@pytest.mark.unit
def test_delete_leaves_no_rows(store, engine, screen_set):
    stored = store.replace(screen_set)

    assert store.delete(stored.app_flow.id) is True
    assert store.fetch("doc-1") is None
    assert count_rows(engine, app_flows) == 0
    assert count_rows(engine, screens) == 0
    assert count_rows(engine, flow_steps) == 0


@pytest.mark.unit
def test_delete_unknown_flow(store):
    assert store.delete("flow_missing") is False


@pytest.mark.unit
def test_delete_only_touches_its_parent(store, screen_set):
    stored = store.replace(screen_set)
    other = store.replace(
        ScreenSet(screens=[Screen(parent_document_id="doc-2", name="X")], app_flow=AppFlow(parent_document_id="doc-2"))
    )

    store.delete(stored.app_flow.id)
    assert store.fetch("doc-2").screens[0].name == "X"
    assert store.parent_id_of(other.app_flow.id) == "doc-2"


class TestIncrementalUpdates:
    """Test single-flow and single-screen updates."""

    def test_update_app_flow(self, store, screen_set):
        stored = store.replace(screen_set)
        flow = stored.app_flow.with_step_removed(stored.app_flow.steps[0].id)

        updated = store.update_app_flow(flow)

        assert [s.position for s in updated.steps] == [0, 1]
        assert [s.description for s in store.fetch("doc-1").app_flow.steps] == [
            "User sees home",
            "System syncs data",
        ]

    def test_update_missing_flow(self, store):
        with pytest.raises(NotFoundError):
            store.update_app_flow(AppFlow(parent_document_id="doc-1"))

    def test_update_screen(self, store, screen_set):
        store.replace(screen_set)
        login = screen_set.screens[0].model_copy(update={"name": "Sign In", "feature_id": "auth"})

        store.update_screen(login)

        fetched = store.fetch("doc-1").screens[0]
        assert fetched.name == "Sign In"
        assert fetched.feature_id == "auth"

    def test_update_missing_screen(self, store):
        with pytest.raises(NotFoundError):
            store.update_screen(Screen(parent_document_id="doc-1", name="Ghost"))


@pytest.mark.unit
def test_duplicate_flow_id_is_conflict(store, screen_set):
    """Test integrity violations surface as ConflictError."""
    store.replace(screen_set)
    clash = ScreenSet(
        screens=[],
        app_flow=AppFlow(id=screen_set.app_flow.id, parent_document_id="doc-other"),
    )
    with pytest.raises(ConflictError):
        store.replace(clash)
    # The failed transaction left nothing behind
    assert store.fetch("doc-other") is None


@pytest.mark.unit
def test_driver_failure_is_store_error(engine, store):
    with engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE flow_steps")
        conn.exec_driver_sql("DROP TABLE app_flows")
    with pytest.raises(StoreError) as exc_info:
        store.fetch("doc-1")
    assert not isinstance(exc_info.value, (ConflictError, NotFoundError))


@pytest.mark.unit
def test_missing_reference_is_store_error(store, screen_set):
    """Test a step pointing at an unstored screen is a store failure, not a conflict."""
    stored = store.replace(screen_set)
    flow = stored.app_flow.with_step_added("dangling", screen_id="scr_unstored")

    with pytest.raises(StoreError) as exc_info:
        store.update_app_flow(flow)

    assert not isinstance(exc_info.value, ConflictError)
    assert len(store.fetch("doc-1").app_flow.steps) == len(stored.app_flow.steps)
