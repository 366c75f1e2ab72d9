"""Tests for the screen-set domain model."""

import pytest
from returns.pipeline import is_successful

from screenflow.core.validate import ValidationError
from screenflow.models import (
    AppFlow,
    ButtonElement,
    FlowStep,
    ImageElement,
    InputElement,
    Screen,
    ScreenSet,
    TextElement,
    UnknownElement,
    check_invariants,
    element_from_record,
    element_to_record,
    make_element,
)


# ============================================================================
# Elements
# ============================================================================

class TestMakeElement:
    """Test typed element construction from loose properties."""

    def test_known_types_map_to_variants(self):
        assert isinstance(make_element("image", {"description": "Logo"}), ImageElement)
        assert isinstance(make_element("input", {"description": "Email"}), InputElement)
        assert isinstance(make_element("text", {"content": "Hi"}), TextElement)
        assert isinstance(make_element("button", {"content": "Go"}), ButtonElement)

    def test_type_is_case_insensitive(self):
        element = make_element("Button", {"content": "Go", "action": "Navigate"})
        assert isinstance(element, ButtonElement)
        assert element.action == "Navigate"

    def test_missing_type_becomes_unknown(self):
        element = make_element(None, {"content": "x"})
        assert isinstance(element, UnknownElement)
        assert element.stored_type == "unknown"
        assert element.declared_type is None

    def test_unrecognised_type_keeps_declared_name(self):
        element = make_element("carousel", {"items": "3"})
        assert isinstance(element, UnknownElement)
        assert element.stored_type == "carousel"
        assert element.properties == {"items": "3"}

    def test_unknown_keys_are_preserved(self):
        element = make_element("input", {"description": "Email", "placeholder": "you@x.com"})
        assert element.description == "Email"
        assert element.extra == {"placeholder": "you@x.com"}
        assert element.properties == {"description": "Email", "placeholder": "you@x.com"}

    def test_non_string_values_are_coerced(self):
        element = make_element("input", {"isRequired": True, "maxLength": 40, "options": ["a", "b"]})
        assert element.extra["isRequired"] == "true"
        assert element.extra["maxLength"] == "40"
        assert element.extra["options"] == '["a","b"]'

    def test_missing_properties_default_to_empty(self):
        element = make_element("text")
        assert element.properties == {}

    def test_elements_get_fresh_ids(self):
        assert make_element("text").id != make_element("text").id


@pytest.mark.unit
def test_element_record_round_trip():
    """Records written for storage rebuild the same element."""
    element = make_element("carousel", {"items": "3"}, element_id="el_1")
    rebuilt = element_from_record(element_to_record(element))

    assert rebuilt.id == "el_1"
    assert rebuilt.stored_type == "carousel"
    assert rebuilt.properties == {"items": "3"}


# ============================================================================
# AppFlow edits
# ============================================================================

@pytest.fixture
def flow():
    return AppFlow(
        parent_document_id="doc-1",
        steps=[FlowStep(description="a"), FlowStep(description="b"), FlowStep(description="c")],
    ).renumbered()


class TestAppFlowEdits:
    """Test incremental step edits keep positions contiguous."""

    def test_renumbered(self, flow):
        assert [s.position for s in flow.steps] == [0, 1, 2]

    def test_add_appends(self, flow):
        updated = flow.with_step_added("d")
        assert [s.description for s in updated.steps] == ["a", "b", "c", "d"]
        assert [s.position for s in updated.steps] == [0, 1, 2, 3]

    def test_add_at_index(self, flow):
        updated = flow.with_step_added("first", index=0)
        assert updated.steps[0].description == "first"
        assert [s.position for s in updated.steps] == [0, 1, 2, 3]

    def test_edit(self, flow):
        target = flow.steps[1]
        updated = flow.with_step_edited(target.id, "B", "scr_x")
        assert updated.steps[1].description == "B"
        assert updated.steps[1].screen_id == "scr_x"
        assert updated.steps[1].id == target.id

    def test_edit_unknown_step(self, flow):
        with pytest.raises(ValidationError):
            flow.with_step_edited("step_missing", "x", None)

    def test_remove_closes_gap(self, flow):
        updated = flow.with_step_removed(flow.steps[0].id)
        assert [s.description for s in updated.steps] == ["b", "c"]
        assert [s.position for s in updated.steps] == [0, 1]

    def test_edits_do_not_mutate_original(self, flow):
        flow.with_step_removed(flow.steps[0].id)
        assert len(flow.steps) == 3


# ============================================================================
# ScreenSet
# ============================================================================

class TestScreenSet:
    """Test the aggregate and its invariants."""

    def test_empty(self):
        empty = ScreenSet.empty("doc-9")
        assert empty.is_empty
        assert empty.parent_document_id == "doc-9"
        assert empty.app_flow.id

    def test_empty_sets_get_fresh_flow_ids(self):
        assert ScreenSet.empty("doc-9").app_flow.id != ScreenSet.empty("doc-9").app_flow.id

    def test_screens_must_share_parent(self):
        with pytest.raises(ValueError):
            ScreenSet(
                screens=[Screen(parent_document_id="other", name="X")],
                app_flow=AppFlow(parent_document_id="doc-1"),
            )

    def test_screen_by_name_first_match(self):
        first = Screen(parent_document_id="d", name="Dup")
        second = Screen(parent_document_id="d", name="Dup")
        screen_set = ScreenSet(screens=[first, second], app_flow=AppFlow(parent_document_id="d"))
        assert screen_set.screen_by_name("Dup").id == first.id
        assert screen_set.screen_by_name("Missing") is None

    def test_check_invariants_ok(self, screen_set):
        assert is_successful(check_invariants(screen_set))

    def test_check_invariants_dangling_screen(self, screen_set):
        flow = screen_set.app_flow.with_step_added("broken", screen_id="scr_missing")
        result = check_invariants(screen_set.model_copy(update={"app_flow": flow}))
        assert not is_successful(result)
        assert result.failure().field == "screen_id"

    def test_check_invariants_gap_in_positions(self, screen_set):
        steps = [s.model_copy(update={"position": s.position * 2}) for s in screen_set.app_flow.steps]
        broken = screen_set.model_copy(
            update={"app_flow": screen_set.app_flow.model_copy(update={"steps": steps})}
        )
        result = check_invariants(broken)
        assert not is_successful(result)
        assert result.failure().field == "position"

    def test_json_round_trip_keeps_variants(self, screen_set):
        rebuilt = ScreenSet.model_validate(screen_set.model_dump(mode="json"))
        assert isinstance(rebuilt.screens[0].elements[1], ButtonElement)
        assert rebuilt.screens[0].elements[1].action == "Navigate to Home Screen"
