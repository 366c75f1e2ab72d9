"""Validation, JSON codec and error classification tests."""

import pytest
from hypothesis import given, strategies as st

from screenflow.core import (
    ApiError,
    ErrorKind,
    ExternalRateLimit,
    GenerationTimeout,
    JSONParseError,
    ParseError,
    TransportError,
    ValidationError,
    describe_error,
    extract_json,
    safe_json_dumps,
    strip_code_fences,
    validate_json_depth,
    validate_json_size,
)
from screenflow.models import Brief, FeatureDocument, GenerationRequest


# ============================================================================
# Request validation
# ============================================================================

@pytest.mark.unit
def test_generation_request_valid(brief, document):
    request = GenerationRequest(brief=brief, document=document, feature_summary="  summary  ")
    assert request.feature_summary == "summary"
    assert request.parent_document_id == "doc-1"


@pytest.mark.unit
def test_generation_request_rejects_unknown_fields(brief, document):
    with pytest.raises(Exception):
        GenerationRequest(brief=brief, document=document, extra_field="x")


@pytest.mark.unit
def test_generation_request_is_frozen(brief, document):
    request = GenerationRequest(brief=brief, document=document)
    with pytest.raises(Exception):
        request.feature_summary = "changed"


@pytest.mark.unit
def test_document_requires_id():
    with pytest.raises(Exception):
        FeatureDocument(id="")


@pytest.mark.unit
def test_brief_display_name():
    assert Brief(product_name="  ").display_name == "the application"
    assert Brief(product_name="FitTrack").display_name == "FitTrack"


# ============================================================================
# JSON helpers
# ============================================================================

class TestExtractJson:
    """Test JSON extraction from model output."""

    def test_plain_object(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_prose_around_object(self):
        assert extract_json('Sure! {"a": [1, 2]} Hope this helps.') == {"a": [1, 2]}

    def test_fenced(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert extract_json('```\n{"a": 1}\n```') == {"a": 1}

    def test_no_object(self):
        with pytest.raises(JSONParseError):
            extract_json("no braces here")

    def test_invalid_without_repair(self):
        with pytest.raises(JSONParseError):
            extract_json("{'a': 1}")

    def test_repair(self):
        assert extract_json("{'a': 1,}", repair=True) == {"a": 1}


@pytest.mark.unit
def test_validate_json_size():
    validate_json_size('{"test": "data"}', 1000)
    with pytest.raises(JSONParseError):
        validate_json_size("x" * 100_000, 1000)


@pytest.mark.unit
def test_validate_json_depth():
    validate_json_depth({"a": {"b": {"c": 1}}}, max_depth=5)

    deep: dict = {}
    current = deep
    for _ in range(25):
        current["next"] = {}
        current = current["next"]
    with pytest.raises(JSONParseError):
        validate_json_depth(deep, max_depth=20)


safe_text = st.text(alphabet="abcdefghijklmnopqrstuvwxyz _-", max_size=10)


@given(st.dictionaries(safe_text, st.integers(min_value=-(2**31), max_value=2**31) | safe_text, max_size=10))
def test_extract_json_accepts_any_flat_object(data):
    """Property test: any flat object survives extraction when wrapped in prose."""
    assert extract_json(f"Result:\n{safe_json_dumps(data)}\nDone.") == data


# ============================================================================
# Errors
# ============================================================================

class TestErrorKinds:
    """Test error classification and user wording."""

    def test_kinds(self):
        assert GenerationTimeout(120).kind is ErrorKind.TIMEOUT
        assert TransportError("x").kind is ErrorKind.TRANSPORT
        assert ApiError(502).kind is ErrorKind.API
        assert ParseError("x").kind is ErrorKind.PARSE
        assert ExternalRateLimit(429).kind is ErrorKind.RATE_LIMIT

    def test_timeout_message(self):
        assert GenerationTimeout(120).message == "Screen generation timed out after 120s"

    def test_api_error_status(self):
        error = ApiError(503)
        assert error.status == 503
        assert "503" in error.message

    def test_wording_differs_by_kind(self):
        timeout = describe_error(GenerationTimeout(120))
        network = describe_error(TransportError("reset"))
        service = describe_error(ApiError(500))
        generic = describe_error(RuntimeError("bug"))

        assert "timed out" in timeout
        assert len({timeout, network, service, generic}) == 4
        assert describe_error(ParseError("x")) == service


@pytest.mark.unit
def test_validation_error_is_plain_exception():
    assert issubclass(ValidationError, Exception)
