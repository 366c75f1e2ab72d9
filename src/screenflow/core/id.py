"""ID Generation System.

ULID-based identifiers for every entity of a screen set.

- K-sortable: ids minted later sort later
- Prefixed: ``scr_``, ``el_``, ``flow_``, ``step_``, ``req_`` make logs readable
- Type-safe: NewType wrappers keep screen ids apart from step ids
"""

from datetime import datetime
from typing import NewType
from ulid import ULID

# ============================================================================
# Type-Safe ID Wrappers
# ============================================================================

ScreenID = NewType("ScreenID", str)
ElementID = NewType("ElementID", str)
AppFlowID = NewType("AppFlowID", str)
FlowStepID = NewType("FlowStepID", str)
RequestID = NewType("RequestID", str)


class Prefix:
    """ID prefix constants."""

    SCREEN = "scr"
    ELEMENT = "el"
    APP_FLOW = "flow"
    FLOW_STEP = "step"
    REQUEST = "req"


class Generator:
    """ULID generator (monotonic within the same millisecond)."""

    def generate(self) -> str:
        """Generate a new ULID."""
        return str(ULID())

    def generate_with_prefix(self, prefix: str) -> str:
        """Generate ULID with type prefix."""
        return f"{prefix}_{self.generate()}"

    def timestamp(self, id_str: str) -> int:
        """Extract timestamp (milliseconds) from ULID."""
        try:
            ulid_str = id_str.rsplit("_", 1)[-1]
            return int(ULID.from_str(ulid_str).timestamp * 1000)
        except ValueError:
            return 0


# Singleton instance
_generator = Generator()


def new_screen_id() -> ScreenID:
    return ScreenID(_generator.generate_with_prefix(Prefix.SCREEN))


def new_element_id() -> ElementID:
    return ElementID(_generator.generate_with_prefix(Prefix.ELEMENT))


def new_app_flow_id() -> AppFlowID:
    return AppFlowID(_generator.generate_with_prefix(Prefix.APP_FLOW))


def new_flow_step_id() -> FlowStepID:
    return FlowStepID(_generator.generate_with_prefix(Prefix.FLOW_STEP))


def new_request_id() -> RequestID:
    return RequestID(_generator.generate_with_prefix(Prefix.REQUEST))


def is_valid(id_str: str) -> bool:
    """Check if string is a (optionally prefixed) ULID."""
    ulid_part = id_str.rsplit("_", 1)[-1]
    if len(ulid_part) != 26:
        return False
    try:
        ULID.from_str(ulid_part)
        return True
    except ValueError:
        return False


def extract_prefix(id_str: str) -> str | None:
    """Return the type prefix of a prefixed ID, or None."""
    parts = id_str.split("_")
    return parts[0] if len(parts) == 2 else None


def extract_timestamp(id_str: str) -> datetime | None:
    """Creation time encoded in the ULID, or None if the ID is not a ULID."""
    timestamp_ms = _generator.timestamp(id_str)
    return datetime.fromtimestamp(timestamp_ms / 1000.0) if timestamp_ms > 0 else None
