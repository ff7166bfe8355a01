"""Versioned annotation state: schema, validation, codec and capacity."""

from .capacity import (
    MAX_URL_BYTES,
    CapacityReport,
    assess_capacity,
    ensure_within_budget,
    ensure_within_config,
    estimate_bytes,
)
from .codec import (
    ShareCodec,
    decode,
    encode,
    from_fragment,
    from_json,
    from_share_url,
    read_json,
    to_json,
    to_share_url,
    write_json,
)
from .schema import CATEGORIES, SCHEMA_VERSION, LegacyPin, LegacyState, Pin, Reply, State
from .validator import create_state, migrate_v1_to_v2, next_pin_id, require_state, validate

__all__ = [
    "CATEGORIES",
    "MAX_URL_BYTES",
    "SCHEMA_VERSION",
    "CapacityReport",
    "LegacyPin",
    "LegacyState",
    "Pin",
    "Reply",
    "ShareCodec",
    "State",
    "assess_capacity",
    "create_state",
    "decode",
    "encode",
    "ensure_within_budget",
    "ensure_within_config",
    "estimate_bytes",
    "from_fragment",
    "from_json",
    "from_share_url",
    "migrate_v1_to_v2",
    "next_pin_id",
    "read_json",
    "require_state",
    "to_json",
    "to_share_url",
    "validate",
    "write_json",
]
