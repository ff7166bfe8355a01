"""Anchor layer: locate nodes, anchor clicks to them and place pins back."""

from .calculator import Anchor, compute_anchor
from .env import Env, detect_env
from .locator import LocatorSynthesizer, css_escape, synthesize, validate_locator
from .resolver import Marker, Placement, place_markers, reposition, resolve
from .stability import is_stable_class, is_stable_identifier

__all__ = [
    "Anchor",
    "Env",
    "LocatorSynthesizer",
    "Marker",
    "Placement",
    "compute_anchor",
    "css_escape",
    "detect_env",
    "is_stable_class",
    "is_stable_identifier",
    "place_markers",
    "reposition",
    "resolve",
    "synthesize",
    "validate_locator",
]
