"""Document tree and layout collaborators used by the anchor layer."""

from .layout import Box, Layout, StaticLayout
from .tree import Document

__all__ = ["Box", "Document", "Layout", "StaticLayout"]
