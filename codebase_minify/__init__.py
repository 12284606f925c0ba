"""
Condenses a source tree into a single Markdown document for language models,
stripping comments and collapsing whitespace without touching string literals.
"""

__version__ = "0.1.0"

from .minify import MinifyTransformer, minify, minify_spans
from .profiles import (
    LANGUAGE_PROFILES,
    BlockComment,
    LanguageProfile,
    Layout,
    ProfileRegistry,
    StringDelimiter,
)
from .scanner import Span, SpanKind, scan

__all__ = [
    "LANGUAGE_PROFILES",
    "BlockComment",
    "LanguageProfile",
    "Layout",
    "MinifyTransformer",
    "ProfileRegistry",
    "Span",
    "SpanKind",
    "StringDelimiter",
    "minify",
    "minify_spans",
    "scan",
]
