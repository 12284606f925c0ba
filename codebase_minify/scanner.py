"""
Lexical classifier that splits source text into typed spans.

The scanner is a single left-to-right state machine driven entirely by a
LanguageProfile. It never looks further ahead than the delimiter it is
matching (plus two characters for character-literal descriptors, or the tag
of a raw string with a custom delimiter), and every input produces a
well-defined span sequence: unterminated strings and block comments are
closed by convention instead of raising.
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Callable, List, Optional, Tuple

from .profiles import BlockComment, LanguageProfile, StringDelimiter


class SpanKind(Enum):
    CODE = "code"
    WHITESPACE = "whitespace"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    DOC_COMMENT = "doc_comment"
    STRING = "string"

    @property
    def is_comment(self) -> bool:
        return self in _COMMENT_KINDS


_COMMENT_KINDS = frozenset(
    {SpanKind.LINE_COMMENT, SpanKind.BLOCK_COMMENT, SpanKind.DOC_COMMENT}
)


@dataclass(frozen=True)
class Span:
    """A maximal run of text of one kind.

    ``start``/``end`` are offsets into the decoded text, ``raw`` is
    ``text[start:end]``. ``terminated`` is False for a string or block comment
    that was still open at the end of the line or the input.
    """

    kind: SpanKind
    start: int
    end: int
    raw: str
    terminated: bool = True


class Mode(Enum):
    CODE = "code"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    STRING = "string"


@dataclass
class ScanState:
    """Mutable state for one scan; never shared between scans."""

    mode: Mode = Mode.CODE
    start: int = 0
    kind: Optional[SpanKind] = None
    depth: int = 0
    block: Optional[BlockComment] = None
    delimiter: Optional[StringDelimiter] = None
    close: str = ""
    escaped: bool = False

    def enter_code(self):
        self.mode = Mode.CODE
        self.kind = None
        self.block = None
        self.delimiter = None
        self.close = ""
        self.depth = 0
        self.escaped = False


_NEWLINES = "\r\n"


def _longest_first(items, key):
    return tuple(sorted(items, key=lambda item: len(key(item)), reverse=True))


class Scanner:
    """Classifies text for one LanguageProfile."""

    def __init__(self, profile: LanguageProfile):
        self.profile = profile
        self._strings = _longest_first(profile.strings, key=lambda d: d.open)
        self._blocks = _longest_first(profile.block_comments, key=lambda b: b.open)
        markers = [(m, False) for m in profile.line_comments]
        markers += [(m, True) for m in profile.doc_line_comments]
        self._line_markers: Tuple[Tuple[str, bool], ...] = _longest_first(
            markers, key=lambda m: m[0]
        )
        self._boundary = profile.line_comment_boundary
        # First characters of every opener; anything else is plain code.
        self._starters = frozenset(
            [d.open[0] for d in self._strings]
            + [b.open[0] for b in self._blocks]
            + [m[0] for m, _ in self._line_markers]
        )

    def scan(self, text: str) -> List[Span]:
        spans: List[Span] = []
        state = ScanState()
        n = len(text)
        i = 0

        def emit(end: int, terminated: bool = True):
            if end > state.start:
                spans.append(
                    Span(state.kind, state.start, end, text[state.start:end], terminated)
                )
            state.start = end

        while i < n:
            if state.mode is Mode.CODE:
                i = self._step_code(text, i, state, emit)
            elif state.mode is Mode.STRING:
                i = self._step_string(text, i, state, emit)
            elif state.mode is Mode.BLOCK_COMMENT:
                i = self._step_block(text, i, state, emit)
            else:
                if text[i] in _NEWLINES:
                    emit(i)
                    state.enter_code()
                else:
                    i += 1

        # End of input closes whatever is open.
        if state.mode is Mode.BLOCK_COMMENT:
            state.kind = self._block_kind(text[state.start:], state.block)
            emit(n, terminated=False)
        elif state.mode is Mode.STRING:
            emit(n, terminated=False)
        else:
            emit(n)
        return spans

    # --- State steps; each returns the next position ---

    def _step_code(self, text: str, i: int, state: ScanState, emit: Callable) -> int:
        ch = text[i]
        if ch in self._starters:
            opened = self._open_string(text, i)
            if opened is not None:
                delimiter, end, close = opened
                emit(i)
                state.mode = Mode.STRING
                state.kind = SpanKind.STRING
                state.delimiter = delimiter
                state.close = close
                state.escaped = False
                return end

            block = self._open_block(text, i)
            if block is not None:
                emit(i)
                state.mode = Mode.BLOCK_COMMENT
                state.kind = SpanKind.BLOCK_COMMENT
                state.block = block
                state.depth = 1
                return i + len(block.open)

            line = self._open_line(text, i)
            if line is not None:
                marker, doc = line
                emit(i)
                state.mode = Mode.LINE_COMMENT
                state.kind = SpanKind.DOC_COMMENT if doc else SpanKind.LINE_COMMENT
                return i + len(marker)

        kind = SpanKind.WHITESPACE if ch.isspace() else SpanKind.CODE
        if kind is not state.kind:
            emit(i)
            state.kind = kind
        return i + 1

    def _step_string(self, text: str, i: int, state: ScanState, emit: Callable) -> int:
        delimiter = state.delimiter
        close = state.close
        if state.escaped:
            state.escaped = False
            return i + 1
        if delimiter.escape and text.startswith(delimiter.escape, i):
            state.escaped = True
            return i + len(delimiter.escape)
        if text.startswith(close, i):
            after = i + len(close)
            if delimiter.doubled and text.startswith(close, after):
                return after + len(close)
            emit(after)
            state.enter_code()
            return after
        if not delimiter.multi_line and text[i] in _NEWLINES:
            # Unterminated single-line literal; the newline stays whitespace.
            emit(i, terminated=False)
            state.enter_code()
            return i
        return i + 1

    def _step_block(self, text: str, i: int, state: ScanState, emit: Callable) -> int:
        block = state.block
        if text.startswith(block.close, i):
            state.depth -= 1
            end = i + len(block.close)
            if state.depth == 0:
                state.kind = self._block_kind(text[state.start:end], block)
                emit(end)
                state.enter_code()
            return end
        if block.nestable and text.startswith(block.open, i):
            state.depth += 1
            return i + len(block.open)
        return i + 1

    # --- Delimiter matching ---

    def _open_string(
        self, text: str, i: int
    ) -> Optional[Tuple[StringDelimiter, int, str]]:
        """Match a literal opening at *i*: descriptor, end of opener, closer."""
        for delimiter in self._strings:
            if not text.startswith(delimiter.open, i):
                continue
            if delimiter.boundary is not None and not _at_boundary(
                text, i, delimiter.boundary
            ):
                continue
            end = i + len(delimiter.open)
            if delimiter.tag_end is not None:
                tagged = _read_tag(text, end, delimiter)
                if tagged is None:
                    continue
                tag, end = tagged
                return delimiter, end, delimiter.close.replace("{tag}", tag)
            if delimiter.char_literal and not _is_char_literal(text, end, delimiter):
                continue
            return delimiter, end, delimiter.close
        return None

    def _open_block(self, text: str, i: int) -> Optional[BlockComment]:
        for block in self._blocks:
            if text.startswith(block.open, i):
                return block
        return None

    def _open_line(self, text: str, i: int) -> Optional[Tuple[str, bool]]:
        if self._boundary is not None and not _at_boundary(text, i, self._boundary):
            return None
        for marker, doc in self._line_markers:
            if text.startswith(marker, i):
                # "////" is an ordinary comment, not a doc comment
                if doc and text.startswith(marker[-1], i + len(marker)):
                    doc = False
                return marker, doc
        return None

    @staticmethod
    def _block_kind(raw: str, block: BlockComment) -> SpanKind:
        for prefix in block.doc_prefixes:
            if (
                raw.startswith(prefix)
                and not raw.startswith(prefix[-1], len(prefix))
                and len(raw) > len(prefix) + len(block.close)
            ):
                return SpanKind.DOC_COMMENT
        return SpanKind.BLOCK_COMMENT


def _at_boundary(text: str, i: int, boundary: str) -> bool:
    if i == 0:
        return True
    prev = text[i - 1]
    return prev.isspace() or prev in boundary


def _read_tag(
    text: str, start: int, delimiter: StringDelimiter
) -> Optional[Tuple[str, int]]:
    """Read a raw-string tag; returns it and the position after ``tag_end``."""
    limit = min(len(text), start + delimiter.tag_limit + 1)
    for j in range(start, limit):
        if text.startswith(delimiter.tag_end, j):
            return text[start:j], j + len(delimiter.tag_end)
        ch = text[j]
        if delimiter.tag_chars is not None:
            if ch not in delimiter.tag_chars:
                return None
        elif ch.isspace() or ch in "()\\":
            return None
    return None


def _is_char_literal(text: str, body: int, delimiter: StringDelimiter) -> bool:
    """A character literal holds one character or one escape sequence."""
    if body >= len(text):
        return False
    if delimiter.escape and text.startswith(delimiter.escape, body):
        return True
    if text[body] in _NEWLINES or text.startswith(delimiter.close, body):
        return False
    return text.startswith(delimiter.close, body + 1)


_RUNS = re.compile(r"\s+|\S+")


def scan_opaque(text: str) -> List[Span]:
    """Split text with no known profile into code and whitespace runs only."""
    return [
        Span(
            SpanKind.WHITESPACE if m.group().isspace() else SpanKind.CODE,
            m.start(),
            m.end(),
            m.group(),
        )
        for m in _RUNS.finditer(text)
    ]


@lru_cache(maxsize=None)
def scanner_for(profile: LanguageProfile) -> Scanner:
    return Scanner(profile)


def scan(text: str, profile: Optional[LanguageProfile]) -> List[Span]:
    """Classify *text* into contiguous spans covering it exactly once."""
    if profile is None:
        return scan_opaque(text)
    return scanner_for(profile).scan(text)
