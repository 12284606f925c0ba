"""
Turns a span sequence back into text, optionally without comments and with
whitespace collapsed to the minimum that keeps every token intact.

String literals are always emitted byte for byte; code spans are never
rewritten. Only the gaps between emitted spans change.
"""

from typing import Iterable, List, Optional

from .profiles import LanguageProfile, Layout
from .scanner import Span, SpanKind, scan

# "#" is an operator char so "< #x" never turns into "<#x", a block opener.
OPERATOR_CHARS = frozenset("+-*/%=<>!&|^~:.?@#\\")
# Quotes are word characters: a literal never touches a prefix like r, b or L.
WORD_EXTRA_CHARS = frozenset("_$'\"`")


def is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch in WORD_EXTRA_CHARS or ord(ch) > 127


def fuses(left: str, right: str) -> bool:
    """Would *left* and *right* read as one token if written side by side?"""
    if is_word_char(left) and is_word_char(right):
        return True
    if left in OPERATOR_CHARS and right in OPERATOR_CHARS:
        return True
    # "1 .x" and "x . 5" would turn into number literals
    return (left == "." and right.isdigit()) or (left.isdigit() and right == ".")


class MinifyTransformer:
    """Maps spans plus mode flags to the final text of one file.

    With no profile (opaque pass-through) whitespace is collapsed
    conservatively: line breaks and indentation survive and inline runs
    become a single space.
    """

    def __init__(
        self,
        profile: Optional[LanguageProfile] = None,
        strip_comments: bool = False,
        collapse_whitespace: bool = True,
    ):
        self.profile = profile
        self.strip_comments = strip_comments
        self.collapse_whitespace = collapse_whitespace
        if profile is None:
            self.layout = Layout.INDENT
            self.tight = False
            self.loose_prefixes = ()
        else:
            self.layout = profile.layout
            self.tight = profile.tight
            self.loose_prefixes = profile.loose_line_prefixes

    def transform(self, spans: Iterable[Span]) -> str:
        out: List[str] = []
        gap: List[str] = []
        omitted = False
        last_char = ""
        after_comment = False
        loose_line = False

        for span in spans:
            if span.kind is SpanKind.WHITESPACE:
                gap.append(span.raw)
                continue
            if span.kind.is_comment and self.strip_comments:
                omitted = True
                if self.collapse_whitespace:
                    # A dropped comment still separates the tokens around it.
                    gap.append("\n" if "\n" in span.raw else " ")
                continue

            text = span.raw
            gap_text = "".join(gap)
            if out:
                sep = self._separator(
                    gap_text, last_char, text[0], omitted, after_comment, loose_line
                )
                out.append(sep)
                if "\n" in sep:
                    loose_line = self._starts_loose_line(span)
            else:
                if not self.collapse_whitespace:
                    out.append(gap_text)
                loose_line = self._starts_loose_line(span)

            out.append(text)
            last_char = text[-1]
            after_comment = span.kind.is_comment
            gap = []
            omitted = False

        if not self.collapse_whitespace:
            out.append("".join(gap))
        return "".join(out)

    def _starts_loose_line(self, span: Span) -> bool:
        return span.kind is SpanKind.CODE and span.raw.startswith(self.loose_prefixes)

    def _separator(
        self,
        gap: str,
        left: str,
        right: str,
        omitted: bool,
        after_comment: bool,
        loose_line: bool,
    ) -> str:
        if not self.collapse_whitespace:
            if not gap and omitted and fuses(left, right):
                return " "
            return gap
        if not gap:
            return ""

        if "\n" in gap and (after_comment or self.layout is not Layout.FREE):
            if self.layout is Layout.INDENT:
                indent = gap.rsplit("\n", 1)[1]
                return "\n" + indent.replace("\r", "")
            return "\n"
        if self.tight and not loose_line and not fuses(left, right):
            return ""
        return " "


def minify_spans(
    spans: Iterable[Span],
    profile: Optional[LanguageProfile],
    strip_comments: bool = False,
    collapse_whitespace: bool = True,
) -> str:
    return MinifyTransformer(profile, strip_comments, collapse_whitespace).transform(spans)


def minify(
    text: str,
    profile: Optional[LanguageProfile],
    strip_comments: bool = False,
    collapse_whitespace: bool = True,
) -> str:
    """Scan and transform *text* in one call."""
    return minify_spans(scan(text, profile), profile, strip_comments, collapse_whitespace)
