"""
Declarative lexical profiles for the languages the scanner understands.

A profile only describes how comments and string literals are delimited and
how much whitespace the language can lose. Adding a language means adding a
row to LANGUAGE_PROFILES; the scanner itself has no per-language branches.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .errors import UnknownLanguageError


class Layout(Enum):
    """How significant line structure is for a language."""

    FREE = "free"  # newlines are ordinary whitespace
    LINES = "lines"  # newlines end statements/directives
    INDENT = "indent"  # newlines and leading indentation are syntax


@dataclass(frozen=True)
class StringDelimiter:
    """One way of writing a string (or character) literal.

    ``boundary`` works like ``LanguageProfile.line_comment_boundary``: the
    opener only counts at the start of the input, after whitespace, or right
    after one of its characters. With ``tag_end`` set the literal is a raw
    string with a custom delimiter: ``open`` is followed by a tag of at most
    ``tag_limit`` characters (from ``tag_chars``, or anything but whitespace,
    parentheses and backslash) and then ``tag_end``; ``{tag}`` in ``close`` is
    replaced by that tag.
    """

    open: str
    close: Optional[str] = None
    escape: Optional[str] = "\\"
    doubled: bool = False
    multi_line: bool = False
    char_literal: bool = False
    boundary: Optional[str] = None
    tag_end: Optional[str] = None
    tag_chars: Optional[str] = None
    tag_limit: int = 16

    def __post_init__(self):
        if self.close is None:
            object.__setattr__(self, "close", self.open)


@dataclass(frozen=True)
class BlockComment:
    """A delimited comment, e.g. ``/* ... */``."""

    open: str
    close: str
    nestable: bool = False
    doc_prefixes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LanguageProfile:
    name: str
    fence: str
    extensions: Tuple[str, ...] = ()
    filenames: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()
    line_comments: Tuple[str, ...] = ()
    doc_line_comments: Tuple[str, ...] = ()
    block_comments: Tuple[BlockComment, ...] = ()
    strings: Tuple[StringDelimiter, ...] = ()
    # When set, a line comment marker only counts at the start of the input,
    # after whitespace, or right after one of these characters.
    line_comment_boundary: Optional[str] = None
    layout: Layout = Layout.FREE
    # Lines starting with one of these (C preprocessor directives) keep a
    # single space between tokens: "#define N (1)" differs from "#define N(1)".
    loose_line_prefixes: Tuple[str, ...] = ()
    # Tight profiles drop whitespace between tokens that cannot fuse; loose
    # ones keep a single space wherever there was whitespace.
    tight: bool = True

    @property
    def selectors(self) -> Tuple[str, ...]:
        """All lower-cased keys this profile is registered under."""
        keys = (self.name,) + self.aliases + self.extensions + self.filenames
        return tuple(k.lower() for k in keys)


# --- Shared building blocks ---

C_BLOCK = BlockComment("/*", "*/")
C_DOC_BLOCK = BlockComment("/*", "*/", doc_prefixes=("/**",))
C_NESTED_DOC_BLOCK = BlockComment(
    "/*", "*/", nestable=True, doc_prefixes=("/**", "/*!")
)

DQ = StringDelimiter('"')
SQ = StringDelimiter("'")
DQ_MULTI = StringDelimiter('"', multi_line=True)
SQ_MULTI = StringDelimiter("'", multi_line=True)
SQ_RAW = StringDelimiter("'", escape=None, multi_line=True)
CHAR = StringDelimiter("'", char_literal=True)
TRIPLE_DQ = StringDelimiter('"""', multi_line=True)
TRIPLE_SQ = StringDelimiter("'''", multi_line=True)
TRIPLE_DQ_RAW = StringDelimiter('"""', escape=None, multi_line=True)
TRIPLE_SQ_RAW = StringDelimiter("'''", escape=None, multi_line=True)
BACKTICK_RAW = StringDelimiter("`", escape=None, multi_line=True)
BACKTICK_TEMPLATE = StringDelimiter("`", multi_line=True)
SQL_SQ = StringDelimiter("'", escape=None, doubled=True, multi_line=True)
SQL_DQ = StringDelimiter('"', escape=None, doubled=True, multi_line=True)

SHELL_BOUNDARY = ";&|()"

# Quotes in markup only open a value after "=" or whitespace: "it's" in text is text.
ATTR_DQ = StringDelimiter('"', escape=None, multi_line=True, boundary="=")
ATTR_SQ = StringDelimiter("'", escape=None, multi_line=True, boundary="=")

# YAML quoted scalars start a value, a flow item or a sequence entry.
YAML_BOUNDARY = ":[{,-"

# R"tag( ... )tag" with any encoding prefix
CPP_RAW_STRINGS = tuple(
    StringDelimiter(prefix + 'R"', '){tag}"', escape=None, multi_line=True, tag_end="(")
    for prefix in ("", "L", "u", "U", "u8")
)

# Unquoted url(...) is one token: "//" inside it is not a comment.
CSS_URL = StringDelimiter("url(", ")", escape=None)

# Elements whose content keeps its whitespace, taken whole.
HTML_VERBATIM = tuple(
    StringDelimiter(f"<{tag}", f"</{tag}>", escape=None, multi_line=True)
    for name in ("pre", "textarea")
    for tag in (name, name.upper())
)

_JS_LIKE = dict(
    line_comments=("//",),
    block_comments=(C_DOC_BLOCK,),
    strings=(DQ, SQ, BACKTICK_TEMPLATE),
    layout=Layout.LINES,
)


LANGUAGE_PROFILES: Tuple[LanguageProfile, ...] = (
    LanguageProfile(
        name="rust",
        fence="rust",
        extensions=("rs",),
        line_comments=("//",),
        doc_line_comments=("///", "//!"),
        block_comments=(C_NESTED_DOC_BLOCK,),
        strings=(
            StringDelimiter(
                "r",
                '"{tag}',
                escape=None,
                multi_line=True,
                tag_end='"',
                tag_chars="#",
                tag_limit=255,
            ),
            DQ_MULTI,
            CHAR,
        ),
    ),
    LanguageProfile(
        name="c",
        fence="c",
        extensions=("c", "h"),
        line_comments=("//",),
        block_comments=(C_DOC_BLOCK,),
        strings=(DQ, CHAR),
        layout=Layout.LINES,
        loose_line_prefixes=("#",),
    ),
    LanguageProfile(
        name="cpp",
        fence="cpp",
        extensions=("cc", "cpp", "cxx", "c++", "hpp", "hh", "hxx", "ino"),
        aliases=("c++",),
        line_comments=("//",),
        doc_line_comments=("///", "//!"),
        block_comments=(BlockComment("/*", "*/", doc_prefixes=("/**", "/*!")),),
        strings=CPP_RAW_STRINGS + (DQ, CHAR),
        layout=Layout.LINES,
        loose_line_prefixes=("#",),
    ),
    LanguageProfile(
        name="csharp",
        fence="csharp",
        extensions=("cs", "csx"),
        aliases=("c#", "cs"),
        line_comments=("//",),
        doc_line_comments=("///",),
        block_comments=(C_DOC_BLOCK,),
        strings=(
            TRIPLE_DQ_RAW,
            StringDelimiter('@"', '"', escape=None, doubled=True, multi_line=True),
            DQ,
            CHAR,
        ),
        layout=Layout.LINES,
        loose_line_prefixes=("#",),
    ),
    LanguageProfile(
        name="java",
        fence="java",
        extensions=("java",),
        line_comments=("//",),
        block_comments=(C_DOC_BLOCK,),
        strings=(TRIPLE_DQ, DQ, CHAR),
    ),
    LanguageProfile(
        name="kotlin",
        fence="kotlin",
        extensions=("kt", "kts"),
        line_comments=("//",),
        block_comments=(BlockComment("/*", "*/", nestable=True, doc_prefixes=("/**",)),),
        strings=(TRIPLE_DQ_RAW, DQ, CHAR),
        layout=Layout.LINES,
    ),
    LanguageProfile(
        name="scala",
        fence="scala",
        extensions=("scala", "sc", "sbt"),
        line_comments=("//",),
        block_comments=(BlockComment("/*", "*/", nestable=True, doc_prefixes=("/**",)),),
        strings=(TRIPLE_DQ_RAW, DQ, CHAR),
        layout=Layout.LINES,
    ),
    LanguageProfile(
        name="swift",
        fence="swift",
        extensions=("swift",),
        line_comments=("//",),
        doc_line_comments=("///",),
        block_comments=(BlockComment("/*", "*/", nestable=True, doc_prefixes=("/**",)),),
        strings=(TRIPLE_DQ, DQ),
        layout=Layout.LINES,
    ),
    LanguageProfile(
        name="go",
        fence="go",
        extensions=("go",),
        aliases=("golang",),
        line_comments=("//",),
        block_comments=(C_BLOCK,),
        strings=(DQ, BACKTICK_RAW, CHAR),
        layout=Layout.LINES,
    ),
    LanguageProfile(
        name="dart",
        fence="dart",
        extensions=("dart",),
        line_comments=("//",),
        doc_line_comments=("///",),
        block_comments=(BlockComment("/*", "*/", nestable=True, doc_prefixes=("/**",)),),
        strings=(TRIPLE_DQ, TRIPLE_SQ, DQ, SQ),
    ),
    LanguageProfile(
        name="javascript",
        fence="javascript",
        extensions=("js", "mjs", "cjs", "jsx"),
        aliases=("node",),
        **_JS_LIKE,
    ),
    LanguageProfile(
        name="typescript",
        fence="typescript",
        extensions=("ts", "mts", "cts", "tsx"),
        **_JS_LIKE,
    ),
    LanguageProfile(
        name="php",
        fence="php",
        extensions=("php", "phtml"),
        line_comments=("//", "#"),
        block_comments=(C_DOC_BLOCK,),
        strings=(
            # PHP 8 attributes, not comments
            StringDelimiter("#[", "]", escape=None, multi_line=True),
            DQ_MULTI,
            SQ_MULTI,
        ),
        layout=Layout.LINES,
    ),
    LanguageProfile(
        name="python",
        fence="python",
        extensions=("py", "pyw", "pyi"),
        aliases=("py",),
        line_comments=("#",),
        strings=(TRIPLE_DQ, TRIPLE_SQ, DQ, SQ),
        layout=Layout.INDENT,
    ),
    LanguageProfile(
        name="ruby",
        fence="ruby",
        extensions=("rb", "rake", "gemspec"),
        filenames=("Rakefile", "Gemfile"),
        line_comments=("#",),
        strings=(DQ_MULTI, SQ_MULTI),
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="shell",
        fence="bash",
        extensions=("sh", "bash", "zsh", "ksh"),
        aliases=("bash", "zsh"),
        line_comments=("#",),
        strings=(DQ_MULTI, SQ_RAW),
        line_comment_boundary=SHELL_BOUNDARY,
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="powershell",
        fence="powershell",
        extensions=("ps1", "psm1", "psd1"),
        line_comments=("#",),
        block_comments=(BlockComment("<#", "#>"),),
        strings=(StringDelimiter('"', escape="`", multi_line=True), SQL_SQ),
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="perl",
        fence="perl",
        extensions=("pl", "pm", "t"),
        line_comments=("#",),
        strings=(DQ_MULTI, SQ_MULTI),
        line_comment_boundary=";{}()",
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="lua",
        fence="lua",
        extensions=("lua",),
        line_comments=("--",),
        block_comments=(BlockComment("--[[", "]]"),),
        strings=(StringDelimiter("[[", "]]", escape=None, multi_line=True), DQ, SQ),
    ),
    LanguageProfile(
        name="sql",
        fence="sql",
        extensions=("sql", "ddl", "psql"),
        line_comments=("--",),
        block_comments=(C_BLOCK,),
        strings=(SQL_SQ, SQL_DQ),
    ),
    LanguageProfile(
        name="haskell",
        fence="haskell",
        extensions=("hs", "lhs"),
        line_comments=("--",),
        doc_line_comments=("-- |", "-- ^"),
        block_comments=(BlockComment("{-", "-}", nestable=True, doc_prefixes=("{-|",)),),
        strings=(DQ, CHAR),
        layout=Layout.INDENT,
        tight=False,
    ),
    LanguageProfile(
        name="ocaml",
        fence="ocaml",
        extensions=("ml", "mli"),
        block_comments=(BlockComment("(*", "*)", nestable=True, doc_prefixes=("(**",)),),
        strings=(DQ_MULTI, CHAR),
    ),
    LanguageProfile(
        name="pascal",
        fence="pascal",
        extensions=("pas", "pp", "dpr", "lpr"),
        aliases=("delphi",),
        line_comments=("//",),
        block_comments=(BlockComment("{", "}"), BlockComment("(*", "*)")),
        strings=(StringDelimiter("'", escape=None, doubled=True),),
    ),
    LanguageProfile(
        name="html",
        fence="html",
        extensions=("html", "htm", "xhtml"),
        block_comments=(BlockComment("<!--", "-->"),),
        strings=HTML_VERBATIM + (ATTR_DQ, ATTR_SQ),
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="xml",
        fence="xml",
        extensions=("xml", "xsd", "xsl", "xslt", "svg", "plist", "csproj"),
        block_comments=(BlockComment("<!--", "-->"),),
        strings=(
            StringDelimiter("<![CDATA[", "]]>", escape=None, multi_line=True),
            ATTR_DQ,
            ATTR_SQ,
        ),
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="css",
        fence="css",
        extensions=("css",),
        block_comments=(C_BLOCK,),
        strings=(CSS_URL, DQ, SQ),
        tight=False,
    ),
    LanguageProfile(
        name="scss",
        fence="scss",
        extensions=("scss", "sass", "less"),
        aliases=("less",),
        line_comments=("//",),
        block_comments=(C_BLOCK,),
        strings=(CSS_URL, DQ, SQ),
        tight=False,
    ),
    LanguageProfile(
        name="json",
        fence="json",
        extensions=("json", "jsonc", "json5"),
        line_comments=("//",),
        block_comments=(C_BLOCK,),
        strings=(DQ,),
    ),
    LanguageProfile(
        name="yaml",
        fence="yaml",
        extensions=("yml", "yaml"),
        line_comments=("#",),
        strings=(
            StringDelimiter('"', multi_line=True, boundary=YAML_BOUNDARY),
            StringDelimiter(
                "'", escape=None, doubled=True, multi_line=True, boundary=YAML_BOUNDARY
            ),
        ),
        line_comment_boundary="",
        layout=Layout.INDENT,
        tight=False,
    ),
    LanguageProfile(
        name="toml",
        fence="toml",
        extensions=("toml",),
        line_comments=("#",),
        strings=(TRIPLE_DQ, TRIPLE_SQ_RAW, DQ, StringDelimiter("'", escape=None)),
        layout=Layout.LINES,
    ),
    LanguageProfile(
        name="ini",
        fence="ini",
        extensions=("ini", "cfg", "conf", "properties"),
        line_comments=(";", "#"),
        line_comment_boundary="",
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="makefile",
        fence="makefile",
        extensions=("mk", "mak"),
        filenames=("Makefile", "GNUmakefile"),
        aliases=("make",),
        line_comments=("#",),
        layout=Layout.INDENT,
        tight=False,
    ),
    LanguageProfile(
        name="dockerfile",
        fence="dockerfile",
        extensions=("dockerfile",),
        filenames=("Dockerfile", "Containerfile"),
        aliases=("docker",),
        line_comments=("#",),
        strings=(DQ_MULTI, SQ_RAW),
        line_comment_boundary=SHELL_BOUNDARY,
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="cmake",
        fence="cmake",
        extensions=("cmake",),
        filenames=("CMakeLists.txt",),
        line_comments=("#",),
        strings=(DQ_MULTI,),
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="hcl",
        fence="hcl",
        extensions=("tf", "tfvars", "hcl"),
        aliases=("terraform",),
        line_comments=("#", "//"),
        block_comments=(C_BLOCK,),
        strings=(DQ,),
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="groovy",
        fence="groovy",
        extensions=("groovy", "gradle"),
        aliases=("gradle",),
        line_comments=("//",),
        block_comments=(C_DOC_BLOCK,),
        strings=(TRIPLE_DQ, TRIPLE_SQ, DQ, SQ),
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="protobuf",
        fence="protobuf",
        extensions=("proto",),
        aliases=("proto",),
        line_comments=("//",),
        block_comments=(C_BLOCK,),
        strings=(DQ, SQ),
    ),
    LanguageProfile(
        name="r",
        fence="r",
        extensions=("r",),
        line_comments=("#",),
        strings=(DQ_MULTI, SQ_MULTI, BACKTICK_RAW),
        layout=Layout.LINES,
    ),
    LanguageProfile(
        name="julia",
        fence="julia",
        extensions=("jl",),
        line_comments=("#",),
        block_comments=(BlockComment("#=", "=#", nestable=True),),
        strings=(TRIPLE_DQ, DQ_MULTI, CHAR),
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="nim",
        fence="nim",
        extensions=("nim", "nims", "nimble"),
        line_comments=("#",),
        doc_line_comments=("##",),
        block_comments=(
            BlockComment("##[", "]##", nestable=True, doc_prefixes=("##[",)),
            BlockComment("#[", "]#", nestable=True),
        ),
        strings=(TRIPLE_DQ_RAW, DQ, CHAR),
        layout=Layout.INDENT,
        tight=False,
    ),
    LanguageProfile(
        name="zig",
        fence="zig",
        extensions=("zig",),
        line_comments=("//",),
        doc_line_comments=("///", "//!"),
        strings=(DQ, CHAR),
    ),
    LanguageProfile(
        name="elixir",
        fence="elixir",
        extensions=("ex", "exs"),
        line_comments=("#",),
        strings=(TRIPLE_DQ, TRIPLE_SQ, DQ_MULTI, SQ_MULTI),
        layout=Layout.LINES,
        tight=False,
    ),
    LanguageProfile(
        name="lisp",
        fence="lisp",
        extensions=("clj", "cljs", "cljc", "edn", "lisp", "lsp", "el", "scm", "rkt"),
        aliases=("clojure", "scheme", "racket"),
        line_comments=(";",),
        strings=(DQ_MULTI,),
        tight=False,
    ),
)


class ProfileRegistry:
    """Read-only table mapping selectors to language profiles.

    Selectors are lower-cased extensions, exact file names, language names and
    aliases. The table is built once and never changes afterwards; the first
    profile to claim a selector keeps it.
    """

    def __init__(self, profiles: Iterable[LanguageProfile]):
        table: Dict[str, LanguageProfile] = {}
        ordered: List[LanguageProfile] = []
        for profile in profiles:
            if profile in ordered:
                continue
            ordered.append(profile)
            for selector in profile.selectors:
                table.setdefault(selector, profile)
        self._table: Mapping[str, LanguageProfile] = MappingProxyType(table)
        self._profiles: Tuple[LanguageProfile, ...] = tuple(ordered)
        self._filenames: FrozenSet[str] = frozenset(
            fn.lower() for p in ordered for fn in p.filenames
        )

    @classmethod
    def for_languages(cls, languages: Iterable[str]) -> "ProfileRegistry":
        """Build a registry holding only the requested languages.

        ``"all"`` anywhere in *languages* selects every built-in profile.
        Raises UnknownLanguageError for names no profile answers to.
        """
        requested = [lang.strip().lower() for lang in languages if lang.strip()]
        if not requested or "all" in requested:
            return cls(LANGUAGE_PROFILES)

        builtin = cls(LANGUAGE_PROFILES)
        selected = []
        for name in requested:
            profile = builtin.lookup(name)
            if profile is None:
                raise UnknownLanguageError(name)
            selected.append(profile)
        return cls(selected)

    def lookup(self, selector: Optional[str]) -> Optional[LanguageProfile]:
        if not selector:
            return None
        return self._table.get(selector.lower())

    def selector_for(
        self, path: Path, overrides: Optional[Mapping[str, str]] = None
    ) -> str:
        """Work out the selector used to look up *path*'s profile.

        Explicit overrides win (by file name, then extension), then an exact
        file name such as ``Makefile``, then the extension. Returns an empty
        string for an extensionless file nothing claims.
        """
        name = path.name.lower()
        extension = path.suffix[1:].lower() if path.suffix else ""
        if overrides:
            if name in overrides:
                return overrides[name]
            if extension and extension in overrides:
                return overrides[extension]
        if name in self._filenames:
            return name
        return extension

    def profile_for(
        self, path: Path, overrides: Optional[Mapping[str, str]] = None
    ) -> Optional[LanguageProfile]:
        return self.lookup(self.selector_for(path, overrides))

    @property
    def profiles(self) -> Tuple[LanguageProfile, ...]:
        return self._profiles

    def names(self) -> List[str]:
        return [p.name for p in self._profiles]

    def extensions(self) -> FrozenSet[str]:
        return frozenset(
            ext.lower() for p in self._profiles for ext in p.extensions
        )

    def filenames(self) -> FrozenSet[str]:
        return self._filenames

    def __contains__(self, selector: str) -> bool:
        return selector.lower() in self._table

    def __len__(self) -> int:
        return len(self._profiles)


def language_names() -> List[str]:
    """Names accepted by ``--lang``, in table order."""
    return [p.name for p in LANGUAGE_PROFILES]
