"""One representative snippet per built-in language profile."""

import pytest

from codebase_minify.minify import minify
from codebase_minify.profiles import language_names
from codebase_minify.scanner import SpanKind, scan

SAMPLES = {
    "rust": (
        "fn f<'a>(s: &'a str) -> char {\n"
        "    // note\n"
        '    let p = r#"a  "b"  // c"#;\n'
        "    'x'\n"
        "}\n"
    ),
    "c": (
        "#include <stdio.h>\n"
        "/* block */\n"
        "int main(void) {\n"
        "    printf(\"a  /* b */  %d\\n\", 'x'); // tail\n"
        "}\n"
    ),
    "cpp": (
        'auto q = R"sql(SELECT "a"  -- x\n  )sql";\n'
        'auto w = u8R"(  //  )"; /* c */\n'
    ),
    "csharp": (
        'var s = @"C:\\dir ""x""  // no";\n'
        "/// <summary>doc</summary>\n"
        "int y = 1; /* c */\n"
    ),
    "java": "String s = \"a  // b\"; /** doc */\nchar c = '\"';\n",
    "kotlin": (
        'val s = """raw  ${x}"""  // c\n'
        "/* a /* nested */ b */\n"
        "val c = 'q'\n"
    ),
    "scala": 'val s = "a  b" // c\n/* x /* y */ z */\n',
    "swift": 'let s = """\n  multi  line\n  """ // c\nlet t = "x  y"\n',
    "go": 'var s = `raw  // x`\nvar t = "a  b" /* c */\nvar r = \'x\'\n',
    "dart": "var s = '''a  b''';  // c\n/// doc\nvar t = \"x  y\";\n",
    "javascript": "const t = `a  ${b}  // c`; // d\nconst u = 'x  y';\n",
    "typescript": 'let s: string = "a  /* b */"; /* c */\nlet u = `x  y`;\n',
    "php": (
        "<?php\n"
        "#[Route('/x')]\n"
        'function f() { return "a  # b"; } # c\n'
        "$t = 'x  y'; // d\n"
    ),
    "python": 's = """a  # b"""  # c\nif s:\n    t = \'x  y\'\n',
    "ruby": "s = \"a  # b\"  # c\nt = 'x  y'\n",
    "shell": "echo \"a  # b\" ${#arr[@]}  # c\nx='y  z'\n",
    "powershell": "$s = \"a  `\" # b\"  # c\n<# block #>\n$t = 'x  ''y'\n",
    "perl": "my $s = \"a  # b\";  # c\nmy $t = 'x  y';\n",
    "lua": 'local s = [[a  -- b]]  -- c\n--[[ block ]]\nlocal t = "x  y"\n',
    "sql": "SELECT 'a''b  -- c' AS \"x  y\" -- d\nFROM t /* e */;\n",
    "haskell": (
        'main = putStrLn "a  -- b"  -- c\n'
        "{- block {- nested -} -}\n"
        "c = 'x'\n"
    ),
    "ocaml": "let s = \"a  (* b *)\" (* c (* d *) *)\nlet c = 'x'\n",
    "pascal": "s := 'it''s  // x'; // c\n{ brace } (* paren *)\n",
    "html": (
        "<!-- c -->\n"
        "<a title=\"x  y\" href='/p  q'>it's</a>\n"
        "<pre>  keep\n    this</pre>\n"
    ),
    "xml": (
        '<?xml version="1.0"?>\n'
        "<!-- c -->\n"
        '<a b="x  y"><![CDATA[  raw  <!-- no --> ]]></a>\n'
    ),
    "css": (
        'a::before { content: "x  /* y */"; background: url(img.png); } /* c */\n'
    ),
    "scss": (
        "$w: 10px; // c\n"
        "a { background: url(http://x.org/i.png); content: 'a  // b'; }\n"
    ),
    "json": '{\n  "a  b": "c  // d", // e\n  "f": [1, 2] /* g */\n}\n',
    "yaml": "a: it's fine  # note\nb: 'x    y'\nc: [\"p  q\", 'r']\n",
    "toml": "a = \"x  # y\"  # c\nb = '''raw  \\n'''\n",
    "ini": "[s]\nkey = a  b ; c\n# d\n",
    "makefile": "all: build  # c\n\tgcc -o out main.c\n",
    "dockerfile": "FROM python\n# c\nRUN echo \"a  # b\" && echo 'x  y'\n",
    "cmake": 'set(X "a  # b")  # c\n',
    "hcl": 'a = "x  # y" # c\n// d\n/* e */\n',
    "groovy": 'def s = """a  // b"""  // c\ndef t = \'x  y\'\n',
    "protobuf": 'syntax = "proto3"; // c\nmessage M { string a = 1; /* d */ }\n',
    "r": "x <- \"a  # b\"  # c\n`my var` <- 'y  z'\n",
    "julia": "s = \"a  # b\"  # c\n#= block #= nested =# =#\nc = 'x'\n",
    "nim": "s = \"a  # b\"  # c\n#[ block ]#\n## doc\nlet c = 'x'\n",
    "zig": "const s = \"a  // b\"; // c\n/// doc\nconst c = 'x';\n",
    "elixir": "s = \"a  # b\"  # c\nt = 'x  y'\n",
    "lisp": '(def s "a  ; b") ; c\n',
}

FLAG_COMBINATIONS = [(False, False), (False, True), (True, False), (True, True)]

CASES = sorted(SAMPLES.items())


def strings_of(text, profile):
    return [span.raw for span in scan(text, profile) if span.kind is SpanKind.STRING]


def test_every_profile_has_a_sample():
    assert sorted(SAMPLES) == sorted(language_names())


@pytest.mark.parametrize("language,text", CASES)
class TestLanguageSamples:
    def test_sample_exercises_the_profile(self, registry, language, text):
        """Each snippet holds a comment and, where the language has them, a string."""
        profile = registry.lookup(language)
        spans = scan(text, profile)

        assert "".join(span.raw for span in spans) == text
        assert any(span.kind.is_comment for span in spans)
        if profile.strings:
            assert strings_of(text, profile)

    @pytest.mark.parametrize("strip,collapse", FLAG_COMBINATIONS)
    def test_strings_unchanged(self, registry, language, text, strip, collapse):
        profile = registry.lookup(language)

        result = minify(text, profile, strip_comments=strip, collapse_whitespace=collapse)

        assert strings_of(result, profile) == strings_of(text, profile)

    @pytest.mark.parametrize("strip", [False, True])
    def test_idempotent(self, registry, language, text, strip):
        profile = registry.lookup(language)

        once = minify(text, profile, strip_comments=strip)

        assert minify(once, profile, strip_comments=strip) == once

    def test_stripping_leaves_no_comment(self, registry, language, text):
        profile = registry.lookup(language)

        result = minify(text, profile, strip_comments=True)

        assert not any(span.kind.is_comment for span in scan(result, profile))
