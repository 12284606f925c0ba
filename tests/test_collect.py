"""Tests for file collection, source loading and Markdown rendering."""

from pathlib import Path

import pytest

from codebase_minify.collect import build_file_list, load_gitignore, load_source
from codebase_minify.errors import ReadFailure
from codebase_minify.presets import merge_presets
from codebase_minify.render import fence_for, render_document, render_file


def write(root: Path, relative: str, content="x\n"):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def relative_names(files, root):
    return [f.relative_to(root.resolve()).as_posix() for f in files]


def options_for(registry, root, **extra):
    options = {
        "registry": registry,
        "spec": load_gitignore(root),
        "extensions": set(),
        "exclude_extensions": set(),
        "exclude_folders": [],
    }
    options.update(extra)
    return options


class TestBuildFileList:
    def test_known_languages_sorted(self, registry, tmp_path):
        """Only files with a profile are picked up, in path order."""
        write(tmp_path, "src/main.rs")
        write(tmp_path, "src/lib.rs")
        write(tmp_path, "Makefile")
        write(tmp_path, "notes.txt")

        files = build_file_list(tmp_path, options_for(registry, tmp_path))

        assert relative_names(files, tmp_path) == ["Makefile", "src/lib.rs", "src/main.rs"]

    def test_gitignore_respected(self, registry, tmp_path):
        write(tmp_path, ".gitignore", "target/\n*.gen.rs\n")
        write(tmp_path, "src/main.rs")
        write(tmp_path, "src/out.gen.rs")
        write(tmp_path, "target/debug/build.rs")

        files = build_file_list(tmp_path, options_for(registry, tmp_path))

        assert relative_names(files, tmp_path) == ["src/main.rs"]

    def test_hidden_skipped_unless_requested(self, registry, tmp_path):
        write(tmp_path, ".hidden/a.py")
        write(tmp_path, "b.py")

        files = build_file_list(tmp_path, options_for(registry, tmp_path))
        assert relative_names(files, tmp_path) == ["b.py"]

        files = build_file_list(
            tmp_path, options_for(registry, tmp_path, include_hidden=True)
        )
        assert relative_names(files, tmp_path) == [".hidden/a.py", "b.py"]

    def test_exclude_folders_and_patterns(self, registry, tmp_path):
        write(tmp_path, "node_modules/pkg/index.js")
        write(tmp_path, "app/index.js")
        write(tmp_path, "app/index.test.js")

        options = options_for(
            registry,
            tmp_path,
            exclude_folders=["node_modules"],
            exclude_patterns=["*.test.js"],
        )
        files = build_file_list(tmp_path, options)

        assert relative_names(files, tmp_path) == ["app/index.js"]

    def test_extra_extensions_and_include_patterns(self, registry, tmp_path):
        write(tmp_path, "README.md")
        write(tmp_path, "docs/guide.txt")
        write(tmp_path, "LICENSE")

        options = options_for(
            registry, tmp_path, extensions={"md"}, include_patterns=["LICENSE"]
        )
        files = build_file_list(tmp_path, options)

        assert relative_names(files, tmp_path) == ["LICENSE", "README.md"]

    def test_exclude_extensions_wins(self, registry, tmp_path):
        write(tmp_path, "a.py")
        write(tmp_path, "b.pyi")

        options = options_for(registry, tmp_path, exclude_extensions={"pyi"})
        files = build_file_list(tmp_path, options)

        assert relative_names(files, tmp_path) == ["a.py"]

    def test_output_file_never_included(self, registry, tmp_path):
        write(tmp_path, "a.py")
        output = write(tmp_path, "out.md")

        options = options_for(
            registry,
            tmp_path,
            extensions={"md"},
            output_file_resolved=output.resolve(),
        )
        files = build_file_list(tmp_path, options)

        assert relative_names(files, tmp_path) == ["a.py"]


class TestLoadSource:
    def test_profile_and_relative_path(self, registry, tmp_path):
        path = write(tmp_path, "src/main.rs", "fn main() {}\n")

        unit = load_source(path, tmp_path, registry)

        assert unit.relative_path == Path("src/main.rs")
        assert unit.profile.name == "rust"
        assert unit.fence == "rust"
        assert unit.text() == "fn main() {}\n"

    def test_fence_falls_back_to_extension(self, registry, tmp_path):
        unit = load_source(write(tmp_path, "notes.txt"), tmp_path, registry)

        assert unit.profile is None
        assert unit.fence == "txt"

    def test_fence_text_without_extension(self, registry, tmp_path):
        unit = load_source(write(tmp_path, "LICENSE"), tmp_path, registry)

        assert unit.fence == "text"

    def test_bom_is_dropped(self, registry, tmp_path):
        path = write(tmp_path, "a.py", "\ufeffx = 1\n".encode("utf-8"))

        assert load_source(path, tmp_path, registry).text() == "x = 1\n"

    def test_binary_content_is_a_read_failure(self, registry, tmp_path):
        path = write(tmp_path, "blob.rs", b"\xff\xfe\x00\x81")

        unit = load_source(path, tmp_path, registry)
        with pytest.raises(ReadFailure) as excinfo:
            unit.text()
        assert excinfo.value.path == Path("blob.rs")

    def test_missing_file_is_a_read_failure(self, registry, tmp_path):
        with pytest.raises(ReadFailure):
            load_source(tmp_path / "gone.rs", tmp_path, registry)


class TestRender:
    def test_fence_length(self):
        assert fence_for("plain") == "```"
        assert fence_for("a ``` b") == "````"
        assert fence_for("`````") == "``````"

    def test_render_file(self):
        section = render_file(Path("src/main.rs"), "rust", "\nfn main(){}\n\n")

        assert section == "## `src/main.rs`\n\n```rust\nfn main(){}\n```\n\n"

    def test_render_document_sorts_by_path(self):
        sections = [
            (Path("b.rs"), "B\n"),
            (Path("a/z.rs"), "AZ\n"),
            (Path("a.rs"), "A\n"),
        ]

        assert render_document("demo", sections) == "# demo\n\nA\nAZ\nB\n"


class TestPresets:
    def test_presets_merge_with_user_options(self):
        merged = merge_presets(
            ["rust", "python"],
            {"languages": ["c"], "exclude_folders": ["target"], "exclude_extensions": ["md"]},
        )

        assert merged["languages"][:2] == ["rust", "toml"]
        assert merged["languages"][-1] == "c"
        assert merged["exclude_folders"].count("target") == 1
        assert merged["exclude_extensions"] == ["md"]

    def test_unknown_preset_ignored(self):
        merged = merge_presets(["nope"], {})

        assert merged == {
            "languages": [],
            "extensions": [],
            "exclude_folders": [],
            "exclude_extensions": [],
        }
