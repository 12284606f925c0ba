"""Tests for language profiles and the registry."""

import dataclasses
from pathlib import Path

import pytest

from codebase_minify.errors import UnknownLanguageError
from codebase_minify.profiles import (
    LANGUAGE_PROFILES,
    Layout,
    ProfileRegistry,
    StringDelimiter,
    language_names,
)


class TestLookup:
    @pytest.mark.parametrize(
        "selector,name",
        [
            ("rs", "rust"),
            ("RS", "rust"),
            ("rust", "rust"),
            ("py", "python"),
            ("c++", "cpp"),
            ("golang", "go"),
            ("yml", "yaml"),
            ("makefile", "makefile"),
        ],
    )
    def test_known_selectors(self, registry, selector, name):
        assert registry.lookup(selector).name == name

    @pytest.mark.parametrize("selector", ["nope", "", None])
    def test_unknown_selector_is_none(self, registry, selector):
        assert registry.lookup(selector) is None

    def test_lookup_returns_shared_profile(self, registry):
        assert registry.lookup("rs") is registry.lookup("rust")

    def test_contains(self, registry):
        assert "RS" in registry
        assert "nope" not in registry


class TestSelectorFor:
    def test_extension(self, registry):
        assert registry.selector_for(Path("src/lib.RS")) == "rs"

    def test_exact_filename(self, registry):
        assert registry.profile_for(Path("Makefile")).name == "makefile"
        assert registry.profile_for(Path("app/CMakeLists.txt")).name == "cmake"
        assert registry.profile_for(Path("notes.txt")) is None

    def test_extensionless_file_without_profile(self, registry):
        assert registry.selector_for(Path("LICENSE")) == ""
        assert registry.profile_for(Path("rust")) is None

    def test_override_by_extension(self, registry):
        overrides = {"h": "cpp"}

        assert registry.profile_for(Path("a/b.h"), overrides).name == "cpp"
        assert registry.profile_for(Path("a/b.h")).name == "c"

    def test_override_by_filename_beats_extension(self, registry):
        overrides = {"build.txt": "cmake", "txt": "ini"}

        assert registry.profile_for(Path("build.txt"), overrides).name == "cmake"
        assert registry.profile_for(Path("other.txt"), overrides).name == "ini"


class TestForLanguages:
    def test_selected_languages_only(self):
        registry = ProfileRegistry.for_languages(["rust", "PY"])

        assert registry.names() == ["rust", "python"]
        assert registry.lookup("js") is None
        assert "rs" in registry.extensions()

    @pytest.mark.parametrize("languages", [["all"], [], ["rust", "all"]])
    def test_all(self, languages):
        registry = ProfileRegistry.for_languages(languages)

        assert len(registry) == len(LANGUAGE_PROFILES)

    def test_unknown_language_raises(self):
        with pytest.raises(UnknownLanguageError) as excinfo:
            ProfileRegistry.for_languages(["rust", "klingon"])

        assert excinfo.value.name == "klingon"
        assert isinstance(excinfo.value, ValueError)

    def test_duplicates_collapse(self):
        registry = ProfileRegistry.for_languages(["rust", "rs"])

        assert registry.names() == ["rust"]


class TestProfileTable:
    def test_names_are_unique(self):
        names = language_names()

        assert len(names) == len(set(names))

    def test_profiles_are_frozen(self, rust):
        with pytest.raises(dataclasses.FrozenInstanceError):
            rust.tight = False

    def test_close_defaults_to_open(self):
        assert StringDelimiter('"').close == '"'
        assert StringDelimiter('r#"', '"#').close == '"#'

    def test_every_profile_has_a_fence(self):
        for profile in LANGUAGE_PROFILES:
            assert profile.fence, profile.name

    def test_indentation_sensitive_languages(self, registry):
        for name in ("python", "yaml", "makefile", "haskell", "nim"):
            assert registry.lookup(name).layout is Layout.INDENT

    def test_registry_table_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._table["zz"] = registry.lookup("rust")
