import pytest

from codebase_minify.profiles import (
    LANGUAGE_PROFILES,
    BlockComment,
    LanguageProfile,
    ProfileRegistry,
    StringDelimiter,
)

REGISTRY = ProfileRegistry(LANGUAGE_PROFILES)


def c_like(nestable: bool) -> LanguageProfile:
    """Minimal C-style profile with configurable comment nesting."""
    return LanguageProfile(
        name="nest-test" if nestable else "flat-test",
        fence="text",
        line_comments=("//",),
        block_comments=(BlockComment("/*", "*/", nestable=nestable),),
        strings=(StringDelimiter('"'),),
    )


@pytest.fixture
def registry():
    return REGISTRY


@pytest.fixture
def rust():
    return REGISTRY.lookup("rust")


@pytest.fixture
def python():
    return REGISTRY.lookup("python")


@pytest.fixture
def js():
    return REGISTRY.lookup("javascript")


@pytest.fixture
def nested_profile():
    return c_like(nestable=True)


@pytest.fixture
def flat_profile():
    return c_like(nestable=False)
