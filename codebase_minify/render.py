"""Markdown assembly: a heading and a fenced block per file."""

import re
from pathlib import Path
from typing import Iterable, Tuple

_BACKTICK_RUN = re.compile(r"`{3,}")


def fence_for(content: str) -> str:
    """Shortest backtick fence that no run inside *content* can close."""
    longest = max((len(run) for run in _BACKTICK_RUN.findall(content)), default=0)
    return "`" * max(3, longest + 1)


def render_file(relative_path: Path, language: str, content: str) -> str:
    """Format one file's condensed text as a Markdown section."""
    body = content.strip("\r\n").rstrip()
    fence = fence_for(body)
    formatted_content = f"## `{relative_path.as_posix()}`\n\n"
    formatted_content += f"{fence}{language}\n"
    formatted_content += body
    formatted_content += f"\n{fence}\n\n"
    return formatted_content


def render_document(title: str, sections: Iterable[Tuple[Path, str]]) -> str:
    """Join rendered sections under one top-level heading, sorted by path."""
    parts = [f"# {title}\n\n"]
    for _, section in sorted(sections, key=lambda item: item[0].as_posix()):
        parts.append(section)
    return "".join(parts)
