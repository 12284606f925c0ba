"""Finds the files to condense and reads them into SourceUnits."""

import fnmatch
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pathspec

from .errors import ReadFailure
from .profiles import LanguageProfile, ProfileRegistry

log = logging.getLogger(__name__)


def normalize_path(path: Path, base_folder: Path) -> Optional[Path]:
    """Return *path* relative to *base_folder*, or None if it lies outside."""
    try:
        return path.resolve().relative_to(base_folder.resolve())
    except ValueError:
        return None


def load_gitignore(root: Path) -> Optional[pathspec.PathSpec]:
    """Load .gitignore patterns from the scan root."""
    gitignore_path = root.resolve() / ".gitignore"
    if not gitignore_path.is_file():
        log.debug(f".gitignore not found in {root}")
        return None
    try:
        with open(gitignore_path, "r", encoding="utf-8") as gitignore_file:
            lines = gitignore_file.readlines()
    except OSError as e:
        log.warning(f"Could not read .gitignore {gitignore_path}: {e}")
        return None

    if not any(line.strip() and not line.startswith("#") for line in lines):
        log.debug("No .gitignore patterns found.")
        return None
    return pathspec.PathSpec.from_lines(
        pathspec.patterns.GitWildMatchPattern, lines
    )


def is_excluded_dir(name: str, relative_dir: str, options: Dict[str, Any]) -> bool:
    """Directory pruning shared by the walk and the per-file checks."""
    if not options.get("include_hidden", False) and name.startswith("."):
        return True
    for pattern in options.get("exclude_folders", []):
        if fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(relative_dir, pattern):
            return True
    spec = options.get("spec")
    if spec is not None and spec.match_file(relative_dir + "/"):
        return True
    return False


def should_process_file(filepath: Path, options: Dict[str, Any]) -> bool:
    """
    Centralized file processing decision logic.

    Args:
        filepath: Path of the candidate file
        options: dict with 'root', 'registry' and the filtering options
    """
    path = filepath.resolve()
    relative = normalize_path(path, options["root"])
    if relative is None:
        log.debug(f"Skipping {path}: outside {options['root']}")
        return False
    relative_str = relative.as_posix()

    if options.get("output_file_resolved") and path == options["output_file_resolved"]:
        log.debug(f"Skipping output file: {path}")
        return False

    if not options.get("include_hidden", False) and any(
        part.startswith(".") for part in relative.parts
    ):
        log.debug(f"Skipping hidden file/path: {relative_str}")
        return False

    if options.get("exclude_patterns") and any(
        fnmatch.fnmatch(relative_str, pattern) for pattern in options["exclude_patterns"]
    ):
        log.debug(f"Excluding by pattern: {relative_str}")
        return False

    spec = options.get("spec")
    if spec is not None and spec.match_file(relative_str):
        log.debug(f"Excluding by .gitignore: {relative_str}")
        return False

    if options.get("include_patterns") and any(
        fnmatch.fnmatch(relative_str, pattern) for pattern in options["include_patterns"]
    ):
        log.debug(f"Explicitly including by path pattern: {relative_str}")
        return True

    extension = path.suffix[1:].lower() if path.suffix else ""
    if extension and extension in options.get("exclude_extensions", ()):
        log.debug(f"Excluding by extension: {relative_str}")
        return False

    registry: ProfileRegistry = options["registry"]
    if registry.profile_for(path, options.get("overrides")) is not None:
        return True
    if extension and extension in options.get("extensions", ()):
        return True

    log.debug(f"Skipping due to extension: {relative_str}")
    return False


def build_file_list(root: Path, options: Dict[str, Any]) -> List[Path]:
    """Walk *root* and return the sorted list of files to process."""
    resolved_root = root.resolve()
    options["root"] = resolved_root
    files_to_process = set()

    log.info(f"Scanning folder: {resolved_root}...")
    for current, dirs, files in os.walk(resolved_root, topdown=True):
        current_path = Path(current)
        relative_dir = current_path.relative_to(resolved_root).as_posix()

        # Filter directories in place for recursion
        dirs[:] = sorted(
            d
            for d in dirs
            if not is_excluded_dir(
                d, d if relative_dir == "." else f"{relative_dir}/{d}", options
            )
        )

        for filename in files:
            filepath = current_path / filename
            if should_process_file(filepath, options):
                files_to_process.add(filepath.resolve())

    log.info(f"Found {len(files_to_process)} files matching criteria.")
    return sorted(files_to_process)


@dataclass
class SourceUnit:
    """One file on its way through the scanner; not kept after rendering."""

    path: Path
    relative_path: Path
    content: bytes
    profile: Optional[LanguageProfile]

    @property
    def fence(self) -> str:
        if self.profile is not None:
            return self.profile.fence
        return self.path.suffix[1:].lower() or "text"

    def text(self) -> str:
        try:
            return self.content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ReadFailure(self.relative_path, "binary or not UTF-8") from e


def load_source(
    path: Path,
    root: Path,
    registry: ProfileRegistry,
    overrides: Optional[Mapping[str, str]] = None,
) -> SourceUnit:
    """Read *path* and resolve its profile. Raises ReadFailure."""
    relative = normalize_path(path, root) or Path(path.name)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise ReadFailure(relative, e.strerror or str(e)) from e
    return SourceUnit(
        path=path,
        relative_path=relative,
        content=content,
        profile=registry.profile_for(path, overrides),
    )
