"""Command-line entry point: condense a codebase into one Markdown document."""

import argparse
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from . import __version__
from .collect import build_file_list, load_gitignore, load_source
from .errors import ReadFailure, UnknownLanguageError
from .minify import MinifyTransformer
from .presets import PROJECT_PRESETS, merge_presets
from .profiles import LANGUAGE_PROFILES, ProfileRegistry
from .render import render_document, render_file
from .scanner import scan

log = logging.getLogger(__name__)
# stdout carries the document; everything else goes to stderr
console = Console(stderr=True)


def setup_logging(verbose: bool = False):
    """Configure logging with rich."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    logging.getLogger("codebase_minify").setLevel(
        logging.DEBUG if verbose else logging.INFO
    )
    if verbose:
        log.debug("Verbose logging enabled.")


def process_file(
    filepath: Path,
    root: Path,
    registry: ProfileRegistry,
    strip_comments: bool = False,
    collapse_whitespace: bool = True,
    overrides: Optional[Mapping[str, str]] = None,
) -> Optional[Tuple[Path, str]]:
    """
    Reads a single file and returns its relative path and rendered section.
    Returns None if nothing is left after condensing. Raises ReadFailure.
    """
    unit = load_source(filepath, root, registry, overrides)
    log.debug(f"Reading file: {unit.relative_path}")
    text = unit.text()

    if unit.profile is None:
        log.debug(f"No language profile for {unit.relative_path}, passing through")
    spans = scan(text, unit.profile)
    if any(not span.terminated for span in spans):
        log.debug(
            f"Unterminated string or comment in {unit.relative_path}, "
            "closed at end of line/file"
        )

    condensed = MinifyTransformer(
        unit.profile, strip_comments, collapse_whitespace
    ).transform(spans)
    if not condensed.strip():
        log.debug(f"Nothing left to show for {unit.relative_path}")
        return None
    return unit.relative_path, render_file(unit.relative_path, unit.fence, condensed)


def parse_overrides(values: Sequence[str], registry: ProfileRegistry) -> Dict[str, str]:
    """Turn ``EXT=LANG`` pairs into a selector override table."""
    overrides = {}
    for value in values:
        selector, sep, language = value.partition("=")
        selector = selector.strip().lstrip(".").lower()
        if not sep or not selector or not language.strip():
            raise ValueError(f"Invalid mapping '{value}', expected EXT=LANG")
        profile = registry.lookup(language.strip())
        if profile is None:
            raise UnknownLanguageError(language.strip())
        overrides[selector] = profile.name
    return overrides


def path_type(path_str: str) -> Path:
    """Convert string to Path and verify it exists and is a directory."""
    path = Path(path_str)
    if not path.exists():
        raise argparse.ArgumentTypeError(f"Path '{path_str}' does not exist.")
    if not path.is_dir():
        raise argparse.ArgumentTypeError(f"Path '{path_str}' is not a directory.")
    return path


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"Expected a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    description = """
    Condense a codebase into a single Markdown document for language models.

    Every eligible file becomes a heading and a fenced block holding its
    minified content. Comments and documentation can be stripped; string
    literals are never touched. .gitignore is respected by default.
    """
    epilog = f"""
    Project Type Presets Available:
    {", ".join(PROJECT_PRESETS.keys())}

    Example: Rust sources without comments
    $ codebase-minify ./my-crate --lang rust --remove-docs -o crate.md
    """

    parser = argparse.ArgumentParser(
        prog="codebase-minify",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # --- Input/Output ---
    parser.add_argument(
        "root",
        nargs="?",
        type=path_type,
        default=Path("."),
        help="Directory to condense (default: current directory).",
        metavar="ROOT",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Write the document to FILE instead of stdout.",
        metavar="FILE",
    )
    parser.add_argument(
        "--title",
        help="Top-level heading (default: name of the root directory).",
    )

    # --- Condensing ---
    condense_group = parser.add_argument_group("Condensing")
    condense_group.add_argument(
        "-r",
        "--remove-docs",
        "--strip-comments",
        dest="strip_comments",
        action="store_true",
        help="Remove comments and documentation comments.",
    )
    condense_group.add_argument(
        "--no-minify",
        action="store_true",
        help="Keep whitespace as it is instead of collapsing it.",
    )

    # --- Languages ---
    lang_group = parser.add_argument_group("Languages")
    lang_group.add_argument(
        "-l",
        "--lang",
        nargs="+",
        default=[],
        help="Language profiles to activate, or 'all' (default: all).",
        metavar="LANG",
    )
    lang_group.add_argument(
        "--ptype",
        choices=list(PROJECT_PRESETS.keys()),
        nargs="+",
        help="Project type preset(s) supplying languages and folder exclusions.",
        metavar="PRESET",
    )
    lang_group.add_argument(
        "--map",
        nargs="+",
        default=[],
        help="Treat files with extension EXT as language LANG (e.g. 'h=cpp').",
        metavar="EXT=LANG",
    )
    lang_group.add_argument(
        "--list-languages",
        action="store_true",
        help="Show the built-in language profiles and exit.",
    )

    # --- Filtering ---
    filter_group = parser.add_argument_group("Filtering")
    filter_group.add_argument(
        "-e",
        "--extensions",
        nargs="+",
        default=[],
        help="Also include these extensions; files without a profile are passed through.",
        metavar="EXT",
    )
    filter_group.add_argument(
        "--exclude-extensions",
        nargs="+",
        default=[],
        help="Exclude these file extensions.",
        metavar="EXT",
    )
    filter_group.add_argument(
        "--exclude-folders",
        nargs="+",
        default=[],
        help="Exclude these folder names or relative paths (globs supported).",
        metavar="FOLDER/PATTERN",
    )
    filter_group.add_argument(
        "--include-patterns",
        nargs="+",
        default=[],
        help="Include files matching these globs relative to ROOT, whatever their extension.",
        metavar="PATTERN",
    )
    filter_group.add_argument(
        "--exclude-patterns",
        nargs="+",
        default=[],
        help="Exclude files matching these globs relative to ROOT.",
        metavar="PATTERN",
    )

    # --- Behavior Options ---
    behavior_group = parser.add_argument_group("Behavior Options")
    behavior_group.add_argument(
        "--no-gitignore",
        action="store_true",
        help="Do not read or respect the root .gitignore file.",
    )
    behavior_group.add_argument(
        "--include-hidden",
        action="store_true",
        help="Include hidden files and folders (those starting with '.').",
    )
    behavior_group.add_argument(
        "-j",
        "--jobs",
        type=positive_int,
        help="Worker threads (default: number of CPUs).",
    )
    behavior_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging for detailed execution information.",
    )
    return parser


def print_languages(registry: ProfileRegistry):
    table = Table(title="Language profiles")
    table.add_column("Language", style="bold")
    table.add_column("Extensions / files")
    table.add_column("Comments")
    table.add_column("Layout")
    for profile in registry.profiles:
        markers = list(profile.line_comments) + [
            f"{b.open} {b.close}" for b in profile.block_comments
        ]
        table.add_row(
            profile.name,
            ", ".join(list(profile.extensions) + list(profile.filenames)),
            "  ".join(markers) or "-",
            profile.layout.value + ("" if profile.tight else ", loose"),
        )
    console.print(table)


def normalize_extensions(values: Sequence[str]) -> List[str]:
    return sorted({ext.lower().lstrip(".") for ext in values if ext.strip(".")})


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Condense a codebase into a single Markdown document."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.list_languages:
        print_languages(ProfileRegistry(LANGUAGE_PROFILES))
        return 0

    # --- Process Arguments and Presets ---
    root: Path = args.root
    output_file = Path(args.output) if args.output else None
    user_options = {
        "languages": [lang.lower() for lang in args.lang],
        "extensions": normalize_extensions(args.extensions),
        "exclude_folders": list(args.exclude_folders),
        "exclude_extensions": normalize_extensions(args.exclude_extensions),
    }
    if args.ptype:
        console.print(f"[bold blue]Applying project presets: {', '.join(args.ptype)}[/]")
    merged = merge_presets(args.ptype or [], user_options)
    languages = merged["languages"] or ["all"]

    try:
        registry = ProfileRegistry.for_languages(languages)
        overrides = parse_overrides(args.map, registry)
    except ValueError as e:
        parser.error(str(e))

    processing_options = {
        "registry": registry,
        "overrides": overrides,
        "output_file_resolved": output_file.resolve() if output_file else None,
        "extensions": set(merged["extensions"]),
        "exclude_extensions": set(merged["exclude_extensions"]),
        "exclude_folders": merged["exclude_folders"],
        "include_patterns": args.include_patterns,
        "exclude_patterns": args.exclude_patterns,
        "include_hidden": args.include_hidden,
        "spec": None if args.no_gitignore else load_gitignore(root),
    }

    strip_comments = args.strip_comments
    collapse_whitespace = not args.no_minify

    console.print("[bold blue]Starting codebase condensing[/]")
    console.print(f"Languages: [green]{', '.join(registry.names())}[/]")
    if processing_options["extensions"]:
        console.print(
            f"Passing through extensions: [green]{', '.join(sorted(processing_options['extensions']))}[/]"
        )
    if processing_options["exclude_folders"]:
        console.print(
            f"Excluding folders/patterns: [yellow]{', '.join(sorted(processing_options['exclude_folders']))}[/]"
        )
    console.print(f"Removing comments: [cyan]{'Yes' if strip_comments else 'No'}[/]")
    console.print(f"Collapsing whitespace: [cyan]{'Yes' if collapse_whitespace else 'No'}[/]")
    if args.no_gitignore:
        console.print("Respecting .gitignore: [yellow]No[/]")
    elif processing_options["spec"]:
        console.print("Respecting .gitignore: [cyan]Yes[/]")
    else:
        console.print("Respecting .gitignore: [cyan]Yes (but no patterns found/loaded)[/]")

    # --- Build the list of files ---
    files_to_process = build_file_list(root, processing_options)
    if not files_to_process:
        log.warning("No files found matching the criteria.")

    # --- Process Files Concurrently ---
    sections: List[Tuple[Path, str]] = []
    skipped_count = 0
    resolved_root = root.resolve()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Processing files", total=len(files_to_process))

        with ThreadPoolExecutor(max_workers=args.jobs or os.cpu_count()) as executor:
            future_to_filepath = {
                executor.submit(
                    process_file,
                    filepath,
                    resolved_root,
                    registry,
                    strip_comments,
                    collapse_whitespace,
                    overrides,
                ): filepath
                for filepath in files_to_process
            }

            for future in as_completed(future_to_filepath):
                filepath = future_to_filepath[future]
                try:
                    result = future.result()
                    if result:
                        sections.append(result)
                except ReadFailure as e:
                    log.warning(f"Skipping {e.path}: {e.reason}")
                    skipped_count += 1
                except Exception as e:
                    log.error(f"Error processing file {filepath}: {e}", exc_info=True)
                    skipped_count += 1
                finally:
                    progress.update(task, advance=1)

    # --- Write the document ---
    title = args.title or resolved_root.name or "codebase"
    document = render_document(title, sections)
    if output_file:
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(document, encoding="utf-8")
        except OSError as e:
            log.error(f"Failed to write {output_file}: {e}")
            return 1
        destination = f"[blue]{output_file}[/]"
    else:
        sys.stdout.write(document)
        sys.stdout.flush()
        destination = "stdout"

    console.print(
        f"[bold green]✓[/] Condensing complete. "
        f"{len(sections)} files written to {destination}. "
        f"{skipped_count} files skipped (binary/errors)."
    )
    return 0
