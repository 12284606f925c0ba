"""Project type presets: which languages to activate and which folders to skip."""

import logging
from typing import Any, Dict, List

log = logging.getLogger(__name__)

PROJECT_PRESETS: Dict[str, Dict[str, List[str]]] = {
    "python": {
        "languages": ["python", "toml", "ini", "yaml", "shell", "dockerfile"],
        "extensions": ["txt", "md", "rst"],
        "exclude_folders": [
            "venv",
            ".venv",
            "env",
            "__pycache__",
            ".pytest_cache",
            "build",
            "dist",
            "*.egg-info",
            ".tox",
            ".mypy_cache",
            "htmlcov",
        ],
    },
    "js": {
        "languages": ["javascript", "typescript", "json", "html", "css", "scss"],
        "extensions": ["vue", "svelte", "md", "mdx"],
        "exclude_folders": [
            "node_modules",
            "dist",
            "build",
            "coverage",
            ".next",
            ".nuxt",
            ".cache",
            ".parcel-cache",
        ],
    },
    "lowlevel": {
        "languages": ["c", "cpp", "rust", "go", "zig", "makefile", "cmake"],
        "extensions": ["asm", "s", "md"],
        "exclude_folders": [
            "build",
            "bin",
            "obj",
            "target",
            "debug",
            "release",
            "deps",
        ],
    },
    "rust": {
        "languages": ["rust", "toml"],
        "extensions": ["md"],
        "exclude_folders": ["target"],
    },
    "web": {
        "languages": [
            "html",
            "css",
            "scss",
            "javascript",
            "typescript",
            "php",
            "ruby",
            "json",
            "xml",
        ],
        "extensions": ["erb", "md", "webmanifest"],
        "exclude_folders": [
            "node_modules",
            "vendor",
            "dist",
            "build",
            "public/assets",
            "tmp",
            "cache",
            ".sass-cache",
        ],
    },
    "jvm": {
        "languages": ["java", "kotlin", "scala", "groovy", "xml"],
        "extensions": ["md"],
        "exclude_folders": ["build", "target", ".gradle", "out"],
    },
    "mobile": {
        "languages": ["kotlin", "java", "swift", "dart", "xml", "json", "yaml"],
        "extensions": ["m", "h", "md"],
        "exclude_folders": [
            "build",
            ".gradle",
            "Pods",
            "DerivedData",
            ".dart_tool",
            "ios/Pods",
        ],
    },
    "devops": {
        "languages": ["yaml", "hcl", "dockerfile", "shell", "json", "toml", "ini"],
        "extensions": ["env", "md", "txt"],
        "exclude_folders": [
            ".terraform",
            "terraform.tfstate.d",
            "secrets",
            "keys",
            "certs",
            "logs",
        ],
    },
    "datascience": {
        "languages": ["python", "r", "julia", "sql", "yaml"],
        "extensions": ["rmd", "md", "txt"],
        "exclude_folders": [
            "venv",
            ".venv",
            "__pycache__",
            "data",
            "raw_data",
            "processed_data",
            "figures",
            "results",
            "outputs",
            "checkpoints",
            "wandb",
            "mlruns",
        ],
    },
}


def merge_presets(ptypes: List[str], user_options: Dict[str, Any]) -> Dict[str, Any]:
    """Merge preset configurations with user options.

    User languages, extensions and folder exclusions add to the presets;
    user excluded extensions are taken as given.
    """
    merged: Dict[str, Any] = {
        "languages": [],
        "extensions": [],
        "exclude_folders": [],
    }

    for ptype in ptypes or []:
        preset = PROJECT_PRESETS.get(ptype)
        if not preset:
            log.warning(f"Preset '{ptype}' not found. Ignoring.")
            continue
        for key in merged:
            for value in preset.get(key, []):
                if value not in merged[key]:
                    merged[key].append(value)

    for key in merged:
        for value in user_options.get(key, []):
            if value not in merged[key]:
                merged[key].append(value)

    merged["exclude_extensions"] = list(user_options.get("exclude_extensions", []))

    log.debug(f"Merged languages: {merged['languages']}")
    log.debug(f"Merged extensions: {merged['extensions']}")
    log.debug(f"Merged exclude folders: {merged['exclude_folders']}")
    return merged
