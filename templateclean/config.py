from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

CONFIG_FILE = ".templateclean.yml"

DOC_FILE = "README.md"
DOC_ANCHOR = "## 🚀 Key Features"

MANIFEST_FILE = "package.json"
MANIFEST_SECTION = "scripts"
MANIFEST_KEYS = (
    "clean-template",
    "clean-template:dashboard",
    "clean-template:blank",
)

ENGINE_FILES = (
    "scripts/clean_template.py",
    "scripts/clean_template_dashboard.py",
    "scripts/clean_template_blank.py",
    "scripts/README.md",
)

AFFIRMATIVE = ("yes", "y")

DEFAULT_BRAND = "AngularVibeCoding"
DEFAULT_REPO_URL = "https://github.com/AntonioCardenas/angularvibecoding"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    doc_file: str = DOC_FILE
    manifest_file: str = MANIFEST_FILE
    engine_files: tuple[str, ...] = ENGINE_FILES
    brand_name: str = DEFAULT_BRAND
    repo_url: str = DEFAULT_REPO_URL
    stop_on_error: bool = True


def templates_root() -> Path:
    return Path(__file__).resolve().parent / "templates"


def _relative(key: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{key} must be a non-empty string.")
    path = Path(value.strip())
    if path.is_absolute() or ".." in path.parts:
        raise ConfigError(f"{key} must be a path inside the scaffold: {value}")
    return path.as_posix()


def load_settings(root: Path) -> Settings:
    """Read ``.templateclean.yml`` from the scaffold root, falling back to defaults."""
    marker = root / CONFIG_FILE
    if not marker.exists():
        return Settings()

    try:
        raw = marker.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise ConfigError(f"Could not read {marker}: {error}") from error
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Could not parse {marker}: {error}") from error
    if not isinstance(data, dict):
        raise ConfigError(f"{marker} must contain a mapping.")

    known = {field.name for field in fields(Settings)}
    unknown = sorted(str(key) for key in data if key not in known)
    if unknown:
        raise ConfigError(f"Unknown settings in {marker}: {', '.join(unknown)}")

    overrides: dict[str, object] = {}
    for key in ("doc_file", "manifest_file"):
        if key in data:
            overrides[key] = _relative(key, data[key])

    if "engine_files" in data:
        value = data["engine_files"]
        if not isinstance(value, list):
            raise ConfigError("engine_files must be a list of paths.")
        overrides["engine_files"] = tuple(_relative("engine_files", item) for item in value)

    for key in ("brand_name", "repo_url"):
        if key in data:
            value = data[key]
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"{key} must be a non-empty string.")
            overrides[key] = value.strip()

    if "stop_on_error" in data:
        if not isinstance(data["stop_on_error"], bool):
            raise ConfigError("stop_on_error must be true or false.")
        overrides["stop_on_error"] = data["stop_on_error"]

    return replace(Settings(), **overrides)
