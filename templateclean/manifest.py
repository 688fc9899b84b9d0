from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional

from .cleanup import Notify
from .config import MANIFEST_KEYS, MANIFEST_SECTION, Settings
from .fs import FilesystemGateway


class ManifestError(RuntimeError):
    pass


@dataclass(frozen=True)
class ManifestReport:
    manifest: Path
    removed_keys: tuple[str, ...]
    deleted_files: tuple[str, ...]
    removed_directories: tuple[str, ...]


def _load_manifest(fs: FilesystemGateway, path: Path) -> dict:
    try:
        data = json.loads(fs.read_text(path))
    except json.JSONDecodeError as error:
        raise ManifestError(f"Could not parse {path}: {error}") from error
    if not isinstance(data, dict):
        raise ManifestError(f"{path} must contain a JSON object.")
    section = data.get(MANIFEST_SECTION)
    if section is not None and not isinstance(section, dict):
        raise ManifestError(f"'{MANIFEST_SECTION}' in {path} must be an object.")
    return data


def dump_manifest(data: dict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def prune_manifest(
    fs: FilesystemGateway,
    root: Path,
    settings: Settings,
    keys: tuple[str, ...] = MANIFEST_KEYS,
    notify: Optional[Notify] = None,
) -> ManifestReport:
    """Drop the cleanup commands from the manifest and delete the engine's launcher files.

    The manifest is parsed before anything is deleted, so a broken manifest
    leaves the launchers in place. Afterwards the tool is gone from the scaffold.
    """
    manifest_path = root / settings.manifest_file
    data = _load_manifest(fs, manifest_path)

    deleted: list[str] = []
    for relative in settings.engine_files:
        path = root / relative
        if fs.exists(path):
            fs.remove_file(path)
            deleted.append(relative)
            if notify is not None:
                notify("deleted", path, "")

    # Launcher directories go away only once nothing else is left in them.
    removed_dirs: list[str] = []
    parents = sorted({PurePosixPath(item).parent.as_posix() for item in settings.engine_files} - {"."})
    for relative in parents:
        directory = root / relative
        if fs.is_directory(directory) and not fs.list_children(directory):
            fs.remove_directory(directory)
            removed_dirs.append(relative)
            if notify is not None:
                notify("deleted", directory, "")

    removed_keys: list[str] = []
    commands = data.get(MANIFEST_SECTION)
    if commands:
        for key in keys:
            if key in commands:
                del commands[key]
                removed_keys.append(key)

    fs.write_text(manifest_path, dump_manifest(data))
    if notify is not None:
        notify("updated", manifest_path, "")

    return ManifestReport(
        manifest=manifest_path,
        removed_keys=tuple(removed_keys),
        deleted_files=tuple(deleted),
        removed_directories=tuple(removed_dirs),
    )
