from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import Settings
from .fs import FilesystemGateway
from .modes import MODES, Mode, rewrites_inside_pruned


class PlanError(RuntimeError):
    pass


@dataclass(frozen=True)
class PlanReport:
    mode: str
    prune_present: tuple[str, ...]
    prune_missing: tuple[str, ...]
    rewrite_ready: tuple[str, ...]
    rewrite_blocked: tuple[str, ...]
    doc_file: str
    doc_status: str


def _doc_status(fs: FilesystemGateway, path: Path, marker: str, anchor: str) -> str:
    if not fs.exists(path) or fs.is_directory(path):
        return "missing"
    text = fs.read_text(path)
    if marker in text:
        return "present"
    if anchor not in text:
        return "anchor_missing"
    return "pending"


def build_plan(fs: FilesystemGateway, root: Path, mode: Mode, settings: Settings) -> PlanReport:
    """Describe what a mode would change without touching the scaffold."""
    if not fs.is_directory(root):
        raise PlanError(f"Scaffold root does not exist: {root}")

    definition = MODES[mode]
    present = [target.path for target in definition.prune if fs.exists(root / target.path)]
    missing = [target.path for target in definition.prune if not fs.exists(root / target.path)]

    # Rewrites are blocked when their directory is gone or sits inside a pruned subtree.
    inside_pruned = set(rewrites_inside_pruned(definition))
    ready: list[str] = []
    blocked: list[str] = []
    for target in definition.rewrites:
        if target.path in inside_pruned or not fs.is_directory((root / target.path).parent):
            blocked.append(target.path)
        else:
            ready.append(target.path)

    return PlanReport(
        mode=mode.value,
        prune_present=tuple(present),
        prune_missing=tuple(missing),
        rewrite_ready=tuple(ready),
        rewrite_blocked=tuple(blocked),
        doc_file=settings.doc_file,
        doc_status=_doc_status(fs, root / settings.doc_file, definition.note.marker, definition.note.anchor),
    )
