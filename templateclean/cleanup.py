from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .fs import FilesystemError, FilesystemGateway
from .modes import DocNote, ModeDefinition

# notify(action, path, detail): action is one of "section", "deleted", "updated", "patched"
Notify = Callable[[str, Path, str], None]


class CleanupError(RuntimeError):
    pass


class PatchOutcome(str, Enum):
    inserted = "inserted"
    already_present = "already_present"
    anchor_missing = "anchor_missing"


@dataclass(frozen=True)
class RunResult:
    mode: str
    pruned: tuple[str, ...]
    missing: tuple[str, ...]
    rewritten: tuple[str, ...]
    doc_outcome: PatchOutcome | None
    errors: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return not self.errors


def _emit(notify: Optional[Notify], action: str, path: Path, detail: str = "") -> None:
    if notify is not None:
        notify(action, path, detail)


def prune_path(fs: FilesystemGateway, path: Path, notify: Optional[Notify] = None) -> bool:
    """Delete ``path`` and everything below it, children before parents.

    Returns ``False`` without touching anything when the path does not exist.
    """
    if not fs.exists(path):
        return False

    stack: list[tuple[Path, bool]] = [(path, False)]
    while stack:
        current, expanded = stack.pop()
        if expanded:
            fs.remove_directory(current)
            _emit(notify, "deleted", current)
            continue
        if fs.is_directory(current):
            stack.append((current, True))
            stack.extend((child, False) for child in reversed(fs.list_children(current)))
        else:
            fs.remove_file(current)
            _emit(notify, "deleted", current)
    return True


def rewrite_file(fs: FilesystemGateway, path: Path, content: str, notify: Optional[Notify] = None) -> None:
    if not fs.is_directory(path.parent):
        raise CleanupError(f"Cannot rewrite {path}: parent directory {path.parent} is missing.")
    fs.write_text(path, content)
    _emit(notify, "updated", path)


def patch_doc(fs: FilesystemGateway, path: Path, note: DocNote) -> PatchOutcome:
    text = fs.read_text(path)
    if note.marker in text:
        return PatchOutcome.already_present
    # No anchor means no insertion point; the document is left alone.
    if note.anchor not in text:
        return PatchOutcome.anchor_missing
    fs.write_text(path, text.replace(note.anchor, note.text + note.anchor, 1))
    return PatchOutcome.inserted


def apply_mode(
    fs: FilesystemGateway,
    root: Path,
    definition: ModeDefinition,
    rewrite_set: dict[str, str],
    doc_file: str,
    notify: Optional[Notify] = None,
    stop_on_error: bool = True,
) -> RunResult:
    """Prune, rewrite and patch the scaffold for one mode.

    With ``stop_on_error`` (the default) the first failure propagates and the
    run stops there; already applied changes stay applied. Without it every
    target is attempted and the failures are collected in the result.
    """
    pruned: list[str] = []
    missing: list[str] = []
    rewritten: list[str] = []
    errors: list[str] = []
    doc_outcome: PatchOutcome | None = None

    def attempt(action: Callable[[], None]) -> None:
        if stop_on_error:
            action()
            return
        try:
            action()
        except (FilesystemError, CleanupError) as error:
            errors.append(str(error))

    last_label = None
    for target in definition.prune:
        if target.label != last_label:
            _emit(notify, "section", root / target.path, target.label)
            last_label = target.label

        def prune_one(target=target) -> None:
            if prune_path(fs, root / target.path, notify):
                pruned.append(target.path)
            else:
                missing.append(target.path)

        attempt(prune_one)

    _emit(notify, "section", root, "Updating generated files...")
    for relative, content in rewrite_set.items():

        def rewrite_one(relative=relative, content=content) -> None:
            rewrite_file(fs, root / relative, content, notify)
            rewritten.append(relative)

        attempt(rewrite_one)

    _emit(notify, "section", root / doc_file, f"Updating {Path(doc_file).name}...")

    def patch() -> None:
        nonlocal doc_outcome
        doc_outcome = patch_doc(fs, root / doc_file, definition.note)
        if doc_outcome == PatchOutcome.inserted:
            _emit(notify, "patched", root / doc_file)

    attempt(patch)

    return RunResult(
        mode=definition.mode.value,
        pruned=tuple(pruned),
        missing=tuple(missing),
        rewritten=tuple(rewritten),
        doc_outcome=doc_outcome,
        errors=tuple(errors),
    )
