from pathlib import Path

import pytest

from templateclean.cleanup import CleanupError, PatchOutcome, apply_mode, patch_doc, prune_path, rewrite_file
from templateclean.config import Settings
from templateclean.fs import FilesystemError, LocalFilesystem, MemoryFilesystem
from templateclean.modes import BLANK, DASHBOARD, DocNote, render_rewrite_set

NOTE = DocNote(marker="## Cleaned", text="\n## Cleaned\n\nAll clean.\n\n", anchor="## Features")


def _recorder():
    events = []

    def notify(action, path, detail):
        events.append((action, path))

    return events, notify


def _nested_tree() -> MemoryFilesystem:
    fs = MemoryFilesystem()
    fs.add_file("/tree/keep.txt", "keep")
    fs.add_file("/tree/doomed/top.txt")
    fs.add_file("/tree/doomed/a/one.txt")
    fs.add_file("/tree/doomed/a/b/two.txt")
    fs.add_file("/tree/doomed/a/b/c/three.txt")
    fs.add_directory("/tree/doomed/empty")
    return fs


def test_prune_removes_nested_subtree():
    fs = _nested_tree()

    assert prune_path(fs, Path("/tree/doomed")) is True

    assert not fs.exists(Path("/tree/doomed"))
    assert [path for path in fs.files if path.startswith("/tree/doomed")] == []
    assert fs.read_text(Path("/tree/keep.txt")) == "keep"


def test_prune_reports_children_before_parents():
    fs = _nested_tree()
    events, notify = _recorder()

    prune_path(fs, Path("/tree/doomed"), notify)

    deleted = [path for action, path in events if action == "deleted"]
    assert deleted[-1] == Path("/tree/doomed")
    assert len(deleted) == 9
    for index, path in enumerate(deleted):
        later = deleted[index + 1 :]
        assert not any(path in other.parents for other in later)


def test_prune_twice_matches_prune_once():
    fs = _nested_tree()
    prune_path(fs, Path("/tree/doomed"))
    after_first = (dict(fs.files), set(fs.directories))
    events, notify = _recorder()

    assert prune_path(fs, Path("/tree/doomed"), notify) is False

    assert (dict(fs.files), set(fs.directories)) == after_first
    assert events == []


def test_prune_aborts_on_first_error():
    fs = _nested_tree()
    fs.fail_on = {"/tree/doomed/a/b/two.txt"}

    with pytest.raises(FilesystemError):
        prune_path(fs, Path("/tree/doomed"))

    assert fs.exists(Path("/tree/doomed/a/b/two.txt"))
    assert fs.exists(Path("/tree/doomed"))


def test_prune_handles_deep_nesting_on_disk(tmp_path: Path):
    deepest = tmp_path / "root"
    for index in range(60):
        deepest = deepest / f"level{index}"
    deepest.mkdir(parents=True)
    (deepest / "leaf.txt").write_text("leaf", encoding="utf-8")
    (tmp_path / "root" / "sibling.txt").write_text("x", encoding="utf-8")

    fs = LocalFilesystem()
    assert prune_path(fs, tmp_path / "root") is True

    assert not fs.exists(tmp_path / "root")


def test_prune_removes_symlink_without_touching_target(tmp_path: Path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "precious.txt").write_text("keep", encoding="utf-8")
    doomed = tmp_path / "doomed"
    doomed.mkdir()
    (doomed / "link").symlink_to(outside, target_is_directory=True)

    prune_path(LocalFilesystem(), doomed)

    assert not doomed.exists()
    assert (outside / "precious.txt").read_text(encoding="utf-8") == "keep"


def test_rewrite_replaces_whole_content():
    fs = MemoryFilesystem()
    fs.add_file("/app/home.ts", "a much longer pre-existing body\n" * 20)

    rewrite_file(fs, Path("/app/home.ts"), "short\n")

    assert fs.read_text(Path("/app/home.ts")) == "short\n"


def test_rewrite_refuses_missing_parent():
    fs = MemoryFilesystem()
    fs.add_directory("/app")

    with pytest.raises(CleanupError):
        rewrite_file(fs, Path("/app/core/home/home.ts"), "x")

    assert not fs.exists(Path("/app/core"))


def test_patch_inserts_note_before_anchor_once():
    fs = MemoryFilesystem()
    fs.add_file("/README.md", "# App\n\n## Features\n\n- a\n\n## Features\n")

    assert patch_doc(fs, Path("/README.md"), NOTE) == PatchOutcome.inserted
    first = fs.read_text(Path("/README.md"))
    assert patch_doc(fs, Path("/README.md"), NOTE) == PatchOutcome.already_present
    second = fs.read_text(Path("/README.md"))

    assert first == second
    assert first == "# App\n\n\n## Cleaned\n\nAll clean.\n\n## Features\n\n- a\n\n## Features\n"
    assert first.count("## Cleaned") == 1


def test_patch_without_anchor_leaves_document_alone():
    fs = MemoryFilesystem()
    fs.add_file("/README.md", "# App\n\nNo sections here.\n")

    assert patch_doc(fs, Path("/README.md"), NOTE) == PatchOutcome.anchor_missing

    assert fs.read_text(Path("/README.md")) == "# App\n\nNo sections here.\n"


def test_patch_missing_document_is_fatal():
    fs = MemoryFilesystem()

    with pytest.raises(FilesystemError):
        patch_doc(fs, Path("/README.md"), NOTE)


def test_apply_dashboard_mode(memory_fs, memory_root):
    rewrite_set = render_rewrite_set(DASHBOARD, Settings())

    result = apply_mode(memory_fs, memory_root, DASHBOARD, rewrite_set, doc_file="README.md")

    assert result.succeeded
    assert result.pruned == tuple(target.path for target in DASHBOARD.prune)
    assert result.missing == ()
    assert result.doc_outcome == PatchOutcome.inserted
    for target in DASHBOARD.prune:
        assert not memory_fs.exists(memory_root / target.path)
    for relative, content in rewrite_set.items():
        assert memory_fs.read_text(memory_root / relative) == content
    assert memory_fs.exists(memory_root / "src/app/core/layout/layout.ts")
    assert DASHBOARD.note.marker in memory_fs.read_text(memory_root / "README.md")


def test_apply_blank_mode_twice_is_stable(memory_fs, memory_root):
    rewrite_set = render_rewrite_set(BLANK, Settings())
    apply_mode(memory_fs, memory_root, BLANK, rewrite_set, doc_file="README.md")
    after_first = (dict(memory_fs.files), set(memory_fs.directories))

    result = apply_mode(memory_fs, memory_root, BLANK, rewrite_set, doc_file="README.md")

    assert (dict(memory_fs.files), set(memory_fs.directories)) == after_first
    assert result.pruned == ()
    assert result.missing == tuple(target.path for target in BLANK.prune)
    assert result.doc_outcome == PatchOutcome.already_present
    assert not memory_fs.exists(memory_root / "src/app/core/header")


def test_apply_stops_at_first_error_by_default(memory_fs, memory_root):
    memory_fs.fail_on = {(memory_root / "src/app/data/users/users.ts").as_posix()}
    rewrite_set = render_rewrite_set(DASHBOARD, Settings())

    with pytest.raises(FilesystemError):
        apply_mode(memory_fs, memory_root, DASHBOARD, rewrite_set, doc_file="README.md")

    assert not memory_fs.exists(memory_root / "src/app/auth")
    assert memory_fs.exists(memory_root / "src/app/shared/example-component")
    assert memory_fs.read_text(memory_root / "src/app/core/home/home.html") == "<h1>Demo home</h1>\n"


def test_apply_can_collect_errors_and_continue(memory_fs, memory_root):
    memory_fs.fail_on = {(memory_root / "src/app/data/users/users.ts").as_posix()}
    rewrite_set = render_rewrite_set(DASHBOARD, Settings())

    result = apply_mode(
        memory_fs, memory_root, DASHBOARD, rewrite_set, doc_file="README.md", stop_on_error=False
    )

    assert not result.succeeded
    assert len(result.errors) == 1
    assert "users.ts" in result.errors[0]
    assert "src/app/data" not in result.pruned
    assert not memory_fs.exists(memory_root / "src/app/shared/example-component")
    assert result.rewritten == tuple(rewrite_set)
    assert result.doc_outcome == PatchOutcome.inserted


def test_patch_keeps_crlf_document_intact_on_disk(tmp_path: Path):
    readme = tmp_path / "README.md"
    readme.write_bytes("# App\r\n\r\n## 🚀 Key Features\r\n\r\n- a\r\n".encode("utf-8"))

    assert patch_doc(LocalFilesystem(), readme, DASHBOARD.note) == PatchOutcome.inserted

    data = readme.read_bytes()
    assert data.count(b"\r\n") == 5
    assert data.startswith(b"# App\r\n\r\n\n## \xe2\x9c\xa8 Dashboard Template Ready")
    assert data.endswith("## 🚀 Key Features\r\n\r\n- a\r\n".encode("utf-8"))


def test_collect_mode_records_undecodable_readme(scaffold: Path):
    (scaffold / "README.md").write_bytes(b"# App\xff\xfe\n## Key Features\n")
    rewrite_set = render_rewrite_set(BLANK, Settings())

    result = apply_mode(LocalFilesystem(), scaffold, BLANK, rewrite_set, doc_file="README.md", stop_on_error=False)

    assert not result.succeeded
    assert result.doc_outcome is None
    assert "UTF-8" in result.errors[0]
    assert result.rewritten == tuple(rewrite_set)
