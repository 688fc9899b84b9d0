"""Declarative tables for the cleanup modes.

Each mode is data only: which subtrees to prune, which files to regenerate
from which template, and which note goes into the README. The engine in
``cleanup.py`` decides how those changes are applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .config import DOC_ANCHOR, Settings, templates_root


class Mode(str, Enum):
    dashboard = "dashboard"
    blank = "blank"


@dataclass(frozen=True)
class PruneTarget:
    path: str
    label: str


@dataclass(frozen=True)
class RewriteTarget:
    path: str
    template: str


@dataclass(frozen=True)
class DocNote:
    marker: str
    text: str
    anchor: str = DOC_ANCHOR


@dataclass(frozen=True)
class ModeDefinition:
    mode: Mode
    title: str
    tagline: str
    warnings: tuple[str, ...]
    confirm_prompt: str
    start_banner: str
    prune: tuple[PruneTarget, ...]
    rewrites: tuple[RewriteTarget, ...]
    note: DocNote
    keeps: tuple[str, ...]
    removes: tuple[str, ...]
    finished: str
    closing: str
    next_step: str
    offers_manifest_prune: bool = False


_APP = "src/app"

_COMMON_PRUNE = (
    PruneTarget(f"{_APP}/auth", "Removing authentication components..."),
    PruneTarget(f"{_APP}/data", "Removing demo data pages..."),
    PruneTarget(f"{_APP}/shared/example-component", "Removing example components..."),
    PruneTarget(f"{_APP}/home", "Removing duplicate home folder..."),
)


def _note(heading: str, body: str) -> DocNote:
    return DocNote(marker=heading, text=f"\n{heading}\n\n{body}\n\n")


DASHBOARD = ModeDefinition(
    mode=Mode.dashboard,
    title="DASHBOARD MODE (Recommended)",
    tagline="Keeps full layout structure. Perfect for dashboard apps, admin panels, full-featured apps.",
    warnings=(
        "Perfect for building dashboard-style applications.",
        "This action cannot be undone.",
    ),
    confirm_prompt="Create dashboard template? (yes/no)",
    start_banner="Starting DASHBOARD mode cleanup...",
    prune=_COMMON_PRUNE,
    rewrites=(
        RewriteTarget(f"{_APP}/app.routes.ts", "dashboard/app.routes.ts.j2"),
        RewriteTarget(f"{_APP}/core/home/home.html", "dashboard/home.html.j2"),
        RewriteTarget(f"{_APP}/core/home/home.ts", "dashboard/home.ts.j2"),
        RewriteTarget(f"{_APP}/core/home/home.scss", "dashboard/home.scss.j2"),
        RewriteTarget(f"{_APP}/core/header/header.ts", "dashboard/header.ts.j2"),
        RewriteTarget(f"{_APP}/core/header/header.html", "dashboard/header.html.j2"),
        RewriteTarget(f"{_APP}/core/sidenav/sidenav.ts", "dashboard/sidenav.ts.j2"),
    ),
    note=_note(
        "## ✨ Dashboard Template Ready",
        "This template has been cleaned and configured as a dashboard! The full layout structure "
        "(header, sidebar, footer) is preserved and ready to customize. All demo content has been removed.",
    ),
    keeps=(
        "Complete layout structure (header, footer, sidenav, layout)",
        "Dashboard-style home page",
        "Clean header without auth dependencies",
        "Customizable sidenav with examples",
        "Shared utilities (notification, spinner)",
        "All configuration files",
        "TailwindCSS + DaisyUI setup",
        "Documentation and .cursorrules",
    ),
    removes=(),
    finished="Dashboard template ready!",
    closing="Ready to build your dashboard!",
    next_step='Run "npm start" to see your dashboard template.',
    offers_manifest_prune=True,
)

BLANK = ModeDefinition(
    mode=Mode.blank,
    title="BLANK MODE (Minimal)",
    tagline="Removes ALL layout structure. Perfect for starting from absolute scratch.",
    warnings=(
        "BLANK MODE: This removes EVERYTHING including layout!",
        "You'll get a single home page with NO header/footer/sidenav.",
        "This action cannot be undone.",
    ),
    confirm_prompt="Are you sure you want a blank scaffold? (yes/no)",
    start_banner="Starting BLANK scaffold cleanup...",
    prune=_COMMON_PRUNE
    + (
        PruneTarget(f"{_APP}/core/header", "Removing layout structure..."),
        PruneTarget(f"{_APP}/core/footer", "Removing layout structure..."),
        PruneTarget(f"{_APP}/core/sidenav", "Removing layout structure..."),
        PruneTarget(f"{_APP}/core/layout", "Removing layout structure..."),
    ),
    rewrites=(
        RewriteTarget(f"{_APP}/app.routes.ts", "blank/app.routes.ts.j2"),
        RewriteTarget(f"{_APP}/app.html", "blank/app.html.j2"),
        RewriteTarget(f"{_APP}/core/home/home.html", "blank/home.html.j2"),
        RewriteTarget(f"{_APP}/core/home/home.ts", "blank/home.ts.j2"),
        RewriteTarget(f"{_APP}/core/home/home.scss", "blank/home.scss.j2"),
    ),
    note=_note(
        "## ✨ Blank Scaffold Created",
        "This template has been cleaned to a blank scaffold! All layout structures and demo content have "
        "been removed, leaving you with a minimal starting point. TailwindCSS, DaisyUI, and all "
        "configuration remain intact.",
    ),
    keeps=(
        "Single home component (minimal)",
        "Not found page (404)",
        "Shared utilities (notification, spinner)",
        "All configuration files",
        "TailwindCSS + DaisyUI setup",
        "Documentation and .cursorrules",
    ),
    removes=(
        "Header, Footer, Sidenav (layout structure)",
        "All authentication components",
        "All demo pages",
    ),
    finished="Blank scaffold created!",
    closing="Ready to build from scratch!",
    next_step='Run "npm start" to see your blank canvas.',
)

MODES: dict[Mode, ModeDefinition] = {
    Mode.dashboard: DASHBOARD,
    Mode.blank: BLANK,
}

_CHOICES = {
    "1": Mode.dashboard,
    Mode.dashboard.value: Mode.dashboard,
    "2": Mode.blank,
    Mode.blank.value: Mode.blank,
}


def parse_mode_choice(answer: str) -> Mode | None:
    """Map a prompt answer to a mode; ``None`` means the user cancelled."""
    return _CHOICES.get(answer.strip().lower())


def overlapping_prune_paths(definition: ModeDefinition) -> list[tuple[str, str]]:
    paths = [PurePosixPath(target.path) for target in definition.prune]
    overlaps = []
    for index, left in enumerate(paths):
        for right in paths[index + 1 :]:
            if left == right or left in right.parents or right in left.parents:
                overlaps.append((left.as_posix(), right.as_posix()))
    return overlaps


def rewrites_inside_pruned(definition: ModeDefinition) -> list[str]:
    pruned = [PurePosixPath(target.path) for target in definition.prune]
    blocked = []
    for rewrite in definition.rewrites:
        path = PurePosixPath(rewrite.path)
        if any(root == path or root in path.parents for root in pruned):
            blocked.append(rewrite.path)
    return blocked


def render_rewrite_set(definition: ModeDefinition, settings: Settings) -> dict[str, str]:
    """Render every rewrite template of a mode, keyed by scaffold-relative path."""
    env = Environment(
        loader=FileSystemLoader(str(templates_root())),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )

    context = {
        "brand_name": settings.brand_name,
        "repo_url": settings.repo_url,
        "mode": definition.mode.value,
    }

    rendered: dict[str, str] = {}
    for target in definition.rewrites:
        content = env.get_template(target.template).render(**context)
        rendered[target.path] = content + ("\n" if not content.endswith("\n") else "")
    return rendered
