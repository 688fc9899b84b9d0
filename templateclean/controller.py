"""Prompt-driven state machine that runs one cleanup mode.

Input and output are injected callables: ``ask(prompt) -> str`` blocks for a
line of input, ``say(markup)`` prints a rich markup line. Nothing here knows
about terminals, which keeps scripted runs and tests trivial.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from . import ui
from .cleanup import RunResult, apply_mode
from .config import AFFIRMATIVE, Settings
from .fs import FilesystemGateway
from .manifest import prune_manifest
from .modes import MODES, Mode, ModeDefinition, parse_mode_choice, render_rewrite_set


class State(str, Enum):
    awaiting_mode_choice = "awaiting_mode_choice"
    awaiting_confirmation = "awaiting_confirmation"
    running_mode = "running_mode"
    awaiting_manifest_prune_choice = "awaiting_manifest_prune_choice"
    running_manifest_prune = "running_manifest_prune"
    cancelled = "cancelled"
    done = "done"
    failed = "failed"


TERMINAL_STATES = (State.cancelled, State.done, State.failed)

MODE_PROMPT = "Choose mode (1 for Dashboard, 2 for Blank, or 'cancel')"
MANIFEST_PROMPT = "Remove cleaning scripts for a completely fresh start? (yes/no)"


def is_affirmative(answer: str) -> bool:
    return answer.strip().lower() in AFFIRMATIVE


class ModeController:
    def __init__(
        self,
        root: Path,
        fs: FilesystemGateway,
        settings: Settings,
        ask: Callable[[str], str],
        say: Callable[[str], None],
        mode: Optional[Mode] = None,
    ) -> None:
        self.root = root
        self.fs = fs
        self.settings = settings
        self.ask = ask
        self.say = say
        self.mode = mode
        self.result: RunResult | None = None
        self.state = State.awaiting_confirmation if mode else State.awaiting_mode_choice
        self.history: list[State] = [self.state]

    @property
    def definition(self) -> ModeDefinition:
        if self.mode is None:
            raise RuntimeError("No mode selected yet.")
        return MODES[self.mode]

    def run(self) -> int:
        """Drive the machine to a terminal state and return the exit code.

        Fatal filesystem, cleanup and manifest errors are not caught here.
        """
        handlers = {
            State.awaiting_mode_choice: self._choose_mode,
            State.awaiting_confirmation: self._confirm_mode,
            State.running_mode: self._run_mode,
            State.awaiting_manifest_prune_choice: self._choose_manifest_prune,
            State.running_manifest_prune: self._run_manifest_prune,
        }
        while self.state not in TERMINAL_STATES:
            self.state = handlers[self.state]()
            self.history.append(self.state)
        return 1 if self.state == State.failed else 0

    def _choose_mode(self) -> State:
        self.say(ui.heading("🎨 CLEAN TEMPLATE - Choose Your Mode"))
        for index, definition in enumerate(MODES.values(), start=1):
            color = "green" if definition.offers_manifest_prune else "blue"
            self.say(ui.paint(f"{index}. {definition.title}", color))
            self.say(ui.paint(f"   {definition.tagline}\n", color))

        self.mode = parse_mode_choice(self.ask(MODE_PROMPT))
        if self.mode is None:
            self.say(ui.paint("\n❌ Cleanup cancelled.", "red"))
            self.say(ui.paint("\nYou can also run directly:", "cyan"))
            for mode in MODES:
                self.say(ui.paint(f"  clean-template {mode.value}", "cyan"))
            return State.cancelled
        self.say(ui.heading(f"Launching {self.mode.value} mode...", "cyan"))
        return State.awaiting_confirmation

    def _confirm_mode(self) -> State:
        definition = self.definition
        self.say(ui.heading(definition.title, "cyan"))
        for line in definition.warnings:
            self.say(ui.paint(line, "yellow"))

        if is_affirmative(self.ask(definition.confirm_prompt)):
            return State.running_mode

        self.say(ui.paint("\n❌ Cleanup cancelled.", "red"))
        others = [mode.value for mode in MODES if mode != definition.mode]
        for other in others:
            self.say(ui.paint(f'Tip: Use "clean-template {other}" for {other} mode.\n', "cyan"))
        return State.cancelled

    def _notify(self, action: str, path: Path, detail: str) -> None:
        try:
            shown = path.relative_to(self.root).as_posix()
        except ValueError:
            shown = str(path)
        if action == "section":
            self.say(ui.section(detail))
        elif action == "deleted":
            self.say(ui.done(f"Deleted: {shown}", "red"))
        else:
            self.say(ui.done(f"Updated {path.name}"))

    def _run_mode(self) -> State:
        definition = self.definition
        self.say(ui.heading(f"🧹 {definition.start_banner}"))
        rewrite_set = render_rewrite_set(definition, self.settings)
        self.result = apply_mode(
            self.fs,
            self.root,
            definition,
            rewrite_set,
            doc_file=self.settings.doc_file,
            notify=self._notify,
            stop_on_error=self.settings.stop_on_error,
        )

        if not self.result.succeeded:
            self.say(ui.paint(f"\n{len(self.result.errors)} cleanup step(s) failed:", "red"))
            for error in self.result.errors:
                self.say(ui.crossed(error))
            return State.failed

        self._print_summary(definition)
        if definition.offers_manifest_prune:
            return State.awaiting_manifest_prune_choice
        return State.done

    def _print_summary(self, definition: ModeDefinition) -> None:
        self.say(ui.paint(f"\n✅ {definition.finished}", "green"))
        self.say(ui.paint("\n📦 What remains:", "cyan"))
        for line in ui.bullet_list(definition.keeps):
            self.say(line)
        if definition.removes:
            self.say(ui.paint("\n⚠️  What was removed:", "yellow"))
            for item in definition.removes:
                self.say(ui.crossed(item))
        self.say(ui.paint(f"\n🚀 {definition.closing}", "magenta"))
        self.say(ui.paint(f"\n{definition.next_step}\n", "cyan"))

    def _choose_manifest_prune(self) -> State:
        self.say(ui.paint("\n❓ One more thing...", "cyan"))
        if is_affirmative(self.ask(MANIFEST_PROMPT)):
            return State.running_manifest_prune
        self.say(ui.paint("\n✓ Keeping cleaning scripts (you can run them again if needed)", "cyan"))
        return State.done

    def _run_manifest_prune(self) -> State:
        self.say(ui.section("🧹 Removing cleaning scripts for a fresh start..."))
        report = prune_manifest(self.fs, self.root, self.settings, notify=self._notify)
        if report.removed_keys:
            self.say(ui.done(f"Removed {', '.join(report.removed_keys)} from {self.settings.manifest_file}"))
        self.say(ui.paint("\n✨ Cleaning scripts removed! You have a completely fresh start.", "green"))
        return State.done
