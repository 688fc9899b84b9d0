"""Rich markup helpers for console messages. All pure functions."""

from __future__ import annotations

from rich.markup import escape

COLORS = ("red", "green", "yellow", "blue", "magenta", "cyan")


def paint(message: str, color: str | None = None) -> str:
    if color is None:
        return escape(message)
    if color not in COLORS:
        raise ValueError(f"Unsupported color: {color}")
    return f"[{color}]{escape(message)}[/{color}]"


def heading(message: str, color: str = "cyan") -> str:
    return paint(f"\n{message}\n", color)


def section(message: str) -> str:
    return paint(f"\n{message}", "yellow")


def done(message: str, color: str = "green") -> str:
    return paint(f"  ✓ {message}", color)


def crossed(message: str) -> str:
    return paint(f"  ✗ {message}", "red")


def bullet_list(items: tuple[str, ...], color: str = "green") -> list[str]:
    return [done(item, color) for item in items]
