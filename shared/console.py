"""
KeyForge Console Interface
===========================

Presentation layer shared by every KeyForge command, built on
:class:`rich.console.Console`.

Two rules hold for everything printed here:

- Caller-supplied strings are escaped or wrapped in :class:`rich.text.Text`.
  Generated secrets routinely contain ``[`` and ``]`` and would otherwise
  be read as Rich markup.
- Table cells fold instead of truncating, so a 128-character password is
  always shown in full.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

import datetime as _dt
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Sequence

from rich.console import Console, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

_FORGE_THEME = Theme(
    {
        "forge.banner": "bold bright_cyan",
        "forge.section": "bold bright_magenta",
        "forge.success": "bold green",
        "forge.warning": "bold yellow",
        "forge.error": "bold red",
        "forge.info": "bold bright_blue",
        "forge.dim": "dim white",
        "forge.secret": "bold bright_white",
        "forge.key": "bold",
    }
)

_BANNER_ART = r"""
 _  __          _____
| |/ /___ _   _|  ___|__  _ __ __ _  ___
| ' // _ \ | | | |_ / _ \| '__/ _` |/ _ \
| . \  __/ |_| |  _| (_) | | | (_| |  __/
|_|\_\___|\__, |_|  \___/|_|  \__, |\___|
          |___/               |___/"""

_TAGLINE = "Password & Passphrase Generation Toolkit"

# level -> (theme style, glyph, label)
_MESSAGE_LEVELS: dict[str, tuple[str, str, str]] = {
    "success": ("forge.success", "✔", "OK"),
    "warning": ("forge.warning", "⚠", "WARNING"),
    "error": ("forge.error", "✘", "ERROR"),
    "info": ("forge.info", "ℹ", "INFO"),
}


def _cell(value: Any) -> RenderableType:
    if isinstance(value, Text):
        return value
    return Text("-" if value is None else str(value))


class ForgeConsole:
    """Console facade used by the CLI and :mod:`keyforge.output.console`.

    Usage::

        con = ForgeConsole()
        con.banner("1.0.0")
        con.section("Generated Password")
        con.secret("p[4]ss!")
        con.message("success", "Saved 1 record")

    Args:
        quiet: Silence every write (bare-value CLI mode and tests).
    """

    def __init__(self, *, quiet: bool = False) -> None:
        self._console = Console(theme=_FORGE_THEME, quiet=quiet, highlight=False)

    @property
    def rich(self) -> Console:
        return self._console

    # ------------------------------------------------------------------ #
    #  Framing
    # ------------------------------------------------------------------ #

    def banner(self, version: str) -> None:
        stamp = _dt.datetime.now().strftime("%Y-%m-%d %H:%M")
        body = Text(_BANNER_ART.strip("\n"), style="forge.banner")
        body.append(f"\n\n{_TAGLINE}", style="forge.section")
        body.append(f"\nv{version}  |  {stamp}", style="forge.dim")
        self._console.print(Panel(body, border_style="bright_cyan", expand=False))

    def section(self, title: str) -> None:
        self._console.rule(f" {escape(title)} ", style="forge.section")
        self._console.print()

    def blank(self) -> None:
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Messages
    # ------------------------------------------------------------------ #

    def message(self, level: str, text: str) -> None:
        """Print *text* prefixed by the glyph and label of *level*."""
        style, glyph, label = _MESSAGE_LEVELS[level]
        line = Text(f"{glyph} {label}: ", style=style)
        line.append(text)
        self._console.print(line)

    def success(self, text: str) -> None:
        self.message("success", text)

    def warning(self, text: str) -> None:
        self.message("warning", text)

    def error(self, text: str) -> None:
        self.message("error", text)

    def info(self, text: str) -> None:
        self.message("info", text)

    def secret(self, value: str) -> None:
        """Print a generated secret on its own line, never markup-parsed."""
        self._console.print(Text(value, style="forge.secret"), soft_wrap=True)

    # ------------------------------------------------------------------ #
    #  Tables
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Iterable[Sequence[Any]],
        *,
        caption: str | None = None,
    ) -> None:
        """Render *rows* under *columns*; ``None`` cells print as ``-``."""
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
        )
        for name in columns:
            tbl.add_column(name, overflow="fold")
        for row in rows:
            tbl.add_row(*(_cell(value) for value in row))
        self._console.print(tbl)

    def key_values(self, title: str, pairs: Iterable[tuple[str, Any]]) -> None:
        """Two-column property table."""
        tbl = Table(
            title=title,
            border_style="bright_cyan",
            show_header=False,
            show_lines=True,
        )
        tbl.add_column(style="forge.key")
        tbl.add_column(overflow="fold")
        for key, value in pairs:
            tbl.add_row(key, _cell(value))
        self._console.print(tbl)

    @contextmanager
    def status(self, text: str) -> Iterator[Status]:
        """Spinner shown while *text* describes pending work."""
        with self._console.status(Text(text, style="forge.info"), spinner="dots") as spinner:
            yield spinner
