"""
KeyForge Console Output
========================

Rich-based display of generated secrets, strength meters, randomness
audits and history statistics.

Secrets are always rendered through :class:`rich.text.Text`; they
routinely contain ``[`` which Rich would otherwise read as markup.

References:
    - Rich Library Documentation. https://rich.readthedocs.io/
"""

from __future__ import annotations

from typing import Optional, Sequence

from rich.panel import Panel
from rich.text import Text

from shared.console import ForgeConsole

from keyforge.core.models import (
    GeneratedPassphrase,
    GeneratedPassword,
    HistoryRecord,
    HistoryStatistics,
    RandomnessAudit,
    StrengthLevel,
    StrengthResult,
)

_METER_WIDTH = 40


def _level_style(level: StrengthLevel) -> str:
    return f"bold {level.color_code}"


def _level_text(level: StrengthLevel) -> Text:
    return Text(level.label, style=_level_style(level))


class ForgeConsoleOutput:
    """Console formatters for KeyForge results.

    Usage::

        output = ForgeConsoleOutput(ForgeConsole())
        output.display_password(engine.generate_password())
        output.display_strength(engine.analyze("hunter2"))
    """

    def __init__(self, console: Optional[ForgeConsole] = None) -> None:
        self.console = console or ForgeConsole()
        self._rich = self.console.rich

    # ------------------------------------------------------------------ #
    #  Generated secrets
    # ------------------------------------------------------------------ #

    def display_password(self, result: GeneratedPassword) -> None:
        """Show one password, pattern password or PIN with its strength."""
        title = {
            "standard": "Generated Password",
            "pattern": "Pattern Password",
            "pin": "Generated PIN",
        }[result.kind]
        self.console.section(title)
        self.console.secret(result.value)
        if result.pattern:
            self._rich.print(Text(f"Pattern: {result.pattern}", style="dim"))
        self.console.blank()
        self.display_strength(result.strength, length=len(result.value))

    def display_passwords(self, results: Sequence[GeneratedPassword]) -> None:
        """Show a bulk batch as one table."""
        rows = [
            (
                str(idx),
                Text(r.value, style="forge.secret"),
                _level_text(r.strength.level),
                f"{r.strength.entropy:.2f}",
                str(r.strength.score),
                r.strength.time_to_crack,
            )
            for idx, r in enumerate(results, start=1)
        ]
        self.console.table(
            f"Generated Passwords ({len(results)})",
            ["#", "Password", "Strength", "Entropy", "Score", "Crack Time"],
            rows,
        )

    def display_passphrase(self, result: GeneratedPassphrase) -> None:
        self.console.section("Generated Passphrase")
        self.console.secret(result.value)
        self._rich.print(
            Text(
                f"{len(result.words)} words, language: {result.options.language.value}",
                style="dim",
            )
        )
        self.console.blank()
        self.display_strength(result.strength, length=len(result.value))

    # ------------------------------------------------------------------ #
    #  Strength
    # ------------------------------------------------------------------ #

    def strength_meter(self, result: StrengthResult) -> Text:
        """Score bar coloured with the level's colour."""
        filled = max(0, min(_METER_WIDTH, int(result.score / 100 * _METER_WIDTH)))
        style = _level_style(result.level)

        meter = Text()
        meter.append("Score: ", style="bold")
        meter.append(f"{result.score}/100  ")
        meter.append("[", style="dim")
        meter.append("█" * filled, style=style)
        meter.append("░" * (_METER_WIDTH - filled), style="dim")
        meter.append("]", style="dim")
        meter.append("  ")
        meter.append(result.level.label.upper(), style=style)
        return meter

    def display_strength(
        self, result: StrengthResult, *, length: Optional[int] = None
    ) -> None:
        """Strength meter, detail table, feedback and warnings."""
        self._rich.print(
            Panel(self.strength_meter(result), title="Strength Meter", border_style="cyan")
        )

        classes = [
            name
            for name, present in (
                ("upper", result.has_uppercase),
                ("lower", result.has_lowercase),
                ("digits", result.has_numbers),
                ("symbols", result.has_symbols),
            )
            if present
        ]
        pairs: list[tuple[str, object]] = []
        if length is not None:
            pairs.append(("Length", length))
        pairs += [
            ("Level", _level_text(result.level)),
            ("Entropy", f"{result.entropy:.2f} bits"),
            ("Time to Crack", result.time_to_crack),
            ("Unique Characters", result.unique_characters),
            ("Classes", ", ".join(classes) or "none"),
        ]
        self.console.key_values("Details", pairs)

        for line in result.feedback:
            self._rich.print(Text.assemble(("  ✔ ", "green"), line))
        for line in result.warnings:
            self._rich.print(Text.assemble(("  ⚠ ", "yellow"), line))

    def display_crack_time(self, entropy: float, estimate: str) -> None:
        self.console.section("Crack-Time Estimate")
        self.console.table(
            "Brute-Force Estimate",
            ["Entropy (bits)", "Level", "Average Time"],
            [
                (
                    f"{entropy:.2f}",
                    _level_text(StrengthLevel.from_entropy(entropy)),
                    estimate,
                )
            ],
        )

    # ------------------------------------------------------------------ #
    #  Randomness audit
    # ------------------------------------------------------------------ #

    def display_audit(self, audit: RandomnessAudit) -> None:
        self.console.section("Randomness Self-Test")

        summary = Text()
        summary.append("Overall: ", style="bold")
        summary.append(
            "PASS" if audit.passed else "FAIL",
            style="bold bright_green" if audit.passed else "bold red",
        )
        summary.append(f"\nSignificance level: {audit.alpha}")
        summary.append(f"\nByte entropy: {audit.byte_entropy:.4f} bits/byte")
        self._rich.print(Panel(summary, title="Chi-Squared Uniformity", border_style="cyan"))

        rows = [
            (
                check.name,
                str(check.bins),
                f"{check.sample_size:,}",
                f"{check.chi_squared:.4f}",
                f"{check.p_value:.6f}",
                Text(
                    "PASS" if check.passed else "FAIL",
                    style="green" if check.passed else "red",
                ),
            )
            for check in audit.checks
        ]
        self.console.table(
            "Checks",
            ["Check", "Bins", "Samples", "Chi-Squared", "p-value", "Result"],
            rows,
        )

    # ------------------------------------------------------------------ #
    #  History
    # ------------------------------------------------------------------ #

    def display_history(self, records: Sequence[HistoryRecord]) -> None:
        rows = [
            (
                r.label or "-",
                Text(r.password, style="forge.secret"),
                _level_text(r.strength_level),
                r.type.value,
                ", ".join(r.tags) or "-",
                r.created_at.strftime("%Y-%m-%d %H:%M"),
            )
            for r in records
        ]
        self.console.table(
            f"History ({len(records)})",
            ["Label", "Password", "Strength", "Kind", "Tags", "Created"],
            rows,
        )

    def display_history_stats(self, stats: HistoryStatistics) -> None:
        self.console.section("History Statistics")
        rows: list[tuple[str, str]] = [
            ("Total records", str(stats.total_count)),
            ("Favorites", str(stats.favorite_count)),
            ("Total copies", str(stats.total_copy_count)),
            ("Estimated storage", f"{stats.estimated_storage_bytes:,} bytes"),
            ("Oldest", stats.oldest.isoformat() if stats.oldest else "-"),
            ("Newest", stats.newest.isoformat() if stats.newest else "-"),
        ]
        rows.extend(
            (f"Strength: {label}", str(count))
            for label, count in stats.strength_distribution.items()
        )
        rows.extend(
            (f"Kind: {kind}", str(count))
            for kind, count in stats.kind_distribution.items()
        )
        self.console.key_values("Summary", rows)
