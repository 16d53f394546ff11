# src/reports/generator.py
from __future__ import annotations

from pathlib import Path

from src.schemas.models import CohortOutcome, LiquidationReport, PricedNote, SkippedNote


def _fmt_currency(x: float) -> str:
    """
    Format a float as USD-style currency with thousands separators.

    Example:
        1087.4321 -> $1,087.43
    """
    sign = "-" if x < 0 else ""
    return f"{sign}${abs(x):,.2f}"


def _fmt_pct(x: float, digits: int = 2) -> str:
    """
    Format a fraction as a percentage.

    Example:
        0.0595 -> 5.95%
    """
    return f"{x * 100:.{digits}f}%"


def _section(title: str) -> str:
    return f"\n## {title}\n"


def _render_header(report: LiquidationReport) -> str:
    mode = "dry run (nothing submitted)" if report.dry_run else "live"
    lines = [
        "# Folio Liquidation Report",
        "",
        f"- Investor: {report.investor_id}",
        f"- As of: {report.as_of.isoformat()}",
        f"- Mode: {mode}",
        f"- Cohorts: {len(report.cohorts)} ({len(report.failed_cohorts)} failed)",
        f"- Notes submitted: {report.submitted_count}",
    ]
    return "\n".join(lines) + "\n"


def _status(outcome: CohortOutcome) -> str:
    if not outcome.ok:
        return f"FAILED: {outcome.error}"
    if not outcome.requests:
        return "nothing to sell"
    if outcome.dry_run:
        return f"{len(outcome.requests)} requests built (dry run)"
    return f"{len(outcome.submitted)} notes submitted"


def _render_pricing_table(priced: list[PricedNote]) -> str:
    """Same columns as the console table of the first version of this tool."""
    if not priced:
        return "_No sellable notes._\n"
    header = (
        "| noteId | initialMarkup | finalMarkup | initialAskingPrice | finalAskingPrice | initialYTM | finalYTM |\n"
        "|---:|---:|---:|---:|---:|---:|---:|\n"
    )
    rows = [
        f"| {p.note.note_id} | {p.initial_markup:.4f} | {p.final_markup:.4f} | "
        f"{_fmt_currency(p.initial_asking_price)} | {_fmt_currency(p.final_asking_price)} | "
        f"{_fmt_pct(p.initial_ytm)} | {_fmt_pct(p.final_ytm)} |"
        for p in priced
    ]
    return header + "\n".join(rows) + "\n"


def _render_skipped(skipped: list[SkippedNote]) -> str:
    if not skipped:
        return ""
    lines = ["", "Skipped:"]
    lines += [f"- {s.note_id}: {s.reason}" for s in skipped]
    return "\n".join(lines) + "\n"


def _render_cohort(outcome: CohortOutcome) -> str:
    parts = [
        _section(f"Cohort {outcome.index}: issued ≥ {outcome.month_threshold} months ago"),
        f"- Target YTM: {_fmt_pct(outcome.target.acceptable_ytm)}",
        f"- Markup floor: {_fmt_pct(outcome.target.acceptable_markup)}",
        f"- Status: {_status(outcome)}",
        "",
        _render_pricing_table(outcome.priced),
        _render_skipped(outcome.skipped),
    ]
    return "\n".join(parts)


def generate_report(report: LiquidationReport) -> str:
    """Render a liquidation run as Markdown."""
    body = [_render_header(report)]
    body += [_render_cohort(c) for c in report.cohorts]
    return "\n".join(body).rstrip() + "\n"


def write_report(path: str | Path, report: LiquidationReport) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(generate_report(report), encoding="utf-8")
