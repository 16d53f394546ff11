# main.py
"""
Entry Point — Folio Note Liquidator

Purpose
-------
Run one liquidation pass end-to-end:
  1) Load configuration (--config JSON, env overrides for secrets).
  2) Fetch the portfolio, partition it into age cohorts, and price each note
     at the highest markup that still leaves the buyer the target YTM.
  3) Submit one sell batch per cohort (skipped with --dry-run).
  4) Print a per-cohort summary and optionally write a Markdown report.

Usage
-----
    python main.py --config config.json --dry-run
    python main.py --config config.json --report out/liquidation.md --as-of 2024-05-01 -v
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date

from src.client.folio import AsyncFolioGateway, FolioClient
from src.core.errors import ExternalCallError
from src.inputs.inputs import AppConfig, ConfigLoader
from src.orchestrators.liquidation import run_liquidation
from src.reports.generator import write_report
from src.schemas.models import LiquidationReport


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for configurable runs."""
    p = argparse.ArgumentParser(description="Folio Note Liquidator")
    p.add_argument("--config", type=str, default=None, help="Path to JSON config.")
    p.add_argument("--dry-run", action="store_true", default=None, help="Price and validate only; do not submit sales.")
    p.add_argument("--report", type=str, default=None, help="Markdown report path (overrides config).")
    p.add_argument("--as-of", type=date.fromisoformat, default=None, help="Evaluation date YYYY-MM-DD (default: today).")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return p.parse_args(argv)


def build_gateway(cfg: AppConfig) -> AsyncFolioGateway:
    client = FolioClient(
        cfg.investor.api_key,
        base_url=cfg.investor.base_url,
        timeout_s=cfg.investor.timeout_s,
    )
    return AsyncFolioGateway(client)


def print_summary(report: LiquidationReport) -> None:
    mode = " (dry run)" if report.dry_run else ""
    print(f"Liquidation for investor {report.investor_id} as of {report.as_of.isoformat()}{mode}")
    for c in report.cohorts:
        if not c.ok:
            status = f"FAILED ({c.error})"
        elif c.dry_run:
            status = f"{len(c.requests)} requests built"
        else:
            status = f"{len(c.submitted)} notes submitted"
        print(f"  cohort {c.index} (>= {c.month_threshold} months): {len(c.priced)} priced, {len(c.skipped)} skipped, {status}")


def main(argv: list[str] | None = None) -> int:
    """Run one liquidation pass; returns the process exit code."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    loader = ConfigLoader()
    cfg = loader.load(args.config)
    cfg = loader.with_overrides(cfg, dry_run=args.dry_run, report=args.report)

    try:
        report = asyncio.run(run_liquidation(build_gateway(cfg), cfg, as_of=args.as_of))
    except ExternalCallError as e:
        print(f"Could not fetch the note portfolio: {e}")
        return 1

    print_summary(report)
    if cfg.run.report:
        write_report(cfg.run.report, report)
        print(f"Report written to {cfg.run.report}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
