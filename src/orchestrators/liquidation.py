# src/orchestrators/liquidation.py
"""
Batch liquidation orchestrator.

Purpose
-------
One run:
  1) Fetch the portfolio (failure here is fatal to the run).
  2) Apply classification filters and partition into disjoint age cohorts.
  3) Per cohort, concurrently: price notes, build the sell batch, submit it.
  4) Join every cohort task and report each outcome, success or error.

Design
------
- Pricing is synchronous and happens inside each cohort task before its
  single suspension point (the sale call). Tasks are created oldest cohort
  first, so pricing and dispatch start in age order.
- A cohort's failure is captured in its CohortOutcome; siblings are never
  cancelled. No retries.

Public API
----------
run_liquidation(gateway, config, *, as_of=None, today=None) -> LiquidationReport
liquidate_cohort(gateway, investor_id, cohort, target, *, pricing, as_of, ...) -> CohortOutcome
apply_filters(notes, filters) -> NoteCollection
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from src.client.folio import DEFAULT_EXPIRATION_DAYS, SaleGateway, max_expiration_date
from src.core.errors import ExternalCallError, ValidationError
from src.inputs.inputs import AppConfig, NoteFilters, PricingPolicy
from src.notes.collection import Cohort, NoteCollection, partition_by_cohort
from src.orchestrators.pricing import build_sell_requests, select_sellable
from src.schemas.models import CohortOutcome, CohortTarget, LiquidationReport, SaleResponse, SellRequest

logger = logging.getLogger(__name__)


def apply_filters(notes: NoteCollection, filters: NoteFilters) -> NoteCollection:
    if filters.purpose is not None:
        notes = notes.by_purpose(filters.purpose)
    if filters.loan_status is not None:
        notes = notes.by_loan_status(filters.loan_status)
    return notes


async def liquidate_cohort(
    gateway: SaleGateway,
    investor_id: int,
    cohort: Cohort,
    target: CohortTarget,
    *,
    pricing: PricingPolicy,
    as_of: date,
    dry_run: bool = False,
    expiration_days: int = DEFAULT_EXPIRATION_DAYS,
    today: date | None = None,
) -> CohortOutcome:
    """
    Price, validate and submit one cohort. Errors from validation or the
    platform are returned in the outcome, not raised.

    The listing expires `expiration_days` after `today` (the wall-clock date
    when omitted), independent of the pricing date `as_of`.
    """
    logger.info(
        "Cohort %s (>= %s months): %d notes, target YTM %.4f, markup floor %.4f",
        cohort.index,
        cohort.month_threshold,
        len(cohort.notes),
        target.acceptable_ytm,
        target.acceptable_markup,
    )
    priced, skipped = select_sellable(
        cohort.notes,
        target,
        initial_markup=pricing.initial_markup,
        max_markup=pricing.max_markup,
        as_of=as_of,
    )

    requests: list[SellRequest] = []
    response: SaleResponse | None = None
    error: str | None = None
    try:
        requests = build_sell_requests(priced)
        if not requests:
            logger.info("Cohort %s: nothing to sell", cohort.index)
        elif dry_run:
            logger.info("Cohort %s: dry run, %d requests not submitted", cohort.index, len(requests))
        else:
            response = await gateway.submit_sale(investor_id, max_expiration_date(expiration_days, today), requests)
            if not response.succeeded:
                error = f"platform reported status {response.status!r}"
    except (ValidationError, ExternalCallError) as e:
        error = f"{type(e).__name__}: {e}"

    if error is not None:
        logger.warning("Cohort %s failed: %s", cohort.index, error)

    return CohortOutcome(
        index=cohort.index,
        month_threshold=cohort.month_threshold,
        target=target,
        priced=priced,
        skipped=skipped,
        requests=requests,
        response=response,
        error=error,
        dry_run=dry_run,
    )


async def run_liquidation(
    gateway: SaleGateway,
    config: AppConfig,
    *,
    as_of: date | None = None,
    today: date | None = None,
) -> LiquidationReport:
    """
    Execute one liquidation run.

    Raises:
        ExternalCallError: the portfolio could not be fetched.
    """
    as_of = as_of or date.today()
    investor_id = config.investor.investor_id

    notes = NoteCollection(await gateway.fetch_notes(investor_id))
    selected = apply_filters(notes, config.filters)
    logger.info("Fetched %d notes, %d after filters", len(notes), len(selected))

    cohorts = partition_by_cohort(selected, config.cohorts.month_thresholds, as_of=as_of)
    targets = config.cohorts.targets(config.pricing)

    tasks = [
        asyncio.create_task(
            liquidate_cohort(
                gateway,
                investor_id,
                cohort,
                target,
                pricing=config.pricing,
                as_of=as_of,
                dry_run=config.run.dry_run,
                expiration_days=config.run.expiration_days,
                today=today,
            ),
            name=f"cohort-{cohort.index}",
        )
        for cohort, target in zip(cohorts, targets, strict=True)
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    outcomes: list[CohortOutcome] = []
    for cohort, target, result in zip(cohorts, targets, results, strict=True):
        if isinstance(result, BaseException):
            logger.error("Cohort %s raised unexpectedly", cohort.index, exc_info=result)
            outcomes.append(
                CohortOutcome(
                    index=cohort.index,
                    month_threshold=cohort.month_threshold,
                    target=target,
                    error=f"{type(result).__name__}: {result}",
                    dry_run=config.run.dry_run,
                )
            )
        else:
            outcomes.append(result)

    return LiquidationReport(investor_id=investor_id, as_of=as_of, dry_run=config.run.dry_run, cohorts=outcomes)
