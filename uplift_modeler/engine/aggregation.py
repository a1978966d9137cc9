"""
Domain aggregation: reduce a domain selection to one composite input record.

Every weighted field is a pageview-weighted mean over the selected domains.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np

from ..catalog import DomainCatalog, get_catalog
from ..models import AggregatedInputs, DomainRecord
from .benchmarks import BenchmarkTable, DeploymentTier, get_benchmarks

logger = logging.getLogger(__name__)


def select_domains(
    domain_ids: Iterable[str],
    pageview_overrides: Optional[Mapping[str, float]] = None,
    catalog: Optional[DomainCatalog] = None,
) -> List[DomainRecord]:
    """
    Resolve ids against the catalog.

    Unknown ids are ignored and duplicates count once. The result is in
    catalog order, so it does not depend on selection order.
    """
    catalog = catalog or get_catalog()
    wanted = set(domain_ids)
    unknown = wanted.difference(catalog.list_ids())
    if unknown:
        logger.debug("Ignoring unknown domain ids: %s", sorted(unknown))

    domains = []
    for domain in catalog.list_domains():
        if domain.id not in wanted:
            continue
        if pageview_overrides and domain.id in pageview_overrides:
            pageviews = float(pageview_overrides[domain.id])
            if pageviews < 0:
                raise ValueError(f"Pageview override for '{domain.id}' must be >= 0, got {pageviews}")
            domain = replace(domain, monthly_pageviews=pageviews)
        domains.append(domain)
    return domains


def pageview_weights(domains: List[DomainRecord]) -> Dict[str, float]:
    """Share of total pageviews per domain id (empty when there is no traffic)."""
    total = sum(d.monthly_pageviews for d in domains)
    if total <= 0:
        return {}
    return {d.id: d.monthly_pageviews / total for d in domains}


def default_composite(
    display_cpm: Optional[float] = None,
    video_cpm: Optional[float] = None,
    selected_domains: Optional[List[DomainRecord]] = None,
    table: Optional[BenchmarkTable] = None,
) -> AggregatedInputs:
    """Composite used when the selection carries no pageviews."""
    defaults = (table or get_benchmarks()).section("default_composite")
    return AggregatedInputs(
        total_monthly_pageviews=0.0,
        display_cpm=float(display_cpm if display_cpm is not None else defaults["display_cpm"]),
        video_cpm=float(video_cpm if video_cpm is not None else defaults["video_cpm"]),
        weighted_display_video_split=float(defaults["display_video_split"]),
        weighted_safari_share=float(defaults["safari_share"]),
        weighted_tech_savvy=float(defaults["tech_savvy"]),
        selected_domains=list(selected_domains or []),
    )


def aggregate_domain_inputs(
    domain_ids: Iterable[str],
    display_cpm: Optional[float] = None,
    video_cpm: Optional[float] = None,
    pageview_overrides: Optional[Mapping[str, float]] = None,
    catalog: Optional[DomainCatalog] = None,
    table: Optional[BenchmarkTable] = None,
) -> AggregatedInputs:
    """
    Aggregate selected domains into a pageview-weighted composite.

    Args:
        domain_ids: Catalog ids (unknown ids are ignored, may be empty)
        display_cpm: User-provided display CPM; weighted catalog CPM if None
        video_cpm: User-provided video CPM; weighted catalog CPM if None
        pageview_overrides: Domain id -> monthly pageviews replacing catalog values

    Returns:
        AggregatedInputs; the default composite when nothing with traffic is selected
    """
    domains = select_domains(domain_ids, pageview_overrides, catalog)
    total_pageviews = sum(d.monthly_pageviews for d in domains)

    if not domains or total_pageviews <= 0:
        return default_composite(display_cpm, video_cpm, domains, table)

    weights = np.array([d.monthly_pageviews for d in domains], dtype=float)

    def weighted(values: List[float]) -> float:
        arr = np.array(values, dtype=float)
        # Float rounding must not push the mean outside the raw range
        return float(np.clip(np.average(arr, weights=weights), arr.min(), arr.max()))

    return AggregatedInputs(
        total_monthly_pageviews=float(total_pageviews),
        display_cpm=float(display_cpm) if display_cpm is not None else weighted([d.display_cpm for d in domains]),
        video_cpm=float(video_cpm) if video_cpm is not None else weighted([d.video_cpm for d in domains]),
        weighted_display_video_split=weighted([d.display_video_split for d in domains]),
        weighted_safari_share=weighted([d.audience_profile.safari_share for d in domains]),
        weighted_tech_savvy=weighted([d.audience_profile.tech_savvy for d in domains]),
        selected_domains=domains,
    )


def deployment_tier_for(domain_count: int, table: Optional[BenchmarkTable] = None) -> DeploymentTier:
    """Step function: 0-1 domains single, up to the full threshold multi, then full."""
    table = table or get_benchmarks()
    full_threshold = int(table.value("deployment", "full_portfolio_min_domains"))
    if domain_count >= full_threshold:
        return DeploymentTier.FULL
    if domain_count >= 2:
        return DeploymentTier.MULTI
    return DeploymentTier.SINGLE
