"""Headline numbers and chart series for the dashboard screen."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from imobcrm.core.formatters import LEAD_SOURCE_LABELS
from imobcrm.core.models import Lead, LeadStatus, Property, PropertyStatus
from imobcrm.crm.leads import sort_leads
from imobcrm.crm.properties import sort_properties

__all__ = ["LATEST_COUNT", "ChartSeries", "DashboardSummary", "build_dashboard"]

#: How many of the newest leads / properties the dashboard lists.
LATEST_COUNT: int = 3

_STATUS_CHART_LABELS: tuple[tuple[LeadStatus, str], ...] = (
    (LeadStatus.COLD, "Frios"),
    (LeadStatus.WARM, "Mornos"),
    (LeadStatus.HOT, "Quentes"),
)


@dataclass(frozen=True)
class ChartSeries:
    """Parallel label / value lists for one chart."""

    labels: list[str] = field(default_factory=list)
    values: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardSummary:
    """Everything the dashboard shows for the visible leads and properties.

    Attributes:
        total_leads: Number of leads.
        cold_leads: Leads with status ``cold``.
        warm_leads: Leads with status ``warm``.
        hot_leads: Leads with status ``hot``.
        total_properties: Number of properties.
        available_properties: Properties with status ``available``.
        latest_leads: Up to :data:`LATEST_COUNT` newest leads.
        latest_properties: Up to :data:`LATEST_COUNT` newest properties.
        lead_status_chart: Cold / warm / hot counts.
        lead_source_chart: Count per source, for sources that occur, in
            first-seen order.
    """

    total_leads: int
    cold_leads: int
    warm_leads: int
    hot_leads: int
    total_properties: int
    available_properties: int
    latest_leads: list[Lead]
    latest_properties: list[Property]
    lead_status_chart: ChartSeries
    lead_source_chart: ChartSeries


def build_dashboard(leads: Sequence[Lead], properties: Sequence[Property]) -> DashboardSummary:
    """Summarise *leads* and *properties* for the dashboard."""
    by_status = {status: sum(1 for lead in leads if lead.status is status) for status in LeadStatus}

    by_source: dict[str, int] = {}
    for lead in leads:
        label = LEAD_SOURCE_LABELS.get(lead.source, str(lead.source))
        by_source[label] = by_source.get(label, 0) + 1

    return DashboardSummary(
        total_leads=len(leads),
        cold_leads=by_status[LeadStatus.COLD],
        warm_leads=by_status[LeadStatus.WARM],
        hot_leads=by_status[LeadStatus.HOT],
        total_properties=len(properties),
        available_properties=sum(
            1 for prop in properties if prop.status is PropertyStatus.AVAILABLE
        ),
        latest_leads=sort_leads(leads, "newest")[:LATEST_COUNT],
        latest_properties=sort_properties(properties, "newest")[:LATEST_COUNT],
        lead_status_chart=ChartSeries(
            labels=[label for _, label in _STATUS_CHART_LABELS],
            values=[by_status[status] for status, _ in _STATUS_CHART_LABELS],
        ),
        lead_source_chart=ChartSeries(
            labels=list(by_source),
            values=list(by_source.values()),
        ),
    )
