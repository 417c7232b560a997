"""Tabular sections shared by the CSV and spreadsheet report formatters.

Cells keep their native types: ``Decimal`` for currency, ``int`` for counts
and ``str`` for text (dates already rendered as ``YYYY-MM-DD``). Each
formatter decides how to serialize them.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Union

from revenue_engine.core.config import Settings
from revenue_engine.schemas.filters import FilterState
from revenue_engine.schemas.report import ReportSnapshot, quantize_amount
from revenue_engine.services.aggregation import transaction_commission
from revenue_engine.services.filters import date_range_label, describe_filters

Cell = Union[str, int, Decimal]


@dataclass(slots=True, frozen=True)
class ReportSection:
    key: str
    title: str
    sheet_name: str
    headers: tuple[str, ...]
    rows: tuple[tuple[Cell, ...], ...]
    column_widths: tuple[int, ...]
    optional: bool = False


def format_date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def format_timestamp(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "N/A"


def metadata_rows(
    snapshot: ReportSnapshot,
    filters: FilterState,
    *,
    settings: Settings,
    generated_at: datetime,
) -> tuple[tuple[str, str], ...]:
    return (
        ("Generated At", format_timestamp(generated_at)),
        ("Date Range", date_range_label(filters.date_range)),
        ("Applied Filters", describe_filters(filters, currency_symbol=settings.currency_symbol)),
        ("Data Last Updated", format_timestamp(snapshot.last_updated_at)),
    )


def _summary(snapshot: ReportSnapshot) -> ReportSection:
    summary = snapshot.summary
    commission = snapshot.commission
    return ReportSection(
        key="summary",
        title="SUMMARY",
        sheet_name="Summary",
        headers=("Metric", "Value"),
        rows=(
            ("Gross Revenue", commission.gross_total),
            ("Commission Rate (%)", commission.rate * 100),
            ("Commission", commission.commission_total),
            ("Net Revenue", commission.net_total),
            ("Order Revenue", summary.order_revenue),
            ("Payment Revenue", summary.payment_revenue),
            ("Premium Members", summary.premium_member_count),
            ("Event Payment Revenue", snapshot.event_payments.total_amount or summary.event_payment_revenue),
            ("Active Memberships", snapshot.membership.total),
        ),
        column_widths=(28, 18),
    )


def _categories(snapshot: ReportSnapshot) -> ReportSection:
    return ReportSection(
        key="categories",
        title="REVENUE BY CATEGORY",
        sheet_name="By Category",
        headers=("Category", "Transactions", "Amount"),
        rows=tuple((bucket.display_label, bucket.count, bucket.amount_sum) for bucket in snapshot.buckets),
        column_widths=(28, 14, 16),
    )


def _breakdowns(snapshot: ReportSnapshot) -> list[ReportSection]:
    breakdowns = snapshot.breakdowns
    return [
        ReportSection(
            key="by_user",
            title="INDIVIDUAL BREAKDOWN - SUBSCRIPTIONS",
            sheet_name="Subscriptions",
            headers=("Name", "User Type", "Email", "Unique ID", "Payments", "Total Amount"),
            rows=tuple(
                (row.name, row.user_type, row.email, row.unique_id, row.count, row.total_amount)
                for row in breakdowns.by_user
            ),
            column_widths=(28, 14, 32, 18, 12, 16),
            optional=True,
        ),
        ReportSection(
            key="by_coordinator_event",
            title="INDIVIDUAL BREAKDOWN - COORDINATOR EVENT FEES",
            sheet_name="Coordinator Event Fees",
            headers=("Coordinator", "Event", "Payments", "Total Amount"),
            rows=tuple(
                (row.coordinator_name, row.event_name, row.count, row.total_amount)
                for row in breakdowns.by_coordinator_event
            ),
            column_widths=(28, 36, 12, 16),
            optional=True,
        ),
        ReportSection(
            key="by_athlete_event",
            title="INDIVIDUAL BREAKDOWN - ATHLETE EVENT FEES",
            sheet_name="Athlete Event Fees",
            headers=("Athlete", "Event", "Payments", "Total Amount"),
            rows=tuple(
                (row.athlete_name, row.event_name, row.count, row.total_amount)
                for row in breakdowns.by_athlete_event
            ),
            column_widths=(28, 36, 12, 16),
            optional=True,
        ),
    ]


def _event_wise(snapshot: ReportSnapshot) -> ReportSection:
    return ReportSection(
        key="event_wise",
        title="EVENT-WISE REVENUE",
        sheet_name="Event-wise",
        headers=("Event", "Sport", "Orders", "Payments", "Revenue"),
        rows=tuple(
            (row.event_name, row.sport, row.orders, row.payments, row.total_amount)
            for row in snapshot.event_wise_revenue
        ),
        column_widths=(36, 18, 10, 10, 16),
    )


def _premium_members(snapshot: ReportSnapshot) -> ReportSection:
    return ReportSection(
        key="premium_members",
        title="PREMIUM MEMBERS",
        sheet_name="Premium Members",
        headers=(
            "Name",
            "Unique ID",
            "Email",
            "Phone",
            "Subscription",
            "Expires",
            "Days Left",
            "Sport",
            "Students",
        ),
        rows=tuple(
            (
                member.name,
                member.unique_id,
                member.email,
                member.phone,
                member.subscription_type,
                format_date(member.subscription_expires_at),
                "" if member.days_until_expiry is None else member.days_until_expiry,
                member.primary_sport,
                member.total_students,
            )
            for member in snapshot.premium_members
        ),
        column_widths=(28, 18, 32, 16, 14, 12, 10, 18, 10),
        optional=True,
    )


def _top_spenders(snapshot: ReportSnapshot) -> ReportSection:
    return ReportSection(
        key="top_spenders",
        title="TOP SPENDERS",
        sheet_name="Top Spenders",
        headers=("Rank", "Name", "Email", "Unique ID", "Orders", "Total Spent"),
        rows=tuple(
            (rank, spender.name, spender.email, spender.unique_id, spender.order_count, spender.total_spent)
            for rank, spender in snapshot.ranked_top_spenders()
        ),
        column_widths=(8, 28, 32, 18, 10, 16),
    )


def _transactions(snapshot: ReportSnapshot, settings: Settings) -> ReportSection:
    rows = []
    for record in snapshot.latest_transactions(settings.recent_transactions_limit):
        commission, net = transaction_commission(record, settings.fallback_commission_rate)
        rows.append(
            (
                format_date(record.date),
                record.kind,
                record.description,
                record.customer.name,
                record.customer.type,
                record.event_name,
                record.status,
                quantize_amount(record.amount),
                commission,
                net,
            )
        )
    return ReportSection(
        key="transactions",
        title="RECENT TRANSACTIONS",
        sheet_name="Transactions",
        headers=(
            "Date",
            "Type",
            "Description",
            "Customer",
            "Customer Type",
            "Event",
            "Status",
            "Amount",
            "Commission",
            "Net",
        ),
        rows=tuple(rows),
        column_widths=(12, 22, 48, 26, 14, 30, 12, 14, 14, 14),
    )


def build_sections(snapshot: ReportSnapshot, *, settings: Settings) -> list[ReportSection]:
    """All data sections in report order."""
    return [
        _summary(snapshot),
        _categories(snapshot),
        *_breakdowns(snapshot),
        _event_wise(snapshot),
        _premium_members(snapshot),
        _top_spenders(snapshot),
        _transactions(snapshot, settings),
    ]


__all__ = [
    "Cell",
    "ReportSection",
    "build_sections",
    "format_date",
    "format_timestamp",
    "metadata_rows",
]
