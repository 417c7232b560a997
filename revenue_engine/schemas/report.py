"""Pydantic schemas for the revenue report document."""
from __future__ import annotations

import enum
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

CENT = Decimal("0.01")


def quantize_amount(value: Decimal | float | int | None) -> Decimal:
    """Round a currency figure to two decimals, half away from zero."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class ReportModel(BaseModel):
    """Base model for report sections; every field tolerates null or absence."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class BucketKey(str, enum.Enum):
    SUBSCRIPTIONS = "SUBSCRIPTIONS"
    COORDINATOR_EVENT_FEES = "COORDINATOR_EVENT_FEES"
    STUDENT_EVENT_FEES = "STUDENT_EVENT_FEES"
    OTHER = "OTHER"


BUCKET_LABELS: dict[BucketKey, str] = {
    BucketKey.SUBSCRIPTIONS: "Subscriptions",
    BucketKey.COORDINATOR_EVENT_FEES: "Coordinator Event Fees",
    BucketKey.STUDENT_EVENT_FEES: "Student Event Fees",
    BucketKey.OTHER: "Other",
}


class CustomerInfo(ReportModel):
    name: str = ""
    type: str = ""
    email: str = ""
    unique_id: str = ""


class TransactionRecord(ReportModel):
    """A settled order or payment as reported by the API."""

    id: str = ""
    kind: str = Field(default="", alias="type")
    status: str = ""
    amount: Decimal = Decimal("0")
    date: datetime | None = None
    description: str = ""
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    event_name: str = ""
    sport: str = ""
    commission: Decimal | None = None


class CategoryBucket(ReportModel):
    key: BucketKey = BucketKey.OTHER
    label: str = ""
    count: int = 0
    amount_sum: Decimal = Decimal("0")

    @property
    def display_label(self) -> str:
        return self.label or BUCKET_LABELS[self.key]


class CommissionSummary(ReportModel):
    """Aggregate commission figures; commission and net are derived from gross and rate."""

    rate: Decimal = Decimal("0")
    gross_total: Decimal = Decimal("0")
    commission_total: Decimal = Decimal("0")
    net_total: Decimal = Decimal("0")

    @model_validator(mode="before")
    @classmethod
    def _derive_totals(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload = {key: value for key, value in data.items() if value is not None}
        try:
            rate = Decimal(str(payload.get("rate", 0)))
            gross = quantize_amount(payload.get("grossTotal", payload.get("gross_total", 0)))
            if not (rate.is_finite() and gross.is_finite()):
                raise ValueError("commission figures must be finite")
            commission = quantize_amount(gross * rate)
        except ArithmeticError as exc:
            raise ValueError("commission figures must be finite numbers") from exc
        payload.pop("commissionTotal", None)
        payload.pop("netTotal", None)
        payload.pop("grossTotal", None)
        payload.update(
            rate=rate,
            gross_total=gross,
            commission_total=commission,
            net_total=gross - commission,
        )
        return payload


class RevenueSummary(ReportModel):
    total_revenue: Decimal = Decimal("0")
    order_revenue: Decimal = Decimal("0")
    payment_revenue: Decimal = Decimal("0")
    event_payment_revenue: Decimal = Decimal("0")
    total_orders: int = 0
    total_payments: int = 0
    premium_member_count: int = 0


class DailyPoint(ReportModel):
    date: str = ""
    label: str = ""
    revenue: Decimal = Decimal("0")
    orders: int = 0
    payments: int = 0


class UserBreakdownRow(ReportModel):
    name: str = ""
    user_type: str = ""
    email: str = ""
    unique_id: str = ""
    count: int = 0
    total_amount: Decimal = Decimal("0")


class CoordinatorEventRow(ReportModel):
    coordinator_name: str = ""
    event_name: str = ""
    count: int = 0
    total_amount: Decimal = Decimal("0")


class AthleteEventRow(ReportModel):
    athlete_name: str = ""
    event_name: str = ""
    count: int = 0
    total_amount: Decimal = Decimal("0")


class Breakdowns(ReportModel):
    by_user: tuple[UserBreakdownRow, ...] = ()
    by_coordinator_event: tuple[CoordinatorEventRow, ...] = ()
    by_athlete_event: tuple[AthleteEventRow, ...] = ()


class EventRevenueRow(ReportModel):
    event_name: str = ""
    sport: str = ""
    orders: int = 0
    payments: int = 0
    total_amount: Decimal = Decimal("0")


class TopSpender(ReportModel):
    name: str = ""
    email: str = ""
    unique_id: str = ""
    order_count: int = 0
    total_spent: Decimal = Decimal("0")


class PremiumMember(ReportModel):
    """A coach holding a paid subscription."""

    id: str = ""
    name: str = ""
    unique_id: str = ""
    email: str = ""
    phone: str = ""
    subscription_type: str = ""
    subscription_expires_at: datetime | None = None
    days_until_expiry: int | None = None
    primary_sport: str = ""
    city: str = ""
    total_students: int = 0


class MembershipCounts(ReportModel):
    coaches: int = 0
    institutes: int = 0
    clubs: int = 0
    total: int = 0


class EventPaymentTotals(ReportModel):
    total_payments: int = 0
    total_amount: Decimal = Decimal("0")


# summary.paymentBuckets keys used by the dashboard endpoint
PAYMENT_BUCKET_KEYS: dict[str, BucketKey] = {
    "subscriptions": BucketKey.SUBSCRIPTIONS,
    "coordinatorEventFees": BucketKey.COORDINATOR_EVENT_FEES,
    "studentEventFees": BucketKey.STUDENT_EVENT_FEES,
    "other": BucketKey.OTHER,
}


class ReportSnapshot(ReportModel):
    """One complete, immutable aggregation result for a filter descriptor."""

    summary: RevenueSummary = Field(default_factory=RevenueSummary)
    commission: CommissionSummary = Field(default_factory=CommissionSummary)
    buckets: tuple[CategoryBucket, ...] = Field(default=(), validate_default=True)
    breakdowns: Breakdowns = Field(default_factory=Breakdowns)
    daily_revenue: tuple[DailyPoint, ...] = ()
    top_spenders: tuple[TopSpender, ...] = ()
    recent_transactions: tuple[TransactionRecord, ...] = ()
    event_wise_revenue: tuple[EventRevenueRow, ...] = ()
    premium_members: tuple[PremiumMember, ...] = ()
    membership: MembershipCounts = Field(default_factory=MembershipCounts)
    event_payments: EventPaymentTotals = Field(default_factory=EventPaymentTotals)
    last_updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _buckets_from_summary(cls, data: Any) -> Any:
        """Read ``summary.paymentBuckets`` when no top-level ``buckets`` array is sent."""

        if not isinstance(data, dict) or data.get("buckets"):
            return data
        summary = data.get("summary")
        if not isinstance(summary, dict) or not isinstance(summary.get("paymentBuckets"), dict):
            return data
        buckets = []
        for name, entry in summary["paymentBuckets"].items():
            if name not in PAYMENT_BUCKET_KEYS or not isinstance(entry, dict):
                continue
            key = PAYMENT_BUCKET_KEYS[name]
            buckets.append(
                {
                    "key": key.value,
                    "label": entry.get("label") or BUCKET_LABELS[key],
                    "count": entry.get("count"),
                    "amountSum": entry.get("amount", entry.get("amountSum")),
                }
            )
        return {**data, "buckets": buckets}

    @model_validator(mode="before")
    @classmethod
    def _default_commission_gross(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        summary = data.get("summary") or {}
        commission = data.get("commission") or {}
        if not isinstance(summary, dict) or not isinstance(commission, dict):
            return data
        has_gross = commission.get("grossTotal") is not None or commission.get("gross_total") is not None
        total = summary.get("totalRevenue", summary.get("total_revenue"))
        if not has_gross and total is not None:
            data = {**data, "commission": {**commission, "grossTotal": total}}
        return data

    @field_validator("buckets", mode="after")
    @classmethod
    def _complete_buckets(cls, buckets: tuple[CategoryBucket, ...]) -> tuple[CategoryBucket, ...]:
        by_key = {bucket.key: bucket for bucket in buckets}
        return tuple(
            by_key.get(key) or CategoryBucket(key=key, label=BUCKET_LABELS[key]) for key in BucketKey
        )

    def bucket(self, key: BucketKey) -> CategoryBucket:
        return next(bucket for bucket in self.buckets if bucket.key == key)

    def ranked_top_spenders(self) -> list[tuple[int, TopSpender]]:
        ordered = sorted(self.top_spenders, key=lambda spender: spender.total_spent, reverse=True)
        return list(enumerate(ordered, start=1))

    def latest_transactions(self, limit: int) -> list[TransactionRecord]:
        dated = sorted(
            self.recent_transactions,
            key=lambda record: record.date.timestamp() if record.date else float("-inf"),
            reverse=True,
        )
        return dated[:limit]


__all__ = [
    "BUCKET_LABELS",
    "AthleteEventRow",
    "Breakdowns",
    "BucketKey",
    "CategoryBucket",
    "CommissionSummary",
    "CoordinatorEventRow",
    "CustomerInfo",
    "DailyPoint",
    "EventPaymentTotals",
    "EventRevenueRow",
    "MembershipCounts",
    "PAYMENT_BUCKET_KEYS",
    "PremiumMember",
    "ReportSnapshot",
    "RevenueSummary",
    "TopSpender",
    "TransactionRecord",
    "UserBreakdownRow",
    "quantize_amount",
]
