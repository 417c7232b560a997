"""Pydantic schemas and filter value objects."""

from .filters import ChipKey, FilterChip, FilterState, PaymentBucket, QueryDescriptor, Source, UserType
from .report import (
    BUCKET_LABELS,
    AthleteEventRow,
    Breakdowns,
    BucketKey,
    CategoryBucket,
    CommissionSummary,
    CoordinatorEventRow,
    CustomerInfo,
    DailyPoint,
    EventPaymentTotals,
    EventRevenueRow,
    MembershipCounts,
    PremiumMember,
    ReportSnapshot,
    RevenueSummary,
    TopSpender,
    TransactionRecord,
    UserBreakdownRow,
    quantize_amount,
)

__all__ = [
    "BUCKET_LABELS",
    "AthleteEventRow",
    "Breakdowns",
    "BucketKey",
    "CategoryBucket",
    "ChipKey",
    "CommissionSummary",
    "CoordinatorEventRow",
    "CustomerInfo",
    "DailyPoint",
    "EventPaymentTotals",
    "EventRevenueRow",
    "FilterChip",
    "FilterState",
    "MembershipCounts",
    "PaymentBucket",
    "PremiumMember",
    "QueryDescriptor",
    "ReportSnapshot",
    "RevenueSummary",
    "Source",
    "TopSpender",
    "TransactionRecord",
    "UserBreakdownRow",
    "UserType",
    "quantize_amount",
]
