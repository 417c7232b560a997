"""Aggregation helpers over settled transaction records."""
from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from revenue_engine.schemas.filters import PaymentBucket
from revenue_engine.schemas.report import (
    BUCKET_LABELS,
    BucketKey,
    CategoryBucket,
    ReportSnapshot,
    TransactionRecord,
    quantize_amount,
)
from revenue_engine.services.filters import BUCKET_CATEGORIES

BUCKET_TOLERANCE = Decimal("0.01")
ORDER_KINDS = frozenset({"ORDER"})

_CATEGORY_TO_BUCKET: dict[str, BucketKey] = {
    category: BucketKey(bucket.value)
    for bucket, categories in BUCKET_CATEGORIES.items()
    for category in categories
}


def bucket_for_category(category: str | None) -> BucketKey:
    if not category:
        return BucketKey.OTHER
    return _CATEGORY_TO_BUCKET.get(category.upper(), BucketKey.OTHER)


def categories_for_bucket(bucket: PaymentBucket) -> tuple[str, ...]:
    return BUCKET_CATEGORIES.get(bucket, ())


def commission_for_amount(amount: Decimal, rate: Decimal) -> Decimal:
    """Commission on a single amount; non-positive amounts carry none."""
    if amount <= 0:
        return Decimal("0.00")
    return quantize_amount(amount * rate)


def transaction_commission(record: TransactionRecord, fallback_rate: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(commission, net)`` for a row, using ``fallback_rate`` when upstream sent none."""

    amount = quantize_amount(record.amount)
    if record.commission is not None:
        commission = quantize_amount(record.commission)
    else:
        commission = commission_for_amount(amount, fallback_rate)
    return commission, amount - commission


def rebuild_buckets(records: Iterable[TransactionRecord]) -> tuple[CategoryBucket, ...]:
    """Recompute the four category buckets from payment records (orders are skipped)."""

    counts = {key: 0 for key in BucketKey}
    sums = {key: Decimal("0") for key in BucketKey}
    for record in records:
        if record.kind.upper() in ORDER_KINDS:
            continue
        key = bucket_for_category(record.kind)
        counts[key] += 1
        sums[key] += record.amount
    return tuple(
        CategoryBucket(key=key, label=BUCKET_LABELS[key], count=counts[key], amount_sum=sums[key])
        for key in BucketKey
    )


def check_consistency(snapshot: ReportSnapshot, *, tolerance: Decimal = BUCKET_TOLERANCE) -> list[str]:
    """List violated invariants of ``snapshot``; an empty list means consistent."""

    issues: list[str] = []
    bucket_total = sum((bucket.amount_sum for bucket in snapshot.buckets), Decimal("0"))
    payment_revenue = snapshot.summary.payment_revenue
    if abs(bucket_total - payment_revenue) > tolerance:
        issues.append(
            f"bucket total {quantize_amount(bucket_total)} differs from payment revenue "
            f"{quantize_amount(payment_revenue)}"
        )

    commission = snapshot.commission
    expected = quantize_amount(commission.gross_total * commission.rate)
    if commission.commission_total != expected:
        issues.append(f"commission {commission.commission_total} != round(gross * rate) {expected}")
    if commission.net_total != commission.gross_total - commission.commission_total:
        issues.append("net total does not equal gross minus commission")
    return issues


__all__ = [
    "BUCKET_TOLERANCE",
    "bucket_for_category",
    "categories_for_bucket",
    "check_consistency",
    "commission_for_amount",
    "rebuild_buckets",
    "transaction_commission",
]
