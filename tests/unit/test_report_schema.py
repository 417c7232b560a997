from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest
from pydantic import ValidationError as PydanticValidationError

from revenue_engine.schemas import BucketKey, CommissionSummary, ReportSnapshot, TransactionRecord
from revenue_engine.services.aggregation import (
    bucket_for_category,
    check_consistency,
    commission_for_amount,
    rebuild_buckets,
    transaction_commission,
)


def test_missing_sections_render_as_empty_state() -> None:
    snapshot = ReportSnapshot.model_validate(
        {
            "summary": None,
            "topSpenders": None,
            "breakdowns": {"byUser": None},
            "recentTransactions": [{"amount": None, "customer": None}],
        }
    )

    assert snapshot.summary.payment_revenue == Decimal("0")
    assert snapshot.top_spenders == ()
    assert snapshot.breakdowns.by_user == ()
    assert [bucket.key for bucket in snapshot.buckets] == list(BucketKey)
    assert all(bucket.amount_sum == 0 for bucket in snapshot.buckets)
    assert snapshot.recent_transactions[0].customer.name == ""
    assert snapshot.last_updated_at is None


def test_empty_document_is_a_valid_snapshot() -> None:
    snapshot = ReportSnapshot.model_validate({})
    assert len(snapshot.buckets) == 4
    assert check_consistency(snapshot) == []


def test_snapshot_is_immutable(sample_snapshot: ReportSnapshot) -> None:
    with pytest.raises(Exception):
        sample_snapshot.summary = None  # type: ignore[misc]


def test_buckets_sum_to_payment_revenue(sample_snapshot: ReportSnapshot) -> None:
    total = sum(bucket.amount_sum for bucket in sample_snapshot.buckets)
    assert abs(total - sample_snapshot.summary.payment_revenue) <= Decimal("0.01")
    assert sample_snapshot.bucket(BucketKey.OTHER).display_label == "Other"
    assert check_consistency(sample_snapshot) == []


def test_bucket_mismatch_is_reported(sample_payload: dict[str, Any]) -> None:
    sample_payload["data"]["summary"]["paymentRevenue"] = 9000
    snapshot = ReportSnapshot.model_validate(sample_payload["data"])
    issues = check_consistency(snapshot)
    assert len(issues) == 1
    assert "payment revenue" in issues[0]


@pytest.mark.parametrize(
    ("gross", "rate", "commission", "net"),
    [
        (20000, "0.025", "500.00", "19500.00"),
        (101, "0.025", "2.53", "98.47"),
        ("0.1", "0.05", "0.01", "0.09"),
        (0, "0.025", "0.00", "0.00"),
    ],
)
def test_commission_is_derived_from_gross_and_rate(gross: Any, rate: str, commission: str, net: str) -> None:
    summary = CommissionSummary.model_validate(
        {"grossTotal": gross, "rate": rate, "commissionTotal": 1, "netTotal": 1}
    )
    assert summary.commission_total == Decimal(commission)
    assert summary.net_total == Decimal(net)
    assert summary.net_total == summary.gross_total - summary.commission_total


def test_commission_gross_defaults_to_total_revenue() -> None:
    snapshot = ReportSnapshot.model_validate({"summary": {"totalRevenue": 400}, "commission": {"rate": 0.025}})
    assert snapshot.commission.gross_total == Decimal("400.00")
    assert snapshot.commission.commission_total == Decimal("10.00")


def test_top_spenders_are_ranked_descending(sample_snapshot: ReportSnapshot) -> None:
    ranked = [(rank, spender.name) for rank, spender in sample_snapshot.ranked_top_spenders()]
    assert ranked == [(1, "B"), (2, "A")]


def test_latest_transactions_are_newest_first_and_bounded(sample_snapshot: ReportSnapshot) -> None:
    assert [record.id for record in sample_snapshot.latest_transactions(20)] == ["txn-1", "txn-2"]
    assert [record.id for record in sample_snapshot.latest_transactions(1)] == ["txn-1"]


def test_transaction_commission_uses_fallback_rate_only_when_missing(sample_snapshot: ReportSnapshot) -> None:
    by_id = {record.id: record for record in sample_snapshot.recent_transactions}
    assert transaction_commission(by_id["txn-1"], Decimal("0.025")) == (Decimal("25.00"), Decimal("975.00"))
    assert transaction_commission(by_id["txn-2"], Decimal("0.025")) == (Decimal("10.00"), Decimal("2490.50"))


def test_non_positive_amounts_carry_no_commission() -> None:
    assert commission_for_amount(Decimal("-50"), Decimal("0.025")) == Decimal("0.00")
    assert commission_for_amount(Decimal("0"), Decimal("0.025")) == Decimal("0.00")


def test_commission_rounds_half_away_from_zero() -> None:
    assert commission_for_amount(Decimal("0.20"), Decimal("0.025")) == Decimal("0.01")


def test_category_to_bucket_mapping() -> None:
    assert bucket_for_category("subscription_annual") is BucketKey.SUBSCRIPTIONS
    assert bucket_for_category("EVENT_FEE") is BucketKey.COORDINATOR_EVENT_FEES
    assert bucket_for_category("EVENT_STUDENT_FEE") is BucketKey.STUDENT_EVENT_FEES
    assert bucket_for_category("DONATION") is BucketKey.OTHER
    assert bucket_for_category(None) is BucketKey.OTHER


def test_rebuild_buckets_skips_orders() -> None:
    records = [
        TransactionRecord(kind="ORDER", amount=Decimal("900")),
        TransactionRecord(kind="SUBSCRIPTION", amount=Decimal("300")),
        TransactionRecord(kind="EVENT_STUDENT_FEE", amount=Decimal("50")),
        TransactionRecord(kind="EVENT_STUDENT_FEE", amount=Decimal("25.5")),
        TransactionRecord(kind="MISC", amount=Decimal("10")),
    ]
    buckets = {bucket.key: bucket for bucket in rebuild_buckets(records)}

    assert buckets[BucketKey.SUBSCRIPTIONS].amount_sum == Decimal("300")
    assert buckets[BucketKey.STUDENT_EVENT_FEES].count == 2
    assert buckets[BucketKey.STUDENT_EVENT_FEES].amount_sum == Decimal("75.5")
    assert buckets[BucketKey.COORDINATOR_EVENT_FEES].count == 0
    assert buckets[BucketKey.OTHER].amount_sum == Decimal("10")


def test_buckets_are_read_from_summary_payment_buckets() -> None:
    snapshot = ReportSnapshot.model_validate(
        {
            "summary": {
                "paymentRevenue": 300,
                "paymentBuckets": {
                    "subscriptions": {"count": 2, "amount": 200},
                    "coordinatorEventFees": {"count": 1, "amount": 75.5},
                    "studentEventFees": {"count": 1, "amount": 24.5},
                },
            }
        }
    )

    assert snapshot.bucket(BucketKey.SUBSCRIPTIONS).amount_sum == Decimal("200")
    assert snapshot.bucket(BucketKey.COORDINATOR_EVENT_FEES).count == 1
    assert snapshot.bucket(BucketKey.OTHER).amount_sum == Decimal("0")
    assert sum(bucket.amount_sum for bucket in snapshot.buckets) == Decimal("300")
    assert check_consistency(snapshot) == []


def test_top_level_buckets_win_over_summary_payment_buckets() -> None:
    snapshot = ReportSnapshot.model_validate(
        {
            "summary": {"paymentBuckets": {"subscriptions": {"count": 9, "amount": 999}}},
            "buckets": [{"key": "SUBSCRIPTIONS", "count": 1, "amountSum": 10}],
        }
    )

    assert snapshot.bucket(BucketKey.SUBSCRIPTIONS).amount_sum == Decimal("10")


@pytest.mark.parametrize("rate", [float("inf"), float("nan"), "1e999999"])
def test_non_finite_commission_rate_is_a_validation_error(rate: Any) -> None:
    with pytest.raises(PydanticValidationError):
        CommissionSummary.model_validate({"grossTotal": 100, "rate": rate})


def test_premium_members_and_revenue_blocks(sample_snapshot: ReportSnapshot) -> None:
    member = sample_snapshot.premium_members[0]

    assert member.subscription_type == "ANNUAL"
    assert member.days_until_expiry == 177
    assert member.subscription_expires_at is not None
    assert sample_snapshot.membership.total == 5
    assert sample_snapshot.event_payments.total_amount == Decimal("1500")
    assert ReportSnapshot().premium_members == ()
