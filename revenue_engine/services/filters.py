"""Filter composition: FilterState transitions, query descriptors and chips."""
from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from revenue_engine.core.errors import ValidationError
from revenue_engine.schemas.filters import (
    ChipKey,
    FilterChip,
    FilterState,
    PaymentBucket,
    QueryDescriptor,
    Source,
    UserType,
)

YEAR_TO_DATE = "ytd"
ALL_TIME = "all-time"
ALL_TIME_DAYS = 10000

BUCKET_CATEGORIES: dict[PaymentBucket, tuple[str, ...]] = {
    PaymentBucket.SUBSCRIPTIONS: (
        "REGISTRATION",
        "SUBSCRIPTION",
        "SUBSCRIPTION_MONTHLY",
        "SUBSCRIPTION_ANNUAL",
    ),
    PaymentBucket.COORDINATOR_EVENT_FEES: ("EVENT_REGISTRATION", "EVENT_FEE"),
    PaymentBucket.STUDENT_EVENT_FEES: ("EVENT_STUDENT_FEE",),
}

_ENUM_FIELDS: dict[str, type[Any]] = {
    "source": Source,
    "bucket": PaymentBucket,
    "user_type": UserType,
}


def normalize_date_range(value: str | int) -> str:
    """Return the canonical form of a date range or raise ``ValidationError``."""

    text = str(value).strip().lower()
    if text == YEAR_TO_DATE:
        return YEAR_TO_DATE
    if text in {ALL_TIME, "all", str(ALL_TIME_DAYS)}:
        return ALL_TIME
    if not text.isdigit():
        raise ValidationError(f"Unsupported date range '{value}'", field="date_range")
    days = int(text)
    if days < 1 or days > ALL_TIME_DAYS:
        raise ValidationError(f"Date range must be between 1 and {ALL_TIME_DAYS} days", field="date_range")
    return str(days)


def date_range_label(date_range: str) -> str:
    canonical = normalize_date_range(date_range)
    if canonical == YEAR_TO_DATE:
        return "Year to Date"
    if canonical == ALL_TIME:
        return "All Time"
    if canonical == "1":
        return "Last 24 Hours"
    return f"Last {canonical} days"


def date_range_days(date_range: str, *, today: date | None = None) -> int:
    """Number of days the window spans, counting today."""

    canonical = normalize_date_range(date_range)
    if canonical == ALL_TIME:
        return ALL_TIME_DAYS
    if canonical == YEAR_TO_DATE:
        current = today or date.today()
        return (current - date(current.year, 1, 1)).days + 1
    return int(canonical)


def parse_amount(value: Decimal | int | float | str | None, *, field: str) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"{field} must be a number", field=field) from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    return amount


def transition(state: FilterState, **changes: Any) -> FilterState:
    """Return a new FilterState with ``changes`` applied; the input is never mutated."""

    unknown = set(changes) - {f.name for f in dataclasses.fields(FilterState)}
    if unknown:
        raise ValidationError(f"Unknown filter dimension(s): {', '.join(sorted(unknown))}")

    coerced: dict[str, Any] = {}
    for name, value in changes.items():
        if name in _ENUM_FIELDS:
            enum_type = _ENUM_FIELDS[name]
            try:
                coerced[name] = enum_type(str(value).upper())
            except ValueError as exc:
                raise ValidationError(f"Unsupported {name} '{value}'", field=name) from exc
        elif name in {"min_amount", "max_amount"}:
            coerced[name] = parse_amount(value, field=name)
        elif name == "date_range":
            coerced[name] = normalize_date_range(value)
        else:
            coerced[name] = "" if value is None else str(value)
    return dataclasses.replace(state, **coerced)


def validate_filters(state: FilterState) -> None:
    normalize_date_range(state.date_range)
    for name in ("min_amount", "max_amount"):
        amount = getattr(state, name)
        if amount is not None and amount < 0:
            raise ValidationError(f"{name} must not be negative", field=name)
    if state.min_amount is not None and state.max_amount is not None and state.min_amount > state.max_amount:
        raise ValidationError("minAmount must be less than or equal to maxAmount", field="min_amount")


def compose_descriptor(state: FilterState) -> QueryDescriptor:
    """Validate ``state`` and build the canonical request descriptor."""

    validate_filters(state)
    canonical_range = normalize_date_range(state.date_range)
    query = state.query.strip()
    return QueryDescriptor(
        date_range=str(ALL_TIME_DAYS) if canonical_range == ALL_TIME else canonical_range,
        source=state.source.value if state.source is not Source.ALL else None,
        payment_types=BUCKET_CATEGORIES.get(state.bucket, ()),
        user_types=(state.user_type.value,) if state.user_type is not UserType.ALL else (),
        q=query or None,
        min_amount=state.min_amount,
        max_amount=state.max_amount,
    )


def _format_bound(amount: Decimal | None, currency_symbol: str) -> str:
    if amount is None:
        return "—"
    return f"{currency_symbol}{format(amount, 'f')}"


def active_chips(state: FilterState, *, currency_symbol: str = "₹") -> list[FilterChip]:
    chips: list[FilterChip] = []
    if state.source is not Source.ALL:
        chips.append(FilterChip(ChipKey.SOURCE, f"Source: {state.source.value}"))
    if state.bucket is not PaymentBucket.ALL:
        chips.append(FilterChip(ChipKey.BUCKET, f"Bucket: {state.bucket.value}"))
    if state.user_type is not UserType.ALL:
        chips.append(FilterChip(ChipKey.USER_TYPE, f"User: {state.user_type.value}"))
    if state.query.strip():
        chips.append(FilterChip(ChipKey.QUERY, f"Search: {state.query.strip()}"))
    if state.min_amount is not None or state.max_amount is not None:
        low = _format_bound(state.min_amount, currency_symbol)
        high = _format_bound(state.max_amount, currency_symbol)
        chips.append(FilterChip(ChipKey.AMOUNT, f"Amount: {low}–{high}"))
    return chips


def clear_chip(state: FilterState, key: ChipKey | str) -> FilterState:
    """Reset exactly the dimension behind ``key`` to its default."""

    try:
        chip = ChipKey(key)
    except ValueError as exc:
        raise ValidationError(f"Unknown filter chip '{key}'") from exc
    if chip is ChipKey.SOURCE:
        return dataclasses.replace(state, source=Source.ALL)
    if chip is ChipKey.BUCKET:
        return dataclasses.replace(state, bucket=PaymentBucket.ALL)
    if chip is ChipKey.USER_TYPE:
        return dataclasses.replace(state, user_type=UserType.ALL)
    if chip is ChipKey.QUERY:
        return dataclasses.replace(state, query="")
    return dataclasses.replace(state, min_amount=None, max_amount=None)


def describe_filters(state: FilterState, *, currency_symbol: str = "₹") -> str:
    chips = active_chips(state, currency_symbol=currency_symbol)
    if not chips:
        return "None"
    return "; ".join(chip.label for chip in chips)


__all__ = [
    "ALL_TIME",
    "ALL_TIME_DAYS",
    "BUCKET_CATEGORIES",
    "YEAR_TO_DATE",
    "active_chips",
    "clear_chip",
    "compose_descriptor",
    "date_range_days",
    "date_range_label",
    "describe_filters",
    "normalize_date_range",
    "parse_amount",
    "transition",
    "validate_filters",
]
