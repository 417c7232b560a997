"""Filter value objects for the revenue dashboard."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal


class Source(str, enum.Enum):
    ALL = "ALL"
    PAYMENTS = "PAYMENTS"
    ORDERS = "ORDERS"


class PaymentBucket(str, enum.Enum):
    ALL = "ALL"
    SUBSCRIPTIONS = "SUBSCRIPTIONS"
    COORDINATOR_EVENT_FEES = "COORDINATOR_EVENT_FEES"
    STUDENT_EVENT_FEES = "STUDENT_EVENT_FEES"
    OTHER = "OTHER"


class UserType(str, enum.Enum):
    ALL = "ALL"
    STUDENT = "STUDENT"
    COACH = "COACH"
    INSTITUTE = "INSTITUTE"
    CLUB = "CLUB"
    ADMIN = "ADMIN"


class ChipKey(str, enum.Enum):
    SOURCE = "source"
    BUCKET = "paymentBucket"
    USER_TYPE = "userType"
    QUERY = "query"
    AMOUNT = "amount"


@dataclass(slots=True, frozen=True)
class FilterState:
    """Every filter dimension of the dashboard as one immutable value."""

    date_range: str = "90"
    source: Source = Source.ALL
    bucket: PaymentBucket = PaymentBucket.ALL
    user_type: UserType = UserType.ALL
    query: str = ""
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None


@dataclass(slots=True, frozen=True)
class QueryDescriptor:
    """Canonical request descriptor; only non-default dimensions are carried."""

    date_range: str
    source: str | None = None
    payment_types: tuple[str, ...] = field(default_factory=tuple)
    user_types: tuple[str, ...] = field(default_factory=tuple)
    q: str | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None

    def to_params(self) -> dict[str, str]:
        params = {"dateRange": self.date_range}
        if self.source is not None:
            params["source"] = self.source
        if self.payment_types:
            params["paymentTypes"] = ",".join(self.payment_types)
        if self.user_types:
            params["userTypes"] = ",".join(self.user_types)
        if self.q is not None:
            params["q"] = self.q
        if self.min_amount is not None:
            params["minAmount"] = format(self.min_amount, "f")
        if self.max_amount is not None:
            params["maxAmount"] = format(self.max_amount, "f")
        return params


@dataclass(slots=True, frozen=True)
class FilterChip:
    key: ChipKey
    label: str


__all__ = [
    "ChipKey",
    "FilterChip",
    "FilterState",
    "PaymentBucket",
    "QueryDescriptor",
    "Source",
    "UserType",
]
