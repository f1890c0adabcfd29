# Overview: Customer purchase history derived from bills.

"""
Customer history (derived, never stored)

- A bill with a customer name or phone belongs to a "named" customer,
  keyed by phone when present, otherwise by name.
- Bills with neither are walk-ins, grouped per UTC day as
  "Anonymous (YYYY-MM-DD)".
- Named customers come first, then anonymous days; both in order of their
  most recent bill.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..extensions import db
from ..models import Bill
from ..money import from_cents
from ..time_utils import to_utc_z
from ..validation import optional_text


CUSTOMER_NAMED = "named"
CUSTOMER_ANONYMOUS = "anonymous"


@dataclass
class CustomerSummary:
    customer_name: str
    customer_phone: str
    customer_type: str
    last_visit: datetime
    total_bills: int = 0
    total_spent_cents: int = 0
    bills: list[Bill] = field(default_factory=list)

    def add(self, bill: Bill) -> None:
        self.total_bills += 1
        self.total_spent_cents += bill.total_cents or 0
        self.bills.append(bill)
        if bill.created_at > self.last_visit:
            self.last_visit = bill.created_at

    def to_dict(self) -> dict:
        return {
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "customer_type": self.customer_type,
            "total_bills": self.total_bills,
            "total_spent": from_cents(self.total_spent_cents),
            "last_visit": to_utc_z(self.last_visit),
            "bills": [
                {
                    "bill_id": bill.id,
                    "total": from_cents(bill.total_cents),
                    "created_at": to_utc_z(bill.created_at),
                    "payment_method": bill.payment_method or "cash",
                }
                for bill in self.bills
            ],
        }


def customer_history() -> list[CustomerSummary]:
    bills = db.session.query(Bill).order_by(Bill.created_at.desc(), Bill.id.desc()).all()

    named: dict[str, CustomerSummary] = {}
    anonymous: dict[str, CustomerSummary] = {}

    for bill in bills:
        name = optional_text(bill.customer_name)
        phone = optional_text(bill.customer_phone)

        if name or phone:
            key = phone or name
            if key not in named:
                named[key] = CustomerSummary(
                    customer_name=name or "N/A",
                    customer_phone=phone or "N/A",
                    customer_type=CUSTOMER_NAMED,
                    last_visit=bill.created_at,
                )
            named[key].add(bill)
        else:
            day = bill.created_at.strftime("%Y-%m-%d")
            if day not in anonymous:
                anonymous[day] = CustomerSummary(
                    customer_name=f"Anonymous ({day})",
                    customer_phone="Anonymous",
                    customer_type=CUSTOMER_ANONYMOUS,
                    last_visit=bill.created_at,
                )
            anonymous[day].add(bill)

    return list(named.values()) + list(anonymous.values())
