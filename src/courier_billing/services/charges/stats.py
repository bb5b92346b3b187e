"""Dashboard statistics over charge records."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...models.domain import ChargeStatus, utcnow
from ...persistence import ChargeRepository, DateRange
from .periods import month_window


def compute_dashboard_stats(charges: ChargeRepository, now: Optional[datetime] = None) -> dict:
    reference = now or utcnow()

    total_charges = charges.count_documents()
    pending_charges = charges.count_documents({"status": ChargeStatus.PENDING})
    paid_charges = charges.count_documents({"status": ChargeStatus.PAID})

    start, end = month_window(reference)
    revenue_buckets = charges.aggregate(
        {"status": ChargeStatus.PAID, "charged_at": DateRange(start, end)},
    )
    month_revenue = revenue_buckets[0].total if revenue_buckets else 0.0

    services = [
        {"service_type": bucket.key, "count": bucket.count, "total": bucket.total}
        for bucket in charges.aggregate(group_by="service_type")
    ]
    services.sort(key=lambda item: item["service_type"] or "")

    return {
        "summary": {
            "total_charges": total_charges,
            "pending_charges": pending_charges,
            "paid_charges": paid_charges,
            "month_revenue": month_revenue,
        },
        "services": services,
    }
