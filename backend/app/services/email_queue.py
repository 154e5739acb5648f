# backend/app/services/email_queue.py
from __future__ import annotations

import json
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.models import EmailQueue


def queue_email(
    db: Session,
    *,
    to_email: str,
    to_name: Optional[str],
    subject: str,
    template_name: str,
    template_data: Optional[dict[str, Any]] = None,
) -> EmailQueue:
    """
    Enqueue a templated email for the outbound mail worker.

    NOTE: flush-only, no commit. Callers decide when to commit.
    """
    row = EmailQueue(
        to_email=to_email,
        to_name=to_name,
        subject=subject,
        template_name=template_name,
        template_data_json=json.dumps(template_data or {}, ensure_ascii=False),
        status="pending",
    )
    db.add(row)
    db.flush()
    return row


def queue_rent_reminder(
    db: Session,
    *,
    to_email: str,
    tenant_name: str,
    property_address: str,
    amount: str,
    custom_message: str = "",
) -> EmailQueue:
    return queue_email(
        db,
        to_email=to_email,
        to_name=tenant_name,
        subject=f"Rent Payment Reminder - {property_address}",
        template_name="rent_reminder",
        template_data={
            "tenant_name": tenant_name,
            "property_address": property_address,
            "amount": amount,
            "custom_message": custom_message,
        },
    )
