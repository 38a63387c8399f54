from __future__ import annotations

import calendar
from datetime import date
from typing import Any, Callable, Dict, Optional

from core.envelope import ResponseEnvelope, structured
from core.schema import Schema

CHECK_SUBSCRIPTION_SCHEMA = Schema.from_json_schema({
    "type": "object",
    "properties": {
        "user_id": {"type": "string", "description": "email or app user id"},
    },
    "required": ["user_id"],
})

STUB_PLAN = "Pro-Monthly"


def add_one_month(day: date) -> date:
    """Same day next month, clamped to the last day of a shorter month."""
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def handle_check_subscription(arguments: Dict[str, Any], today: Optional[Callable[[], date]] = None) -> ResponseEnvelope:
    """Subscription check stub: every user is active on the monthly plan."""
    current = (today or date.today)()
    return structured({
        "active": True,
        "plan": STUB_PLAN,
        "renews_on": add_one_month(current).isoformat(),
    })
