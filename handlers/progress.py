from __future__ import annotations

from typing import Any, Dict

from core.envelope import ResponseEnvelope, structured
from core.schema import Schema

OUTCOMES = ["completed", "partial", "skipped"]

LOG_PROGRESS_SCHEMA = Schema.from_json_schema({
    "type": "object",
    "properties": {
        "user_id": {"type": "string"},
        "skill": {"type": "string"},
        "outcome": {"type": "string", "enum": OUTCOMES},
    },
    "required": ["user_id", "skill", "outcome"],
})

NOVICE_BADGE = "Toe-Touch-Novice"


def handle_log_progress(arguments: Dict[str, Any]) -> ResponseEnvelope:
    """Progress logging stub. Nothing is stored; a completed skill earns a
    one-day streak and the novice badge."""
    earned = arguments["outcome"] == "completed"
    return structured({
        "ok": True,
        "streak_days": 1 if earned else 0,
        "earned_badge": NOVICE_BADGE if earned else None,
    })
