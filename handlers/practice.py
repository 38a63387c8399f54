from __future__ import annotations

from typing import Any, Dict

from core.envelope import ResponseEnvelope, structured
from core.schema import Schema

AGE_BANDS = ["5-7", "8-11", "12-14", "15-18"]
LEVELS = ["1", "2", "3", "4"]

PRACTICE_PLAN_SCHEMA = Schema.from_json_schema({
    "type": "object",
    "properties": {
        "age_band": {"type": "string", "enum": AGE_BANDS},
        "level": {"type": "string", "enum": LEVELS},
        "minutes": {"type": "number", "minimum": 5, "maximum": 60},
    },
    "required": ["age_band", "level", "minutes"],
})

WARMUP = ["Light jog 2 min", "Arm circles x20", "Neck rolls x10"]
BEGINNER_SKILLS = ["Toe touch drills x10", "High V / Low V x10", "Clap & clean x10"]
ADVANCED_SKILLS = ["Jumps combo x12", "T motions x12", "Core holds 30s x3"]
COOLDOWN = ["Hamstring stretch 30s x2", "Quad stretch 30s x2", "Deep breaths 1 min"]


def _format_minutes(minutes: Any) -> str:
    # 20.0 -> "20"
    if isinstance(minutes, float) and minutes.is_integer():
        return str(int(minutes))
    return str(minutes)


def handle_get_practice_plan(arguments: Dict[str, Any]) -> ResponseEnvelope:
    """Return a practice plan for an age band, level and session length."""
    age_band = arguments["age_band"]
    level = arguments["level"]
    minutes = _format_minutes(arguments["minutes"])
    skills = BEGINNER_SKILLS if level == "1" else ADVANCED_SKILLS

    return structured({
        "title": f"Level {level} — {minutes} min plan (ages {age_band})",
        "sections": [
            {"name": "Warm-up", "items": list(WARMUP)},
            {"name": "Skills", "items": list(skills)},
            {"name": "Cool-down", "items": list(COOLDOWN)},
        ],
        "badges": ["Consistency-Star"],
    })
