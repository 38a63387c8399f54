from __future__ import annotations

from typing import Any, Dict

import config
from core.envelope import ResponseEnvelope, structured
from core.schema import Schema

ROLES = ["cheerleader", "mom"]
AGE_BANDS = ["5-7", "8-11", "12-14", "15-18"]
TOPICS = ["toe-touch", "stretching", "competition-prep"]

GET_MEDIA_SCHEMA = Schema.from_json_schema({
    "type": "object",
    "properties": {
        "role": {"type": "string", "examples": ROLES},
        "age_band": {"type": "string", "examples": AGE_BANDS},
        "topic": {"type": "string", "examples": TOPICS},
    },
    "required": ["role", "age_band", "topic"],
})

LIST_MEDIA_SCHEMA = Schema.from_json_schema({
    "type": "object",
    "properties": {
        "role": {"type": "string"},
        "age_band": {"type": "string"},
    },
    "required": ["role", "age_band"],
})

DEMO_VIDEO_ID = "M7lc1UVf-VE"


def handle_get_media(arguments: Dict[str, Any]) -> ResponseEnvelope:
    """Video, PDF and image links for a topic.

    The same demo set is served for every role/age band/topic for now.
    """
    base = config.get_media_base_url()
    return structured({
        "items": [
            {
                "id": f"yt_{DEMO_VIDEO_ID}",
                "type": "video",
                "title": "Toe Touch (Demo Video)",
                "embed_url": f"https://www.youtube.com/embed/{DEMO_VIDEO_ID}",
                "watch_url": f"https://www.youtube.com/watch?v={DEMO_VIDEO_ID}",
                "duration_sec": 18,
            },
            {
                "id": "pdf_checklist_01",
                "type": "pdf",
                "title": "Toe Touch Checklist",
                "url": f"{base}/docs/toe_touch_checklist.pdf",
            },
            {
                "id": "img_form_cues_01",
                "type": "image",
                "title": "Form Cues",
                "url": f"{base}/images/form_cues.png",
            },
        ]
    })


def handle_list_media(arguments: Dict[str, Any]) -> ResponseEnvelope:
    return structured({"topics": list(TOPICS)})
