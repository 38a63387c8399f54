from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple, Union


@dataclass(frozen=True)
class TextContent:
    text: str

    def to_dict(self, text_only: bool = False) -> Dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class JsonContent:
    value: Any

    def to_dict(self, text_only: bool = False) -> Dict[str, Any]:
        if text_only:
            return {"type": "text", "text": json.dumps(self.value, ensure_ascii=False)}
        return {"type": "json", "json": self.value}


ContentItem = Union[TextContent, JsonContent]
CONTENT_TYPES = (TextContent, JsonContent)


@dataclass(frozen=True)
class ResponseEnvelope:
    """Uniform success payload: an ordered sequence of content items."""

    content: Tuple[ContentItem, ...]

    @classmethod
    def of(cls, *items: ContentItem) -> "ResponseEnvelope":
        return cls(content=tuple(items))

    def to_dict(self, text_only: bool = False) -> Dict[str, Any]:
        """Wire form. With text_only, JSON items are serialized to text items
        for clients that only render MCP text content."""
        return {"content": [item.to_dict(text_only) for item in self.content]}


def text(value: str) -> ResponseEnvelope:
    return ResponseEnvelope.of(TextContent(value))


def structured(value: Any) -> ResponseEnvelope:
    return ResponseEnvelope.of(JsonContent(value))


def wrap_result(result: Any) -> ResponseEnvelope:
    """Wrap a capability return value without touching its payload.

    Raises TypeError for shapes that cannot be expressed as content items.
    """
    if isinstance(result, ResponseEnvelope):
        return result
    if isinstance(result, CONTENT_TYPES):
        return ResponseEnvelope.of(result)
    if isinstance(result, str):
        return text(result)
    if isinstance(result, dict):
        return structured(result)
    if isinstance(result, (list, tuple)):
        items: Sequence[Any] = result
        bad = [type(it).__name__ for it in items if not isinstance(it, CONTENT_TYPES)]
        if bad:
            raise TypeError(f"content sequence holds non-content items: {', '.join(sorted(set(bad)))}")
        return ResponseEnvelope(content=tuple(items))
    raise TypeError(f"unsupported result type {type(result).__name__}")
