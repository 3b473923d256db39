"""Chat-model response shapes.

Providers return either a plain string or a list of content parts (text
blocks mixed with tool calls, images, reasoning blocks, …).  Both shapes
are normalised into a small tagged union so that answer extraction is a
single well-defined rule: concatenate the text parts, drop everything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rag_chat.errors import GenerationFailure


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class OtherPart:
    """A non-text content part, kept only for its type tag."""

    type: str


ContentPart = TextPart | OtherPart


@dataclass(frozen=True)
class TextResponse:
    text: str


@dataclass(frozen=True)
class StructuredResponse:
    parts: tuple[ContentPart, ...]


ModelResponse = TextResponse | StructuredResponse


def _parse_part(raw: Any) -> ContentPart:
    if isinstance(raw, str):
        return TextPart(raw)
    if isinstance(raw, dict):
        part_type = str(raw.get("type", "unknown"))
        if part_type == "text" and isinstance(raw.get("text"), str):
            return TextPart(raw["text"])
        return OtherPart(part_type)
    return OtherPart(type(raw).__name__)


def parse_content(content: Any) -> ModelResponse:
    """Classify an ``AIMessage.content`` value.

    Raises
    ------
    GenerationFailure
        If *content* is neither a string nor a list of parts.
    """
    if isinstance(content, str):
        return TextResponse(content)
    if isinstance(content, list):
        return StructuredResponse(tuple(_parse_part(p) for p in content))
    raise GenerationFailure(f"unparseable model response of type {type(content).__name__}")


def extract_text(response: ModelResponse) -> str:
    if isinstance(response, TextResponse):
        return response.text
    return "".join(p.text for p in response.parts if isinstance(p, TextPart))
