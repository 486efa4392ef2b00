from dataclasses import dataclass
from typing import Any

ChatMessage = dict[str, Any]


@dataclass(frozen=True)
class ModelResponse:
    """Text answer of a chat completion plus the metadata the classifier needs."""

    text: str
    finish_reason: str | None = None
    completion_tokens: int | None = None


def text_message(role: str, text: str) -> ChatMessage:
    return {"role": role, "content": text}


def image_message(text: str, image_base64: str, mime_type: str = "image/png") -> ChatMessage:
    """Build a user message carrying a prompt and an inline base64 image."""
    return {
        "role": "user",
        "content": [
            {"type": "text", "text": text},
            {
                "type": "image_url",
                "image_url": {"url": f"data:{mime_type};base64,{image_base64}"},
            },
        ],
    }
