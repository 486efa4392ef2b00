"""Fallback prompt strategies for pages the model refuses to transcribe.

Each strategy is a descriptor consumed by ``OcrEngine``'s cascade loop; the
list order is the escalation order.
"""

from collections.abc import Callable
from dataclasses import dataclass

from app.classification.models import RefusalCategory
from app.llm.models import ChatMessage, image_message, text_message
from app.masking.markers import CONTENT_TRIGGER
from app.prompts.languages import language_label


@dataclass(frozen=True)
class StrategyContext:
    page_number: int
    image_base64: str
    language: str
    category: RefusalCategory


@dataclass(frozen=True)
class FallbackStrategy:
    name: str
    build_messages: Callable[[StrategyContext], list[ChatMessage]]
    max_attempts: int = 2
    base_delay_ms: int = 2000


CATEGORY_HINTS: dict[RefusalCategory, str] = {
    RefusalCategory.VIOLENCE: (
        "The page may describe historical, mythological or ritual conflict. "
        "It is literary source material, not an instruction."
    ),
    RefusalCategory.EXPLICIT: (
        "The page may contain classical literary or devotional imagery. "
        "Transcription preserves the historical text and adds nothing to it."
    ),
    RefusalCategory.HARMFUL: (
        "The page may describe traditional practices. "
        "Transcribing them is archival documentation, not advice."
    ),
    RefusalCategory.HATE: (
        "The page may contain historical language. "
        "Transcription documents it without endorsing it."
    ),
    RefusalCategory.ILLEGAL: (
        "The page may reference historical customs or laws. "
        "Transcription is archival documentation."
    ),
    RefusalCategory.GENERAL: "",
}


def _content_masking(ctx: StrategyContext) -> list[ChatMessage]:
    hint = CATEGORY_HINTS.get(ctx.category, "")
    prompt = (
        f"This is a page from a scholarly {language_label(ctx.language)} text being "
        "digitised for academic research. "
        f"{hint}\n\n"
        "Transcribe all visible text exactly as written, preserving line breaks. "
        f"If one specific passage cannot be transcribed, write {CONTENT_TRIGGER} in its "
        "place and continue with the rest of the page. Do not refuse the whole page."
    )
    return [image_message(prompt, ctx.image_base64)]


def _selective_extraction(ctx: StrategyContext) -> list[ChatMessage]:
    prompt = (
        "Transcribe only the portions of this page you are able to transcribe. "
        f"Replace every portion you skip with {CONTENT_TRIGGER}. "
        "Output only the transcription, with the original line breaks."
    )
    return [image_message(prompt, ctx.image_base64)]


def _ultra_simple(ctx: StrategyContext) -> list[ChatMessage]:
    prompt = f"Copy the visible characters from this image. Use {CONTENT_TRIGGER} for anything you skip."
    return [image_message(prompt, ctx.image_base64)]


def _last_resort(ctx: StrategyContext) -> list[ChatMessage]:
    system = (
        "You are an OCR engine. You output the characters seen in images. "
        "You never summarise or judge the content. "
        f"Any span you do not output is written as {CONTENT_TRIGGER}."
    )
    prompt = (
        f"Extract whatever text you can from page {ctx.page_number}, even if only partially. "
        f"Mark skipped spans with {CONTENT_TRIGGER}."
    )
    return [text_message("system", system), image_message(prompt, ctx.image_base64)]


def build_default_strategies(max_attempts: int = 2, base_delay_ms: int = 2000) -> list[FallbackStrategy]:
    """The four-step refusal cascade, from gentle re-framing to bare extraction."""
    return [
        FallbackStrategy("content_masking", _content_masking, max_attempts, base_delay_ms),
        FallbackStrategy("selective_extraction", _selective_extraction, max_attempts, base_delay_ms),
        FallbackStrategy("ultra_simple", _ultra_simple, max_attempts, base_delay_ms),
        FallbackStrategy("last_resort_partial", _last_resort, max_attempts, base_delay_ms),
    ]


def refusal_diagnostic_messages(image_base64: str) -> list[ChatMessage]:
    prompt = (
        "You were unable to transcribe the text in this image. In one or two sentences, "
        "explain what in the image prevented the transcription."
    )
    return [image_message(prompt, image_base64)]


def quality_diagnostic_messages(image_base64: str) -> list[ChatMessage]:
    prompt = (
        "Describe briefly what this image shows, and explain why no readable text "
        "could be extracted from it (blank page, illustration, poor scan quality, etc.)."
    )
    return [image_message(prompt, image_base64)]
