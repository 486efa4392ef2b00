"""Response quality classifier for model answers.

Rules are evaluated in order and the first match wins, so the priority
between refusal, OCR quality, truncation, filter and minimal-response
verdicts is the order of ``DEFAULT_RULES``.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from app.classification.models import (
    SUCCESS,
    Classification,
    FailureType,
    RefusalCategory,
    ResponseMetadata,
)
from app.classification.phrases import CATEGORY_KEYWORDS, OCR_QUALITY_PHRASES, REFUSAL_PHRASES
from app.llm.models import ModelResponse

TRUNCATION_RATIO = 0.95
MINIMAL_TOKENS = 5
MINIMAL_TEXT_LENGTH = 10
FILTER_FINISH_REASONS = frozenset({"content_filter", "safety"})


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    matches: Callable[[str, ResponseMetadata], bool]
    failure_type: FailureType
    reason: str


def _find_phrase(text: str, phrases: Sequence[str]) -> str | None:
    for phrase in phrases:
        if phrase in text:
            return phrase
    return None


def is_refusal_text(text: str) -> bool:
    """Plain phrase match for content-policy refusals."""
    return _find_phrase(text.lower(), REFUSAL_PHRASES) is not None


def refusal_category(text: str) -> RefusalCategory:
    lowered = text.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return RefusalCategory.GENERAL


def _is_truncated(_text: str, meta: ResponseMetadata) -> bool:
    if meta.finish_reason != "length":
        return False
    if meta.completion_tokens is None or not meta.max_tokens:
        return True
    return meta.completion_tokens >= meta.max_tokens * TRUNCATION_RATIO


def _is_minimal(text: str, meta: ResponseMetadata) -> bool:
    if len(text.strip()) >= MINIMAL_TEXT_LENGTH:
        return False
    return meta.completion_tokens is None or meta.completion_tokens < MINIMAL_TOKENS


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        name="content_policy_refusal",
        matches=lambda text, _meta: _find_phrase(text, REFUSAL_PHRASES) is not None,
        failure_type=FailureType.CONTENT_POLICY,
        reason="Model refused the request citing content policy",
    ),
    ClassificationRule(
        name="ocr_quality",
        matches=lambda text, _meta: _find_phrase(text, OCR_QUALITY_PHRASES) is not None,
        failure_type=FailureType.OCR_QUALITY,
        reason="Model reported no readable text",
    ),
    ClassificationRule(
        name="truncated",
        matches=_is_truncated,
        failure_type=FailureType.TRUNCATED,
        reason="Response stopped at the token limit",
    ),
    ClassificationRule(
        name="filter_triggered",
        matches=lambda _text, meta: (meta.finish_reason or "") in FILTER_FINISH_REASONS,
        failure_type=FailureType.FILTER_TRIGGERED,
        reason="Provider content filter stopped the response",
    ),
    ClassificationRule(
        name="minimal_response",
        matches=_is_minimal,
        failure_type=FailureType.MINIMAL_RESPONSE,
        reason="Response is too short to be a transcription",
    ),
)


class ResponseClassifier:
    """Classifies a model answer into the failure taxonomy. Pure and deterministic."""

    def __init__(self, rules: Sequence[ClassificationRule] = DEFAULT_RULES) -> None:
        self._rules = tuple(rules)

    def classify(self, text: str, metadata: ResponseMetadata | None = None) -> Classification:
        meta = metadata or ResponseMetadata()
        lowered = (text or "").lower()
        for rule in self._rules:
            if not rule.matches(lowered, meta):
                continue
            category = (
                refusal_category(lowered)
                if rule.failure_type is FailureType.CONTENT_POLICY
                else None
            )
            reason = rule.reason
            if category is not None:
                reason = f"{reason} ({category.value})"
            return Classification(
                is_failure=True,
                failure_type=rule.failure_type,
                reason=reason,
                category=category,
            )
        return SUCCESS

    def classify_response(self, response: ModelResponse, max_tokens: int | None = None) -> Classification:
        return self.classify(
            response.text,
            ResponseMetadata(
                finish_reason=response.finish_reason,
                completion_tokens=response.completion_tokens,
                max_tokens=max_tokens,
            ),
        )
