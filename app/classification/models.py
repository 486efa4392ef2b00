from dataclasses import dataclass
from enum import Enum


class FailureType(str, Enum):
    CONTENT_POLICY = "Content Policy Violation"
    OCR_QUALITY = "OCR Quality Issue"
    TRUNCATED = "Response Truncated"
    FILTER_TRIGGERED = "Content Filter Triggered"
    MINIMAL_RESPONSE = "Minimal Response"


class RefusalCategory(str, Enum):
    """Sub-class of a content-policy refusal; picks the targeted fallback hint."""

    VIOLENCE = "violence"
    EXPLICIT = "explicit"
    HARMFUL = "harmful"
    HATE = "hate"
    ILLEGAL = "illegal"
    GENERAL = "general"


@dataclass(frozen=True)
class ResponseMetadata:
    """Response metadata the classifier looks at besides the text."""

    finish_reason: str | None = None
    completion_tokens: int | None = None
    max_tokens: int | None = None


@dataclass(frozen=True)
class Classification:
    is_failure: bool
    failure_type: FailureType | None = None
    reason: str = ""
    category: RefusalCategory | None = None

    @property
    def is_refusal(self) -> bool:
        return self.failure_type is FailureType.CONTENT_POLICY

    @property
    def is_quality_issue(self) -> bool:
        return self.failure_type is FailureType.OCR_QUALITY


SUCCESS = Classification(is_failure=False, reason="Response looks like a valid answer")
