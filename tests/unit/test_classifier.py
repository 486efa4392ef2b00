import pytest

from app.classification.classifier import (
    ClassificationRule,
    ResponseClassifier,
    is_refusal_text,
    refusal_category,
)
from app.classification.models import FailureType, RefusalCategory, ResponseMetadata
from app.llm.models import ModelResponse

PROSE = (
    "The ancient manuscript describes the customs of the village and the seasons of harvest."
)


class TestResponseClassifier:
    def test_refusal_is_content_policy_violation(self) -> None:
        verdict = ResponseClassifier().classify("I cannot assist with that request.")
        assert verdict.is_failure
        assert verdict.failure_type is FailureType.CONTENT_POLICY
        assert verdict.is_refusal
        assert verdict.category is RefusalCategory.GENERAL

    def test_no_text_detected_is_ocr_quality_issue(self) -> None:
        verdict = ResponseClassifier().classify("No text detected in this image.")
        assert verdict.is_failure
        assert verdict.failure_type is FailureType.OCR_QUALITY
        assert verdict.is_quality_issue

    def test_long_prose_is_success(self) -> None:
        verdict = ResponseClassifier().classify(
            PROSE, ResponseMetadata(finish_reason="stop", completion_tokens=40, max_tokens=2000)
        )
        assert not verdict.is_failure
        assert verdict.failure_type is None

    def test_refusal_wins_over_quality_phrase(self) -> None:
        verdict = ResponseClassifier().classify(
            "I cannot assist, and there is no text detected anyway."
        )
        assert verdict.failure_type is FailureType.CONTENT_POLICY

    @pytest.mark.parametrize(
        ("text", "category"),
        [
            ("I cannot assist with violent content.", RefusalCategory.VIOLENCE),
            ("I cannot assist with sexual material.", RefusalCategory.EXPLICIT),
            ("This violates guidelines on hateful speech.", RefusalCategory.HATE),
            ("I must decline, this describes illegal activity.", RefusalCategory.ILLEGAL),
            ("I cannot help with dangerous instructions.", RefusalCategory.HARMFUL),
        ],
    )
    def test_refusal_category_is_detected(self, text: str, category: RefusalCategory) -> None:
        verdict = ResponseClassifier().classify(text)
        assert verdict.category is category
        assert category.value in verdict.reason

    def test_truncated_when_length_stop_near_token_limit(self) -> None:
        verdict = ResponseClassifier().classify(
            PROSE, ResponseMetadata(finish_reason="length", completion_tokens=1950, max_tokens=2000)
        )
        assert verdict.failure_type is FailureType.TRUNCATED

    def test_length_stop_far_from_limit_is_not_truncated(self) -> None:
        verdict = ResponseClassifier().classify(
            PROSE, ResponseMetadata(finish_reason="length", completion_tokens=100, max_tokens=2000)
        )
        assert not verdict.is_failure

    def test_content_filter_finish_reason(self) -> None:
        verdict = ResponseClassifier().classify(
            PROSE, ResponseMetadata(finish_reason="content_filter", completion_tokens=30)
        )
        assert verdict.failure_type is FailureType.FILTER_TRIGGERED

    def test_minimal_response(self) -> None:
        verdict = ResponseClassifier().classify(
            "ok", ResponseMetadata(finish_reason="stop", completion_tokens=1)
        )
        assert verdict.failure_type is FailureType.MINIMAL_RESPONSE

    def test_short_text_with_many_tokens_is_not_minimal(self) -> None:
        verdict = ResponseClassifier().classify(
            "ॐ नमः", ResponseMetadata(finish_reason="stop", completion_tokens=12)
        )
        assert not verdict.is_failure

    def test_empty_text_without_metadata_is_minimal(self) -> None:
        verdict = ResponseClassifier().classify("")
        assert verdict.failure_type is FailureType.MINIMAL_RESPONSE

    def test_is_deterministic(self) -> None:
        classifier = ResponseClassifier()
        assert classifier.classify("I cannot assist.") == classifier.classify("I cannot assist.")

    def test_custom_rule_list(self) -> None:
        rule = ClassificationRule(
            name="shouting",
            matches=lambda text, _meta: "!!!" in text,
            failure_type=FailureType.MINIMAL_RESPONSE,
            reason="Model is shouting",
        )
        verdict = ResponseClassifier([rule]).classify("I cannot assist!!!")
        assert verdict.reason == "Model is shouting"

    def test_classify_response_uses_metadata(self) -> None:
        response = ModelResponse(text=PROSE, finish_reason="length", completion_tokens=2000)
        verdict = ResponseClassifier().classify_response(response, max_tokens=2000)
        assert verdict.failure_type is FailureType.TRUNCATED


class TestRefusalHelpers:
    def test_is_refusal_text_ignores_case(self) -> None:
        assert is_refusal_text("Sorry, I CAN'T assist with this.")
        assert not is_refusal_text(PROSE)

    def test_refusal_category_defaults_to_general(self) -> None:
        assert refusal_category("I cannot assist.") is RefusalCategory.GENERAL
