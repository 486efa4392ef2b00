"""OCR-by-LLM extraction with a refusal fallback cascade."""

import base64
from collections import Counter
from collections.abc import Sequence

from app.cancellation.cancellation_token import CancellationToken
from app.classification.classifier import ResponseClassifier
from app.classification.models import Classification, FailureType, RefusalCategory
from app.llm.client_base import BaseVisionClient
from app.llm.exceptions import ModelError
from app.llm.models import ChatMessage, ModelResponse, image_message
from app.llm.retry import retry_call
from app.logging.logger import Log
from app.masking.markers import CONTENT_TRIGGER, contains_marker
from app.ocr.models import OcrOutcome, OcrStatus
from app.ocr.prompts import build_ocr_prompt
from app.ocr.strategies import (
    FallbackStrategy,
    StrategyContext,
    build_default_strategies,
    quality_diagnostic_messages,
    refusal_diagnostic_messages,
)
from app.pdf.models import RasterizedPage
from app.progress.progress_log import ScopedProgress

MIN_IMAGE_BYTES = 100
_CASCADE_TRIGGERS = frozenset({FailureType.CONTENT_POLICY, FailureType.FILTER_TRIGGERED})


class OcrEngine:
    """Extracts page text with a vision model, one page at a time.

    Every model call goes through ``retry_call``; every answer goes through the
    classifier. Refusals escalate through ``strategies`` until one answer is not
    a refusal, and a page's failure never stops the pages after it.
    """

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        classifier: ResponseClassifier | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.1,
        retry_max_attempts: int = 3,
        retry_base_delay_ms: int = 1000,
        strategies: Sequence[FallbackStrategy] | None = None,
    ) -> None:
        self._client = client
        self._classifier = classifier or ResponseClassifier()
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._retry_max_attempts = retry_max_attempts
        self._retry_base_delay_ms = retry_base_delay_ms
        self._strategies = list(strategies) if strategies is not None else build_default_strategies()

    def extract_text(
        self,
        pages: Sequence[RasterizedPage],
        language: str,
        progress: ScopedProgress | None = None,
        custom_prompt: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> list[OcrOutcome]:
        """Run OCR over ``pages`` sequentially and return one outcome per page.

        Raises:
            OperationCancelledError: if the user cancels between pages or calls.
        """
        if progress is not None:
            progress.begin(f"Starting text extraction for {len(pages)} pages...")
        outcomes: list[OcrOutcome] = []
        for index, page in enumerate(pages):
            if cancellation is not None:
                cancellation.check()
            if progress is not None:
                progress.report(
                    f"Extracting text from page {page.page_number}...", index, len(pages)
                )
            outcomes.append(self.extract_page(page, language, custom_prompt, cancellation))
            if progress is not None:
                progress.report(
                    f"Text extraction completed for page {page.page_number}.",
                    index + 1,
                    len(pages),
                )

        self._log_summary(outcomes)
        if progress is not None:
            progress.finish(f"Text extraction completed for all {len(pages)} pages.")
        return outcomes

    def extract_page(
        self,
        page: RasterizedPage,
        language: str,
        custom_prompt: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> OcrOutcome:
        page_number = page.page_number
        if not page.image_bytes:
            Log.warning(f"Page {page_number}: image not found")
            return self._technical_error(page, "Error: Image file not found")
        if len(page.image_bytes) < MIN_IMAGE_BYTES:
            Log.warning(f"Page {page_number}: image too small ({len(page.image_bytes)} bytes)")
            return self._technical_error(page, "Error: Image file too small for OCR processing")

        image_base64 = base64.b64encode(page.image_bytes).decode("ascii")
        prompt = build_ocr_prompt(language, custom_prompt)
        try:
            response = self._call(
                [image_message(prompt, image_base64)],
                f"OCR page {page_number}",
                cancellation,
            )
            verdict = self._classifier.classify_response(response, self._max_tokens)
            Log.debug(f"Page {page_number} OCR verdict: {verdict.failure_type} {verdict.reason}")

            if verdict.failure_type in _CASCADE_TRIGGERS:
                Log.warning(
                    f"Page {page_number}: {verdict.failure_type.value} ({verdict.reason}), "
                    "starting fallback cascade"
                )
                ctx = StrategyContext(
                    page_number=page_number,
                    image_base64=image_base64,
                    language=language,
                    category=verdict.category or RefusalCategory.GENERAL,
                )
                return self._run_cascade(page, ctx, verdict, cancellation)
            if verdict.is_quality_issue:
                return self._explain_missing_text(page, image_base64, response, verdict, cancellation)
            return self._accept(page, response, verdict)
        except ModelError as exc:
            Log.error(f"Page {page_number}: OCR failed ({type(exc).__name__}: {exc})")
            return self._technical_error(page, f"OCR Error: {exc}")

    def _run_cascade(
        self,
        page: RasterizedPage,
        ctx: StrategyContext,
        verdict: Classification,
        cancellation: CancellationToken | None,
    ) -> OcrOutcome:
        for strategy in self._strategies:
            if cancellation is not None:
                cancellation.check()
            try:
                response = retry_call(
                    lambda: self._client.create_chat_completion(
                        messages=strategy.build_messages(ctx),
                        max_tokens=self._max_tokens,
                        temperature=self._temperature,
                    ),
                    strategy.max_attempts,
                    strategy.base_delay_ms,
                    description=f"OCR page {ctx.page_number} fallback '{strategy.name}'",
                    cancellation=cancellation,
                )
            except ModelError as exc:
                Log.warning(f"Page {ctx.page_number}: fallback '{strategy.name}' errored: {exc}")
                continue

            fallback_verdict = self._classifier.classify_response(response, self._max_tokens)
            if fallback_verdict.failure_type in _CASCADE_TRIGGERS:
                Log.warning(
                    f"Page {ctx.page_number}: fallback '{strategy.name}' also refused "
                    f"({fallback_verdict.reason})"
                )
                continue

            Log.info(f"Page {ctx.page_number}: fallback '{strategy.name}' succeeded")
            if fallback_verdict.is_quality_issue:
                return self._explain_missing_text(
                    page, ctx.image_base64, response, fallback_verdict, cancellation
                )
            return self._accept(page, response, fallback_verdict)

        Log.error(
            f"Page {ctx.page_number}: all {len(self._strategies)} fallbacks refused, "
            "requesting explanation"
        )
        explanation = self._diagnose(
            refusal_diagnostic_messages(ctx.image_base64),
            f"OCR page {ctx.page_number} refusal diagnostic",
            cancellation,
        )
        text = (
            f"{CONTENT_TRIGGER}\n\n"
            f"Page {ctx.page_number}: the model declined to transcribe this page "
            f"after {len(self._strategies)} fallback attempts.\n"
            f"Model explanation: {explanation}"
        )
        return OcrOutcome(
            page_number=page.page_number,
            text=text,
            status=OcrStatus.MODERATED,
            failure_type=verdict.failure_type.value if verdict.failure_type else None,
            reason=verdict.reason,
            image_path=page.image_path,
        )

    def _explain_missing_text(
        self,
        page: RasterizedPage,
        image_base64: str,
        response: ModelResponse,
        verdict: Classification,
        cancellation: CancellationToken | None,
    ) -> OcrOutcome:
        Log.warning(f"Page {page.page_number}: {verdict.reason}, requesting diagnostic")
        explanation = self._diagnose(
            quality_diagnostic_messages(image_base64),
            f"OCR page {page.page_number} quality diagnostic",
            cancellation,
        )
        text = (
            f"No readable text extracted from page {page.page_number}.\n"
            f"Model explanation: {explanation}\n"
            f"Original response: {response.text}"
        )
        return OcrOutcome(
            page_number=page.page_number,
            text=text,
            status=OcrStatus.FAILED_EMPTY,
            failure_type=FailureType.OCR_QUALITY.value,
            reason=verdict.reason,
            image_path=page.image_path,
        )

    def _accept(
        self, page: RasterizedPage, response: ModelResponse, verdict: Classification
    ) -> OcrOutcome:
        if verdict.is_failure:
            Log.warning(f"Page {page.page_number}: accepting response despite {verdict.reason}")
        if not response.text.strip():
            status = OcrStatus.FAILED_EMPTY
        elif contains_marker(response.text):
            status = OcrStatus.MASKED
        else:
            status = OcrStatus.SUCCESS
        return OcrOutcome(
            page_number=page.page_number,
            text=response.text,
            status=status,
            failure_type=verdict.failure_type.value if verdict.failure_type else None,
            reason=verdict.reason,
            image_path=page.image_path,
        )

    def _diagnose(
        self,
        messages: list[ChatMessage],
        description: str,
        cancellation: CancellationToken | None,
    ) -> str:
        try:
            return self._call(messages, description, cancellation).text
        except ModelError as exc:
            Log.warning(f"{description} failed: {exc}")
            return f"unavailable ({exc})"

    def _call(
        self,
        messages: list[ChatMessage],
        description: str,
        cancellation: CancellationToken | None,
    ) -> ModelResponse:
        return retry_call(
            lambda: self._client.create_chat_completion(
                messages=messages,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            ),
            self._retry_max_attempts,
            self._retry_base_delay_ms,
            description=description,
            cancellation=cancellation,
        )

    @staticmethod
    def _technical_error(page: RasterizedPage, message: str) -> OcrOutcome:
        return OcrOutcome(
            page_number=page.page_number,
            text=message,
            status=OcrStatus.TECHNICAL_ERROR,
            reason=message,
            image_path=page.image_path,
        )

    @staticmethod
    def _log_summary(outcomes: Sequence[OcrOutcome]) -> None:
        counts = Counter(outcome.status for outcome in outcomes)
        summary = ", ".join(f"{status.value}={counts.get(status, 0)}" for status in OcrStatus)
        Log.info(f"OCR finished for {len(outcomes)} pages: {summary}")
