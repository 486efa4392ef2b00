"""English translation of extracted page text."""

from app.cancellation.cancellation_token import CancellationToken
from app.classification.classifier import is_refusal_text
from app.llm.client_base import BaseVisionClient
from app.llm.exceptions import ModelError
from app.llm.models import text_message
from app.llm.retry import retry_call
from app.logging.logger import Log
from app.masking.markers import restore_markers
from app.progress.progress_log import ScopedProgress
from app.translation.prompts import (
    FALLBACK_SYSTEM_PROMPT,
    build_fallback_prompt,
    build_translation_prompt,
    system_prompt,
)

RESTRICTED_PREFIX = "Translation unavailable due to content restrictions. Original text: "


class Translator:
    """Translates text to English, falling back to a minimal prompt on refusal.

    A refused or failed translation degrades to a message embedding the original
    text instead of raising, and ``[CONTENT TRIGGER]`` markers in the input always
    survive into the output.
    """

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        max_tokens: int = 2000,
        temperature: float = 0.1,
        retry_max_attempts: int = 3,
        retry_base_delay_ms: int = 1000,
    ) -> None:
        self._client = client
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._retry_max_attempts = retry_max_attempts
        self._retry_base_delay_ms = retry_base_delay_ms

    def translate(
        self,
        text: str,
        language: str,
        progress: ScopedProgress | None = None,
        custom_prompt: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> str:
        """Translate ``text`` from ``language`` to English.

        Raises:
            OperationCancelledError: if the user cancelled before the call started.
        """
        if cancellation is not None:
            cancellation.check()
        if not text.strip():
            return ""

        custom = bool(custom_prompt and custom_prompt.strip())
        prompt = build_translation_prompt(text, language, custom_prompt)
        Log.debug(f"Translation prompt ({'custom' if custom else 'built-in'}) for {language}")
        try:
            translation = self._complete(system_prompt(language, custom), prompt, "translation", cancellation)
        except ModelError as exc:
            Log.error(f"Translation failed: {exc}")
            self._report(progress, f"Translation failed: {exc}")
            return f"Translation failed: {exc}. Original text: {text}"

        if is_refusal_text(translation):
            Log.warning("Translation refused, retrying with simplified prompt")
            translation = self._translate_fallback(text, language, progress, cancellation)
            return restore_markers(text, translation)

        self._report(progress, "Translation completed successfully.")
        return restore_markers(text, translation)

    def _translate_fallback(
        self,
        text: str,
        language: str,
        progress: ScopedProgress | None,
        cancellation: CancellationToken | None,
    ) -> str:
        try:
            translation = self._complete(
                FALLBACK_SYSTEM_PROMPT,
                build_fallback_prompt(text, language),
                "translation fallback",
                cancellation,
            )
        except ModelError as exc:
            Log.error(f"Fallback translation also failed: {exc}")
            self._report(progress, f"Translation failed: {exc}")
            return f"Translation error. Original text: {text}"

        if is_refusal_text(translation):
            Log.warning("Fallback translation refused as well, returning original text")
            self._report(progress, "Translation completed with some restrictions.")
            return f"{RESTRICTED_PREFIX}{text}"

        Log.info("Translation completed using fallback prompt")
        self._report(progress, "Translation completed successfully.")
        return translation

    def _complete(
        self,
        system: str,
        prompt: str,
        description: str,
        cancellation: CancellationToken | None,
    ) -> str:
        response = retry_call(
            lambda: self._client.create_chat_completion(
                messages=[text_message("system", system), text_message("user", prompt)],
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            ),
            self._retry_max_attempts,
            self._retry_base_delay_ms,
            description=description,
            cancellation=cancellation,
        )
        return response.text

    @staticmethod
    def _report(progress: ScopedProgress | None, message: str) -> None:
        if progress is not None:
            progress.report(message)
