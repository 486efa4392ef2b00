"""Tests for ExampleClientAdapter (template/reference adapter)."""

from app.llm.example_client_adapter import ExampleClientAdapter
from app.llm.models import image_message, text_message


class TestExampleClientAdapter:
    def test_image_request_gets_transcription(self) -> None:
        adapter = ExampleClientAdapter()
        result = adapter.create_chat_completion(
            messages=[image_message("Transcribe", "aGVsbG8=")],
            max_tokens=100,
            temperature=0.0,
        )
        assert result.text == ExampleClientAdapter.TRANSCRIPTION
        assert result.finish_reason == "stop"

    def test_text_request_gets_translation(self) -> None:
        adapter = ExampleClientAdapter()
        result = adapter.create_chat_completion(
            messages=[text_message("system", "s"), text_message("user", "u")],
            max_tokens=100,
            temperature=0.0,
        )
        assert result.text == ExampleClientAdapter.TRANSLATION

    def test_ignores_input_parameters(self) -> None:
        adapter = ExampleClientAdapter()
        r1 = adapter.create_chat_completion(
            messages=[text_message("user", "a")], max_tokens=1, temperature=0.0
        )
        r2 = adapter.create_chat_completion(
            messages=[text_message("user", "b")], max_tokens=9, temperature=1.0
        )
        assert r1 == r2
