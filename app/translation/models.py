from dataclasses import dataclass


@dataclass(frozen=True)
class TranslationOutcome:
    page_number: int
    text: str
