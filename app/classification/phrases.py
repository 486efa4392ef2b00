"""Phrase lists used by the response classifier. All entries are lower-case."""

from app.classification.models import RefusalCategory

REFUSAL_PHRASES: tuple[str, ...] = (
    "i cannot assist",
    "i can't assist",
    "i can’t assist",
    "sorry, i can't",
    "sorry, i can’t",
    "i'm sorry, but i can",
    "i cannot help",
    "i can't help with",
    "i am unable to assist",
    "i'm unable to assist",
    "i'm not able to assist",
    "unable to process",
    "i won't be able to",
    "against my programming",
    "content policies",
    "content policy",
    "violates guidelines",
    "violates my guidelines",
    "violates openai",
    "usage policies",
    "i must decline",
    "i cannot comply",
    "i can't comply",
)

OCR_QUALITY_PHRASES: tuple[str, ...] = (
    "no text detected",
    "no readable text",
    "no visible text",
    "no text found",
    "no text is visible",
    "does not contain any text",
    "doesn't contain any text",
    "does not contain any readable",
    "unable to transcribe",
    "cannot transcribe",
    "can't transcribe",
    "unable to read the text",
    "cannot read the text",
    "text is not legible",
    "text is illegible",
    "image is blank",
    "image appears to be blank",
    "too blurry",
)

CATEGORY_KEYWORDS: tuple[tuple[RefusalCategory, tuple[str, ...]], ...] = (
    (RefusalCategory.VIOLENCE, ("violence", "violent", "gore", "weapon", "blood")),
    (RefusalCategory.EXPLICIT, ("explicit", "sexual", "adult", "nudity", "erotic", "nsfw")),
    (RefusalCategory.HATE, ("hate", "hateful", "discriminat", "slur", "offensive")),
    (RefusalCategory.ILLEGAL, ("illegal", "unlawful", "criminal", "drug")),
    (RefusalCategory.HARMFUL, ("harmful", "harm", "dangerous", "unsafe")),
)
