LANGUAGE_LABELS = {
    "hindi": "Hindi",
    "sanskrit": "Sanskrit",
}


def language_label(language: str, default: str = "multilingual") -> str:
    return LANGUAGE_LABELS.get(language.lower(), default)
