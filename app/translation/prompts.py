from app.prompts.languages import language_label
from app.prompts.prompt_loader import load_prompt_template

TEXT_PLACEHOLDER = "{TEXT}"

_GUIDELINE_TEMPLATES = {
    "hindi": "translation_guidelines_hindi",
    "sanskrit": "translation_guidelines_sanskrit",
}


def source_language_name(language: str) -> str:
    return language_label(language, default="the source language")


def build_translation_prompt(text: str, language: str, custom_template: str | None = None) -> str:
    """Fill the caller's ``{TEXT}`` template, or the built-in per-language prompt."""
    if custom_template and custom_template.strip():
        if TEXT_PLACEHOLDER in custom_template:
            return custom_template.replace(TEXT_PLACEHOLDER, text)
        return f"{custom_template.rstrip()}\n\n{text}"

    guidelines_name = _GUIDELINE_TEMPLATES.get(language.lower())
    guidelines = load_prompt_template(guidelines_name) if guidelines_name else ""
    return load_prompt_template("translation_default").format(
        source_language=source_language_name(language),
        language_guidelines=guidelines,
        text=text,
    )


def build_fallback_prompt(text: str, language: str) -> str:
    return load_prompt_template("translation_fallback").format(
        source_language=source_language_name(language),
        text=text,
    )


def system_prompt(language: str, custom: bool) -> str:
    if custom:
        return "You are an AI assistant that follows the given instructions precisely."
    label = language_label(language)
    return (
        f"You are an academic translator specializing in {label} texts. Your role is to "
        "provide accurate English translations while maintaining scholarly precision and "
        "cultural context."
    )


FALLBACK_SYSTEM_PROMPT = (
    "You are a linguistic assistant. Convert the provided text to English while "
    "maintaining academic accuracy."
)
