from app.masking.markers import CONTENT_TRIGGER
from app.prompts.prompt_loader import load_prompt_template

_LANGUAGE_TEMPLATES = {
    "hindi": "ocr_hindi",
    "sanskrit": "ocr_sanskrit",
}


def build_ocr_prompt(language: str, custom_prompt: str | None = None) -> str:
    """Custom prompt (with masking instructions added if missing) or the built-in one."""
    masking = load_prompt_template("ocr_masking_instructions")
    if custom_prompt and custom_prompt.strip():
        if CONTENT_TRIGGER in custom_prompt:
            return custom_prompt.strip()
        return f"{custom_prompt.strip()}\n\n{masking}"
    template = _LANGUAGE_TEMPLATES.get(language.lower(), "ocr_generic")
    return f"{load_prompt_template(template)}\n\n{masking}"
