from pathlib import Path

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "templates"


class PromptTemplateError(Exception):
    """Raised when a bundled prompt template cannot be read."""


def load_prompt_template(name: str, directory: Path | None = None) -> str:
    """Load a prompt template by file stem from the templates directory.

    Args:
        name: Template file name without the ``.txt`` suffix.
        directory: Directory to read from. Defaults to the bundled templates.

    Returns:
        The raw template text, trailing whitespace stripped.

    Raises:
        PromptTemplateError: if the file cannot be read.
    """
    path = (directory or _DEFAULT_PROMPT_DIR) / f"{name}.txt"
    try:
        return path.read_text(encoding="utf-8").rstrip()
    except OSError as exc:
        raise PromptTemplateError(f"Failed to load prompt template '{name}': {exc}") from exc
