from pathlib import Path

from po_processor.structuring.exceptions import StructuringError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the user prompt template.

    Args:
        path: Path to the template file.
              Defaults to the bundled structuring_prompt.txt.

    Returns:
        The raw template with ``{document_text}`` and ``{json_schema}`` placeholders.

    Raises:
        StructuringError: if the file cannot be read.
    """
    return _read(path or _DEFAULT_PROMPT_DIR / "structuring_prompt.txt", "prompt template")


def load_system_prompt(path: Path | None = None) -> str:
    return _read(path or _DEFAULT_PROMPT_DIR / "system_prompt.txt", "system prompt")


def load_json_schema(path: Path | None = None) -> str:
    """Load the purchase-order JSON schema sent alongside the prompt."""
    return _read(path or _DEFAULT_PROMPT_DIR / "purchase_order_schema.json", "JSON schema")


def _read(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StructuringError(f"Failed to load {what}: {exc}") from exc
