from .validation_node import validate_input
from .prompt_node import build_prompt
from .llm_invocation_node import invoke_model
from .extraction_node import extract_response, fallback_to_basic
from .sanitization_node import sanitize
from .ranking_node import rank

__all__ = [
    "validate_input",
    "build_prompt",
    "invoke_model",
    "extract_response",
    "fallback_to_basic",
    "sanitize",
    "rank",
]
