import time

from ....errors import AIUnavailableError, InvalidInputError
from ....services.menu_analysis.preferences import sanitize_preferences
from ..state.menu_analysis_state import MenuAnalysisState
from ..utils.timing import log_node_summary, record_timing

TIERS = ("basic", "advanced")


def validate_input(state: MenuAnalysisState) -> MenuAnalysisState:
    """
    Node that validates the request and sanitizes user preferences.

    Args:
        state: Current graph state containing input data

    Returns:
        Updated state with sanitized preferences and the starting tier
    """
    t0 = time.perf_counter()

    try:
        image_url = state.get("image_url")
        if not isinstance(image_url, str) or not image_url.strip():
            raise InvalidInputError("Image URL is required")

        # The model capability is created at startup and may be absent
        if state.get("model_client") is None:
            raise AIUnavailableError("AI service is not available")

        state["preferences"] = sanitize_preferences(state.get("user_prefs"))
        strategy = (state.get("strategy") or "basic").lower()
        state["tier"] = strategy if strategy in TIERS else "basic"

        ms = record_timing(state["timings"], "validate_ms", t0)
        prefs = state["preferences"]
        log_node_summary(
            "validate", True, ms,
            tier=state["tier"],
            diets=len(prefs["diets"]) if prefs else 0,
            allergens=len(prefs["allergens"]) if prefs else 0,
        )

    except (InvalidInputError, AIUnavailableError) as e:
        state["failure"] = e
        state["error"] = f"validation_failed: {e}"
        ms = record_timing(state["timings"], "validate_ms", t0)
        log_node_summary("validate", False, ms, error=e.code)

    return state
