import logging
import time

from ....errors import MalformedOutputError
from ....services.menu_analysis.response_extractor import extract_json
from ..state.menu_analysis_state import MenuAnalysisState
from ..utils.timing import log_node_summary, record_timing

logger = logging.getLogger(__name__)


def extract_response(state: MenuAnalysisState) -> MenuAnalysisState:
    """
    Node that isolates the JSON payload from the raw model text.

    Basic tier expects an array of dishes; advanced tier an object with a
    "dishes" array.
    """
    t0 = time.perf_counter()
    advanced = state["tier"] == "advanced"

    try:
        parsed = extract_json(state.get("raw_response"), expected="object" if advanced else "array")
        if advanced and not isinstance(parsed.get("dishes"), list):
            raise MalformedOutputError("Advanced analysis response has no dishes array")
        state["parsed"] = parsed

        ms = record_timing(state["timings"], "extract_ms", t0)
        count = len(parsed["dishes"]) if advanced else len(parsed)
        log_node_summary("extract", True, ms, tier=state["tier"], candidates=count)

    except MalformedOutputError as e:
        state["failure"] = e
        state["error"] = f"extract_failed: {e}"
        state["parsed"] = None
        logger.error("No valid JSON found in AI response: %r", (state.get("raw_response") or "")[:500])

        ms = record_timing(state["timings"], "extract_ms", t0)
        log_node_summary("extract", False, ms, tier=state["tier"], error=e.code)

    return state


def fallback_to_basic(state: MenuAnalysisState) -> MenuAnalysisState:
    """Node that switches an advanced run whose output was malformed to the basic tier."""
    logger.warning("Advanced menu analysis output malformed, falling back to basic: %s", state.get("error"))
    state["tier"] = "basic"
    state["fallback_used"] = True
    state["failure"] = None
    state["error"] = None
    state["raw_response"] = None
    state["parsed"] = None
    return state
