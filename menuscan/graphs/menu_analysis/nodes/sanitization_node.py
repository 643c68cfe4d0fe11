import time

from ....services.menu_analysis.dish_sanitizer import sanitize_dishes
from ..state.menu_analysis_state import MenuAnalysisState
from ..utils.timing import log_node_summary, record_timing


def sanitize(state: MenuAnalysisState) -> MenuAnalysisState:
    """Node that type-checks and range-clamps every extracted dish record."""
    t0 = time.perf_counter()
    parsed = state["parsed"]

    if state["tier"] == "advanced":
        state["dishes"] = sanitize_dishes(parsed.get("dishes"), detailed=True)
        insights = parsed.get("menuInsights")
        summary = parsed.get("nutritionSummary")
        state["menu_insights"] = insights if isinstance(insights, dict) else {}
        state["nutrition_summary"] = summary if isinstance(summary, dict) else {}
        candidates = len(parsed.get("dishes") or [])
    else:
        state["dishes"] = sanitize_dishes(parsed)
        candidates = len(parsed)

    ms = record_timing(state["timings"], "sanitize_ms", t0)
    log_node_summary("sanitize", True, ms, candidates=candidates, dishes=len(state["dishes"]))
    return state
