import time

from ....services.menu_analysis.preference_ranker import apply_user_preferences
from ..state.menu_analysis_state import MenuAnalysisState
from ..utils.timing import log_node_summary, record_timing


def rank(state: MenuAnalysisState) -> MenuAnalysisState:
    """Node that scores dishes against user preferences and orders them."""
    t0 = time.perf_counter()

    prefs = state.get("preferences")
    state["dishes"] = apply_user_preferences(state["dishes"], prefs)

    ms = record_timing(state["timings"], "rank_ms", t0)
    top = state["dishes"][0]["name"] if state["dishes"] else "n/a"
    log_node_summary("rank", True, ms, scored=prefs is not None, top=top)
    return state
