import time

from ....prompts.menu_analysis.menu_prompt import build_advanced_menu_prompt, build_menu_prompt
from ..state.menu_analysis_state import MenuAnalysisState
from ..utils.timing import log_node_summary, record_timing


def build_prompt(state: MenuAnalysisState) -> MenuAnalysisState:
    """Node that builds the instruction for the active tier."""
    t0 = time.perf_counter()

    if state["tier"] == "advanced":
        state["prompt"] = build_advanced_menu_prompt(state.get("preferences"))
    else:
        state["prompt"] = build_menu_prompt(state.get("preferences"))

    ms = record_timing(state["timings"], "prompt_ms", t0)
    log_node_summary("prompt", True, ms, tier=state["tier"], chars=len(state["prompt"]))
    return state
