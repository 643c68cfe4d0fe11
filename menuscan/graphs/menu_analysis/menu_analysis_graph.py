import time
from typing import Any, Dict, Optional

from langgraph.graph import StateGraph, END

from ...errors import MalformedOutputError
from .state.menu_analysis_state import MenuAnalysisState
from .nodes.validation_node import validate_input
from .nodes.prompt_node import build_prompt
from .nodes.llm_invocation_node import invoke_model
from .nodes.extraction_node import extract_response, fallback_to_basic
from .nodes.sanitization_node import sanitize
from .nodes.ranking_node import rank
from .utils.timing import log_pipeline_summary


def _continue_unless_failed(state: MenuAnalysisState) -> str:
    return "end" if state.get("failure") else "continue"


def _after_extract(state: MenuAnalysisState) -> str:
    """
    Two-tier strategy selection.

    Trigger: the advanced tier produced output with no extractable dishes
    (MalformedOutputError). Upstream failures end the run; the adapter is
    never re-invoked for them.
    """
    failure = state.get("failure")
    if failure is None:
        return "sanitize"
    if isinstance(failure, MalformedOutputError) and state["tier"] == "advanced" and not state.get("fallback_used"):
        return "fallback"
    return "end"


def build_menu_analysis_graph():
    """
    Build the menu analysis graph:
    1. validate - request checks and preference sanitization
    2. build_prompt - tier-specific instruction
    3. invoke_model - single Gemini call
    4. extract - JSON isolation from free text (advanced falls back to basic here)
    5. sanitize - per-field clamping, malformed records dropped
    6. rank - preference scoring and stable sort

    Returns:
        Compiled LangGraph workflow
    """
    workflow = StateGraph(MenuAnalysisState)

    workflow.add_node("validate", validate_input)
    workflow.add_node("build_prompt", build_prompt)
    workflow.add_node("invoke_model", invoke_model)
    workflow.add_node("extract", extract_response)
    workflow.add_node("fallback_to_basic", fallback_to_basic)
    workflow.add_node("sanitize", sanitize)
    workflow.add_node("rank", rank)

    workflow.set_entry_point("validate")
    workflow.add_conditional_edges("validate", _continue_unless_failed, {"continue": "build_prompt", "end": END})
    workflow.add_edge("build_prompt", "invoke_model")
    workflow.add_conditional_edges("invoke_model", _continue_unless_failed, {"continue": "extract", "end": END})
    workflow.add_conditional_edges(
        "extract",
        _after_extract,
        {"sanitize": "sanitize", "fallback": "fallback_to_basic", "end": END},
    )
    workflow.add_edge("fallback_to_basic", "build_prompt")
    workflow.add_edge("sanitize", "rank")
    workflow.add_edge("rank", END)

    return workflow.compile()


def run_menu_analysis(
    image_url: str,
    user_prefs: Optional[Dict[str, Any]],
    model_client: Any,
    strategy: str = "basic",
) -> Dict[str, Any]:
    """
    Run the menu analysis workflow for one uploaded menu photo.

    Args:
        image_url: URL of the uploaded photo
        user_prefs: Raw userPrefs from the request (sanitized in the graph)
        model_client: Model capability handle, or None when AI is disabled
        strategy: "basic" or "advanced"

    Returns:
        {"dishes", "tokens_used", "tier", "fallback_used", "timings", "total_ms"}
        plus "menuInsights"/"nutritionSummary" for the advanced tier

    Raises:
        MenuAnalysisError: the typed failure recorded by the failing node
    """
    t0 = time.perf_counter()

    # Initialize state
    initial_state: MenuAnalysisState = {
        "image_url": image_url,
        "user_prefs": user_prefs,
        "model_client": model_client,
        "strategy": strategy,
        "preferences": None,
        "tier": "basic",
        "prompt": None,
        "raw_response": None,
        "tokens_used": 0,
        "parsed": None,
        "dishes": [],
        "menu_insights": {},
        "nutrition_summary": {},
        "fallback_used": False,
        "timings": {},
        "total_ms": None,
        "failure": None,
        "error": None,
    }

    graph = build_menu_analysis_graph()
    final_state = graph.invoke(initial_state)

    total_ms = round((time.perf_counter() - t0) * 1000.0, 2)
    final_state["total_ms"] = total_ms
    log_pipeline_summary(final_state["timings"], total_ms, final_state.get("error"))

    if final_state.get("failure") is not None:
        raise final_state["failure"]

    result: Dict[str, Any] = {
        "dishes": final_state["dishes"],
        "tokens_used": final_state.get("tokens_used", 0),
        "tier": final_state["tier"],
        "fallback_used": final_state.get("fallback_used", False),
        "timings": final_state["timings"],
        "total_ms": total_ms,
    }
    if final_state["tier"] == "advanced":
        result["menuInsights"] = final_state.get("menu_insights") or {}
        result["nutritionSummary"] = final_state.get("nutrition_summary") or {}
    return result
