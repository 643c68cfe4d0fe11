import time

from ....errors import MenuAnalysisError
from ....services.shared.gemini.gemini_client import classify_upstream_error
from ..state.menu_analysis_state import MenuAnalysisState
from ..utils.timing import log_node_summary, record_timing


def invoke_model(state: MenuAnalysisState) -> MenuAnalysisState:
    """
    Node that sends the menu photo and prompt to the model (one upstream call).

    Args:
        state: Current graph state containing the prompt

    Returns:
        Updated state with the raw model text, or a classified failure
    """
    t0 = time.perf_counter()

    try:
        reply = state["model_client"].generate(state["image_url"], state["prompt"])
        state["raw_response"] = reply.text
        state["tokens_used"] = state.get("tokens_used", 0) + (reply.tokens_used or 0)

        ms = record_timing(state["timings"], "invoke_ms", t0)
        log_node_summary("invoke", True, ms, tier=state["tier"], chars=len(reply.text), tokens=reply.tokens_used)

    except Exception as e:
        failure = e if isinstance(e, MenuAnalysisError) else classify_upstream_error(e)
        state["failure"] = failure
        state["error"] = f"llm_failed: {failure}"
        state["raw_response"] = None

        ms = record_timing(state["timings"], "invoke_ms", t0)
        log_node_summary("invoke", False, ms, tier=state["tier"], error=failure.code)

    return state
