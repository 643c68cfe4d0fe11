"""
Menu Analysis Graph Module

LangGraph workflow turning an uploaded menu photo into sanitized, preference
ranked dish records: validate -> build_prompt -> invoke_model -> extract ->
sanitize -> rank.
"""

from .menu_analysis_graph import build_menu_analysis_graph, run_menu_analysis
from .state.menu_analysis_state import MenuAnalysisState

__all__ = [
    "build_menu_analysis_graph",
    "run_menu_analysis",
    "MenuAnalysisState",
]
