from .menu_analysis_state import MenuAnalysisState

__all__ = ["MenuAnalysisState"]
