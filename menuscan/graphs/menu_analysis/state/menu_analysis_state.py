from typing import Any, Dict, List, Optional, TypedDict


class MenuAnalysisState(TypedDict):
    """State for menu analysis workflow"""

    # Input data
    image_url: str
    user_prefs: Optional[Dict[str, Any]]
    model_client: Any
    strategy: str

    # Sanitized preferences
    preferences: Optional[Dict[str, List[str]]]

    # Prompt and model call
    tier: str
    prompt: Optional[str]
    raw_response: Optional[str]
    tokens_used: int

    # Extraction, validation and ranking results
    parsed: Any
    dishes: List[Dict[str, Any]]
    menu_insights: Dict[str, Any]
    nutrition_summary: Dict[str, Any]
    fallback_used: bool

    # Performance tracking
    timings: Dict[str, float]
    total_ms: Optional[float]

    # Error handling: failure holds the typed exception, error its message
    failure: Optional[Exception]
    error: Optional[str]
