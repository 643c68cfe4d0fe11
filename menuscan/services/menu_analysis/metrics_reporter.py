import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_COST_ALERT_THRESHOLD_EUR = 0.000045  # €0.045 per 1000 scans
DEFAULT_LATENCY_BUDGET_MS = 8000.0


@dataclass
class InvocationMetrics:
    """Per-invocation metrics for monitoring and cost tracking"""
    function_name: str
    execution_time_ms: float
    success: bool
    tokens_used: int = 0
    cost_estimate_eur: float = 0.0
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def performance_grade(execution_time_ms: float) -> str:
    if execution_time_ms <= 3000:
        return "excellent"
    if execution_time_ms <= 5000:
        return "good"
    if execution_time_ms <= 8000:
        return "acceptable"
    return "poor"


def estimate_cost(tokens_used: int, cost_per_1k_tokens_eur: float) -> float:
    if not tokens_used or not cost_per_1k_tokens_eur:
        return 0.0
    return tokens_used / 1000.0 * cost_per_1k_tokens_eur


def build_log_record(metrics: InvocationMetrics) -> Dict[str, Any]:
    tokens = metrics.tokens_used or 0
    cost = metrics.cost_estimate_eur or 0.0
    return {
        "timestamp": metrics.timestamp.isoformat(),
        "function_name": metrics.function_name,
        "execution_time_ms": metrics.execution_time_ms,
        "tokens_used": tokens,
        "cost_estimate_eur": cost,
        "success": metrics.success,
        "error": metrics.error,
        "cost_per_token": cost / tokens if tokens > 0 else 0,
        "performance_grade": performance_grade(metrics.execution_time_ms),
    }


def log_metrics(
    metrics: InvocationMetrics,
    cost_threshold_eur: float = DEFAULT_COST_ALERT_THRESHOLD_EUR,
    latency_budget_ms: float = DEFAULT_LATENCY_BUDGET_MS,
) -> Optional[Dict[str, Any]]:
    """
    Emit a structured metrics log line plus cost/latency warnings.

    Observes the pipeline only: any failure here is logged and swallowed.

    Returns:
        The logged record, or None when reporting failed
    """
    try:
        record = build_log_record(metrics)
        # Structured for log-based export (extra carries the raw dict)
        logger.info("function_metrics %s", record, extra={"metrics": record})

        if record["cost_estimate_eur"] > cost_threshold_eur:
            logger.warning(
                "High cost per scan detected: cost_eur=%s threshold_eur=%s function=%s",
                record["cost_estimate_eur"], cost_threshold_eur, metrics.function_name,
            )
        if record["execution_time_ms"] > latency_budget_ms:
            logger.warning(
                "High latency detected: execution_time_ms=%s threshold_ms=%s function=%s",
                record["execution_time_ms"], latency_budget_ms, metrics.function_name,
            )
        return record
    except Exception as e:
        logger.error("Failed to log metrics: %s", e)
        return None
