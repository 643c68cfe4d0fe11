import logging
import time
from typing import Dict, Optional

logger = logging.getLogger("menuscan.pipeline")


def calculate_ms(t0: float) -> float:
    """Calculate milliseconds elapsed since t0."""
    return round((time.perf_counter() - t0) * 1000.0, 2)


def record_timing(timings: Dict[str, float], key: str, t0: float) -> float:
    """Add elapsed ms under key; a node that runs twice (tier fallback) accumulates."""
    ms = calculate_ms(t0)
    timings[key] = round(timings.get(key, 0.0) + ms, 2)
    return ms


def log_node_summary(node_name: str, success: bool, timing_ms: float, **kwargs) -> None:
    """Log a standardized node execution summary."""
    status = "ok" if success else "failed"
    details = " ".join(f"{k}={v}" for k, v in kwargs.items())
    level = logging.INFO if success else logging.WARNING
    logger.log(level, "[%s] %s %s took %s ms", node_name, status, details, timing_ms)


def log_pipeline_summary(timings: Dict[str, float], total_ms: float, error: Optional[str] = None) -> None:
    """Log a summary of the entire pipeline execution."""
    timing_details = ", ".join(f"{node} {ms} ms" for node, ms in timings.items())
    if error:
        logger.warning("[pipeline] failed after %s ms (%s): %s", total_ms, timing_details, error)
    else:
        logger.info("[pipeline] total %s ms (%s)", total_ms, timing_details)
