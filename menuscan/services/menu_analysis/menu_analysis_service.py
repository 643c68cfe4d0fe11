import logging
import time
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ...errors import (
    InternalFailureError,
    InvalidInputError,
    MenuAnalysisError,
    UnauthenticatedError,
)
from ...graphs import run_menu_analysis
from ...models.menu import AnalyzeMenuRequest, AnalyzeMenuResponse
from ...utils.helpers import is_allowed_image_url, truncate_url
from .metrics_reporter import InvocationMetrics, estimate_cost, log_metrics

logger = logging.getLogger(__name__)

FUNCTION_NAME = "analyzeMenu"


class MenuAnalysisService:
    """Handles one analyzeMenu request end to end.

    Collaborators are capability handles created at startup; image_store and
    scan_store may be None when the deployment does not configure them.
    """

    def __init__(self, settings, model_client=None, image_store=None, scan_store=None):
        self.settings = settings
        self.model_client = model_client
        self.image_store = image_store
        self.scan_store = scan_store

    @property
    def model_name(self) -> str:
        return getattr(self.model_client, "model", None) or self.settings.get("DEFAULT_MODEL")

    def parse_request(self, payload: Any) -> AnalyzeMenuRequest:
        if not isinstance(payload, dict):
            raise InvalidInputError("JSON body required")
        try:
            req = AnalyzeMenuRequest(**payload)
        except ValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            field = ".".join(str(p) for p in first.get("loc", ())) or "body"
            raise InvalidInputError(f"Invalid {field}: {first.get('msg', 'invalid value')}") from e

        if not is_allowed_image_url(req.imageUrl, self.settings.get("ALLOWED_IMAGE_HOSTS") or ()):
            raise InvalidInputError("Invalid image URL - must be an uploaded menu photo")
        return req

    def analyze(self, payload: Any, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Run the analysis pipeline for one request.

        Returns:
            {"dishes", "model", "processingMs"} (+ "scanId" when persisted,
            + "menuInsights"/"nutritionSummary" for the advanced tier)

        Raises:
            InvalidInputError: the request itself is invalid
            InternalFailureError: any pipeline or upstream failure (generic message)
        """
        t0 = time.perf_counter()
        req: Optional[AnalyzeMenuRequest] = None

        try:
            req = self.parse_request(payload)
            logger.info(
                "Processing menu analysis request: image=%s prefs=%s",
                truncate_url(req.imageUrl), req.userPrefs,
            )
            result = run_menu_analysis(
                req.imageUrl,
                req.userPrefs,
                self.model_client,
                strategy=self.settings.get("MENU_ANALYSIS_STRATEGY") or "basic",
            )
        except Exception as e:
            processing_ms = self._elapsed_ms(t0)
            code = e.code if isinstance(e, MenuAnalysisError) else type(e).__name__
            logger.error(
                "Menu analysis failed: code=%s detail=%s error=%s processing_ms=%s",
                code, getattr(e, "detail_kind", None), e, processing_ms,
                exc_info=not isinstance(e, MenuAnalysisError),
            )
            self._report(processing_ms, success=False, error=f"{code}: {e}")
            if req is not None:
                self._delete_image(req.imageUrl)
            if isinstance(e, (InvalidInputError, UnauthenticatedError)):
                raise
            # Upstream internals stay in the server log
            raise InternalFailureError("Failed to analyze menu", cause=e) from e

        self._delete_image(req.imageUrl)
        processing_ms = self._elapsed_ms(t0)

        tokens = result.get("tokens_used", 0)
        cost = estimate_cost(tokens, self.settings.get("COST_PER_1K_TOKENS_EUR") or 0.0)
        self._report(processing_ms, success=True, tokens=tokens, cost=cost)

        response = AnalyzeMenuResponse(
            dishes=result["dishes"],
            model=self.model_name,
            processingMs=processing_ms,
        )
        if user_id:
            response.scanId = self._persist(user_id, req.imageUrl, response)

        body = response.model_dump(exclude_none=True)
        if "menuInsights" in result:
            body["menuInsights"] = result["menuInsights"]
            body["nutritionSummary"] = result["nutritionSummary"]

        logger.info(
            "Menu analysis completed: processing_ms=%s dish_count=%d tier=%s fallback=%s",
            processing_ms, len(body["dishes"]), result.get("tier"), result.get("fallback_used"),
        )
        return body

    def list_scans(self, user_id: Optional[str], limit: int = 20):
        if not user_id:
            raise UnauthenticatedError("User must be authenticated")
        if self.scan_store is None:
            return []
        return self.scan_store.list_scans(user_id, limit=limit)

    @staticmethod
    def _elapsed_ms(t0: float) -> float:
        return round((time.perf_counter() - t0) * 1000.0, 2)

    def _report(self, processing_ms: float, success: bool, tokens: int = 0,
                cost: float = 0.0, error: Optional[str] = None) -> None:
        log_metrics(
            InvocationMetrics(
                function_name=FUNCTION_NAME,
                execution_time_ms=processing_ms,
                success=success,
                tokens_used=tokens,
                cost_estimate_eur=cost,
                error=error,
            ),
            cost_threshold_eur=self.settings.get("COST_ALERT_THRESHOLD_EUR") or 0.000045,
            latency_budget_ms=self.settings.get("LATENCY_BUDGET_MS") or 8000.0,
        )

    def _delete_image(self, image_url: str) -> None:
        if self.image_store is None:
            return
        try:
            self.image_store.delete_image(image_url)
        except Exception as e:
            logger.warning("Failed to delete image %s: %s", truncate_url(image_url), e)

    def _persist(self, user_id: str, image_url: str, response: AnalyzeMenuResponse) -> Optional[str]:
        if self.scan_store is None:
            return None
        try:
            scan = self.scan_store.put_scan(
                user_id=user_id,
                image_url=image_url,
                dishes=response.dishes,
                model=response.model,
                processing_ms=response.processingMs,
            )
        except Exception as e:
            logger.warning("Failed to persist scan for user %s: %s", user_id, e)
            return None
        return scan.id
