# gemini_client.py
import base64
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx
import requests
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ....errors import (
    EmptyUpstreamResponseError,
    InternalFailureError,
    InvalidInputError,
    MenuAnalysisError,
    UpstreamUnauthorizedError,
    UpstreamUnavailableError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)


def make_client(api_key: Optional[str], project: Optional[str], location: str,
                timeout_s: Optional[float] = None) -> genai.Client:
    http_options = types.HttpOptions(timeout=int(timeout_s * 1000)) if timeout_s else None

    # Prioritize API key authentication; fall back to Vertex AI project credentials
    if api_key:
        return genai.Client(api_key=api_key, http_options=http_options)

    if project:
        try:
            return genai.Client(vertexai=True, project=project, location=location, http_options=http_options)
        except Exception as e:
            raise RuntimeError(f"Failed to initialize Vertex AI client: {e}")

    raise RuntimeError("Provide GOOGLE_API_KEY for API key authentication or GOOGLE_CLOUD_PROJECT for Vertex AI.")


def fetch_image_part(url: str, max_bytes: int, timeout_s: float = 15.0) -> types.Part:
    """
    Download the uploaded menu photo and wrap it as an inline image part.

    Raises:
        InvalidInputError: URL unreachable, redirected, not an image, or larger than max_bytes
    """
    try:
        # The host allow-list only vouches for this exact URL
        with requests.get(url, stream=True, timeout=timeout_s, allow_redirects=False) as resp:
            if resp.is_redirect:
                raise InvalidInputError("Image URL must not redirect")
            resp.raise_for_status()
            mime = (resp.headers.get("Content-Type") or "").split(";")[0].strip().lower()
            if not mime.startswith("image/"):
                raise InvalidInputError("Image URL does not point to an image")
            data = bytearray()
            for chunk in resp.iter_content(chunk_size=64 * 1024):
                data.extend(chunk)
                if len(data) > max_bytes:
                    raise InvalidInputError("Image is too large")
    except requests.RequestException as e:
        raise InvalidInputError("Image URL could not be fetched", cause=e) from e
    if not data:
        raise InvalidInputError("Image URL returned no data")
    return types.Part.from_bytes(data=bytes(data), mime_type=mime)


def extract_text_from_response(resp) -> str:
    """Return JSON/text from parts; also decode inline_data if needed."""
    try:
        for cand in (getattr(resp, "candidates", []) or []):
            content = getattr(cand, "content", None)
            if not content: continue
            for part in (getattr(content, "parts", []) or []):
                t = getattr(part, "text", None)
                if isinstance(t, str) and t.strip():
                    return t
                inline = getattr(part, "inline_data", None)
                if inline:
                    data = getattr(inline, "data", None)
                    if isinstance(data, (bytes, bytearray)):
                        return data.decode("utf-8", "ignore")
                    if isinstance(data, str):
                        try:
                            return base64.b64decode(data).decode("utf-8", "ignore")
                        except Exception:
                            return data
        top = getattr(resp, "text", None)
        return top if isinstance(top, str) else ""
    except Exception:
        return ""


def extract_token_count(resp) -> int:
    usage = getattr(resp, "usage_metadata", None)
    total = getattr(usage, "total_token_count", None) if usage else None
    return int(total) if isinstance(total, int) else 0


def classify_upstream_error(exc: BaseException) -> MenuAnalysisError:
    """Map a model-call failure to the typed upstream error taxonomy."""
    if isinstance(exc, MenuAnalysisError):
        return exc
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return UpstreamTimeoutError("AI service timeout. Please try again.", cause=exc)

    code = getattr(exc, "code", None) if isinstance(exc, genai_errors.APIError) else None
    if code == 429:
        return UpstreamUnavailableError("API quota exceeded. Please try again later.", cause=exc)
    if code in (401, 403):
        return UpstreamUnauthorizedError("API access denied. Please check configuration.", cause=exc)
    if code in (408, 504):
        return UpstreamTimeoutError("AI service timeout. Please try again.", cause=exc)
    if isinstance(code, int) and code >= 500:
        return UpstreamUnavailableError("AI service unavailable. Please try again later.", cause=exc)
    if isinstance(exc, httpx.TransportError):
        return UpstreamUnavailableError("AI service unreachable. Please try again later.", cause=exc)

    msg = str(exc).lower()
    if "quota" in msg or "exhausted" in msg or "unavailable" in msg:
        return UpstreamUnavailableError("API quota exceeded. Please try again later.", cause=exc)
    if "unauthorized" in msg or "unauthenticated" in msg or "permission" in msg or "api key" in msg:
        return UpstreamUnauthorizedError("API access denied. Please check configuration.", cause=exc)
    if "timeout" in msg or "timed out" in msg or "deadline" in msg:
        return UpstreamTimeoutError("AI service timeout. Please try again.", cause=exc)
    return InternalFailureError("Failed to process menu with AI service", cause=exc)


@dataclass
class ModelReply:
    text: str
    tokens_used: int = 0


class GeminiMenuModel:
    """
    Capability handle for the Gemini vision model.

    One generate() call performs exactly one upstream request; retry policy
    belongs to the caller.
    """

    def __init__(self, client: Any, model: str, timeout_s: float = 50.0,
                 max_image_bytes: int = 10 * 1024 * 1024):
        self._client = client
        self.model = model
        self.timeout_s = timeout_s
        self.max_image_bytes = max_image_bytes

    def generate(self, image_url: str, prompt: str) -> ModelReply:
        image_part = fetch_image_part(image_url, self.max_image_bytes)
        cfg = types.GenerateContentConfig(
            temperature=0.2,
            max_output_tokens=8192,
        )
        try:
            resp = self._client.models.generate_content(
                model=self.model,
                contents=[types.Content(role="user", parts=[image_part, types.Part.from_text(text=prompt)])],
                config=cfg,
            )
        except Exception as e:
            raise classify_upstream_error(e) from e

        text = extract_text_from_response(resp) or getattr(resp, "text", "") or ""
        if not text.strip():
            raise EmptyUpstreamResponseError("Empty response from AI service")
        return ModelReply(text=text, tokens_used=extract_token_count(resp))


def init_model_client(settings) -> Optional[GeminiMenuModel]:
    """
    Build the model capability at startup.

    Args:
        settings: Mapping with GOOGLE_API_KEY, GOOGLE_CLOUD_PROJECT, ... (e.g. app.config)

    Returns:
        GeminiMenuModel, or None when credentials are missing or the client fails to build
    """
    try:
        client = make_client(
            api_key=settings.get("GOOGLE_API_KEY"),
            project=settings.get("GOOGLE_CLOUD_PROJECT"),
            location=settings.get("GOOGLE_CLOUD_LOCATION") or "global",
            timeout_s=settings.get("MODEL_TIMEOUT_SECONDS"),
        )
    except Exception as e:
        logger.warning("Gemini client not available, AI features disabled: %s", e)
        return None

    model = GeminiMenuModel(
        client,
        model=settings.get("DEFAULT_MODEL") or "gemini-2.5-flash",
        timeout_s=settings.get("MODEL_TIMEOUT_SECONDS") or 50.0,
        max_image_bytes=settings.get("MAX_IMAGE_BYTES") or 10 * 1024 * 1024,
    )
    logger.info("Gemini client initialized (model=%s)", model.model)
    return model
