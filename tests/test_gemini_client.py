from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors
from google.genai import types

from menuscan.errors import (
    EmptyUpstreamResponseError,
    InternalFailureError,
    InvalidInputError,
    UpstreamTimeoutError,
    UpstreamUnauthorizedError,
    UpstreamUnavailableError,
)
from menuscan.services.shared.gemini import gemini_client
from menuscan.services.shared.gemini.gemini_client import (
    GeminiMenuModel,
    classify_upstream_error,
    fetch_image_part,
    extract_token_count,
    init_model_client,
)


def api_error(cls, code, status, message="upstream said no"):
    return cls(code, {"error": {"code": code, "message": message, "status": status}})


@pytest.mark.parametrize("exc, expected", [
    (api_error(genai_errors.ClientError, 429, "RESOURCE_EXHAUSTED"), UpstreamUnavailableError),
    (api_error(genai_errors.ServerError, 503, "UNAVAILABLE"), UpstreamUnavailableError),
    (api_error(genai_errors.ServerError, 500, "INTERNAL"), UpstreamUnavailableError),
    (api_error(genai_errors.ClientError, 401, "UNAUTHENTICATED"), UpstreamUnauthorizedError),
    (api_error(genai_errors.ClientError, 403, "PERMISSION_DENIED"), UpstreamUnauthorizedError),
    (api_error(genai_errors.ServerError, 504, "DEADLINE_EXCEEDED"), UpstreamTimeoutError),
    (httpx.ReadTimeout("read timed out"), UpstreamTimeoutError),
    (TimeoutError(), UpstreamTimeoutError),
    (httpx.ConnectError("connection refused"), UpstreamUnavailableError),
    (RuntimeError("Quota exceeded for project"), UpstreamUnavailableError),
    (RuntimeError("invalid API key"), UpstreamUnauthorizedError),
    (RuntimeError("deadline passed"), UpstreamTimeoutError),
    (ValueError("something else entirely"), InternalFailureError),
])
def test_classify_upstream_error(exc, expected):
    err = classify_upstream_error(exc)
    assert type(err) is expected
    assert err.kind == "internal"
    assert err.cause is exc


def test_detail_kinds():
    assert classify_upstream_error(
        api_error(genai_errors.ClientError, 429, "RESOURCE_EXHAUSTED")).detail_kind == "resource-exhausted"
    assert classify_upstream_error(httpx.ReadTimeout("slow")).detail_kind == "deadline-exceeded"


def test_already_typed_errors_pass_through():
    err = InvalidInputError("bad image")
    assert classify_upstream_error(err) is err


class FakeModels:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append(model)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def no_download(monkeypatch):
    monkeypatch.setattr(gemini_client, "fetch_image_part",
                        lambda url, max_bytes: types.Part.from_text(text="image"))


def make_model(models):
    return GeminiMenuModel(SimpleNamespace(models=models), model="gemini-2.5-flash")


def test_generate_returns_text_and_tokens(no_download):
    resp = SimpleNamespace(candidates=[], text='[{"name":"Taco"}]',
                           usage_metadata=SimpleNamespace(total_token_count=321))
    models = FakeModels(result=resp)
    reply = make_model(models).generate("https://x.amazonaws.com/m.jpg", "prompt")
    assert reply.text == '[{"name":"Taco"}]'
    assert reply.tokens_used == 321
    assert models.calls == ["gemini-2.5-flash"]


def test_generate_empty_output(no_download):
    models = FakeModels(result=SimpleNamespace(candidates=[], text="   "))
    with pytest.raises(EmptyUpstreamResponseError):
        make_model(models).generate("https://x.amazonaws.com/m.jpg", "prompt")


def test_generate_classifies_failures(no_download):
    models = FakeModels(error=api_error(genai_errors.ClientError, 429, "RESOURCE_EXHAUSTED"))
    with pytest.raises(UpstreamUnavailableError):
        make_model(models).generate("https://x.amazonaws.com/m.jpg", "prompt")
    assert len(models.calls) == 1


def test_extract_token_count_defaults_to_zero():
    assert extract_token_count(SimpleNamespace()) == 0
    assert extract_token_count(SimpleNamespace(usage_metadata=SimpleNamespace(total_token_count=None))) == 0


def test_init_model_client_without_credentials():
    assert init_model_client({"GOOGLE_API_KEY": None, "GOOGLE_CLOUD_PROJECT": None}) is None


class FakeDownload:
    def __init__(self, body=b"\xff\xd8jpeg", content_type="image/jpeg", redirect_to=None):
        self.body = body
        self.headers = {"Content-Type": content_type}
        self.is_redirect = redirect_to is not None
        if redirect_to:
            self.headers["Location"] = redirect_to

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        pass

    def iter_content(self, chunk_size):
        yield self.body


@pytest.fixture
def downloads(monkeypatch):
    calls = []

    def install(response):
        def fake_get(url, **kwargs):
            calls.append({"url": url, **kwargs})
            return response
        monkeypatch.setattr(gemini_client.requests, "get", fake_get)
        return calls
    return install


def test_fetch_image_part(downloads):
    calls = downloads(FakeDownload())
    part = fetch_image_part("https://x.amazonaws.com/m.jpg", max_bytes=1024)
    assert part.inline_data.mime_type == "image/jpeg"
    assert calls[0]["allow_redirects"] is False


def test_fetch_image_part_rejects_redirects(downloads):
    downloads(FakeDownload(redirect_to="http://169.254.169.254/latest/meta-data/"))
    with pytest.raises(InvalidInputError, match="must not redirect"):
        fetch_image_part("https://x.amazonaws.com/m.jpg", max_bytes=1024)


@pytest.mark.parametrize("response", [
    FakeDownload(content_type="text/html"),
    FakeDownload(body=b"x" * 2048),
    FakeDownload(body=b""),
])
def test_fetch_image_part_rejects_bad_downloads(downloads, response):
    downloads(response)
    with pytest.raises(InvalidInputError):
        fetch_image_part("https://x.amazonaws.com/m.jpg", max_bytes=1024)
