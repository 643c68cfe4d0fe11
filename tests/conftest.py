"""
Pytest configuration and shared fixtures.
The model, S3 and DynamoDB collaborators are replaced by in-memory fakes.
"""

from typing import Any, Dict, List, Optional

import pytest

from menuscan import create_app
from menuscan.config.settings import TestingConfig
from menuscan.models.menu import MenuScan
from menuscan.services.shared.gemini.gemini_client import ModelReply

IMAGE_URL = "https://menus-uploads.s3.us-east-1.amazonaws.com/uploads/u1/menu.jpg"


class FakeMenuModel:
    """Stands in for GeminiMenuModel: returns queued replies or raises queued errors."""

    model = "gemini-test"

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes: List[Any] = list(outcomes)
        self.calls: List[Dict[str, str]] = []

    def generate(self, image_url: str, prompt: str) -> ModelReply:
        self.calls.append({"image_url": image_url, "prompt": prompt})
        outcome = self.outcomes.pop(0) if self.outcomes else ""
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, ModelReply):
            return outcome
        return ModelReply(text=outcome, tokens_used=0)


class FakeImageStore:
    def __init__(self, fail: bool = False) -> None:
        self.deleted: List[str] = []
        self.fail = fail

    def delete_image(self, url: str) -> bool:
        if self.fail:
            raise RuntimeError("s3 exploded")
        self.deleted.append(url)
        return True


class FakeScanStore:
    def __init__(self, fail: bool = False) -> None:
        self.scans: List[MenuScan] = []
        self.fail = fail

    def put_scan(self, user_id: str, image_url: str, dishes, model: str, processing_ms: float) -> MenuScan:
        if self.fail:
            raise RuntimeError("dynamodb exploded")
        stamp = f"2026-01-01T00:00:{len(self.scans):02d}+00:00"
        scan = MenuScan(
            id=f"scan-{len(self.scans) + 1}",
            userId=user_id,
            imageUrl=image_url,
            dishes=dishes,
            model=model,
            processingMs=processing_ms,
            createdAt=stamp,
            updatedAt=stamp,
        )
        self.scans.append(scan)
        return scan

    def list_scans(self, user_id: str, limit: int = 20) -> List[MenuScan]:
        mine = [s for s in self.scans if s.userId == user_id]
        return sorted(mine, key=lambda s: s.createdAt, reverse=True)[:limit]


TACO_JSON = (
    '[{"name":"Taco","calories":300,"macros":{"protein":10,"carbs":30,"fat":8},'
    '"flags":{"diets":[],"allergens":[]}}]'
)


@pytest.fixture
def taco_json() -> str:
    return TACO_JSON


@pytest.fixture
def image_url() -> str:
    return IMAGE_URL


@pytest.fixture
def fake_model() -> FakeMenuModel:
    return FakeMenuModel(TACO_JSON)


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
def scan_store() -> FakeScanStore:
    return FakeScanStore()


@pytest.fixture
def make_app(image_store, scan_store):
    def _make(model_client: Optional[Any] = None, config_class=TestingConfig, **overrides):
        app = create_app(
            config_class,
            model_client=model_client,
            image_store=overrides.pop("image_store", image_store),
            scan_store=overrides.pop("scan_store", scan_store),
        )
        app.config.update(overrides)
        return app
    return _make


@pytest.fixture
def client(make_app, fake_model):
    return make_app(fake_model).test_client()
