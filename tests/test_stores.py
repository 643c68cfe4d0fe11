import json

import pytest
from botocore.exceptions import ClientError

from menuscan.services.shared.dynamodb_store import ScanStore
from menuscan.services.shared.image_store import ImageStore


class FakeS3:
    def __init__(self, error=None):
        self.deleted = []
        self.error = error

    def delete_object(self, Bucket, Key):
        if self.error:
            raise self.error
        self.deleted.append((Bucket, Key))


class FakeDynamo:
    def __init__(self):
        self.items = []
        self.queries = []

    def put_item(self, TableName, Item):
        self.items.append(Item)

    def query(self, **kwargs):
        self.queries.append(kwargs)
        uid = kwargs["ExpressionAttributeValues"][":uid"]["S"]
        mine = [i for i in self.items if i["userId"]["S"] == uid]
        mine.sort(key=lambda i: i["createdAt"]["S"], reverse=not kwargs.get("ScanIndexForward", True))
        return {"Items": mine[: kwargs.get("Limit", len(mine))]}


@pytest.mark.parametrize("url, key", [
    ("https://menus-uploads.s3.us-east-1.amazonaws.com/uploads/u1/menu.jpg", "uploads/u1/menu.jpg"),
    ("https://s3.us-east-1.amazonaws.com/menus-uploads/uploads/u1/menu%20photo.jpg", "uploads/u1/menu photo.jpg"),
    ("https://other-bucket.s3.amazonaws.com/uploads/menu.jpg", None),
    ("https://menus-uploads.s3.amazonaws.com/", None),
])
def test_key_from_url(url, key):
    assert ImageStore("menus-uploads", client=FakeS3()).key_from_url(url) == key


def test_delete_image():
    s3 = FakeS3()
    store = ImageStore("menus-uploads", client=s3)
    assert store.delete_image("https://menus-uploads.s3.amazonaws.com/uploads/menu.jpg") is True
    assert s3.deleted == [("menus-uploads", "uploads/menu.jpg")]


def test_delete_image_failure_is_logged_not_raised(caplog):
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DeleteObject")
    store = ImageStore("menus-uploads", client=FakeS3(error=error))
    assert store.delete_image("https://menus-uploads.s3.amazonaws.com/uploads/menu.jpg") is False
    assert any("Failed to delete image" in r.message for r in caplog.records)


def test_delete_image_outside_bucket():
    s3 = FakeS3()
    assert ImageStore("menus-uploads", client=s3).delete_image("https://elsewhere.s3.amazonaws.com/a.jpg") is False
    assert s3.deleted == []


def test_put_and_list_scans():
    dynamo = FakeDynamo()
    store = ScanStore("menu-scans", client=dynamo)
    dishes = [{"name": "Crème brûlée", "calories": 450, "macros": {"protein": 6, "carbs": 40, "fat": 28},
               "flags": {"diets": ["vegetarian"], "allergens": ["dairy"]}}]

    scan = store.put_scan("user-1", "https://x.amazonaws.com/a.jpg", dishes, "gemini-2.5-flash", 1234.5)
    assert scan.createdAt == scan.updatedAt
    assert len(scan.id) == 32

    item = dynamo.items[0]
    assert item["userId"] == {"S": "user-1"}
    assert item["processingMs"] == {"N": "1234.5"}
    assert json.loads(item["dishes"]["S"]) == dishes

    listed = store.list_scans("user-1", limit=5)
    assert [s.model_dump() for s in listed] == [scan.model_dump()]
    assert dynamo.queries[0]["ScanIndexForward"] is False
    assert dynamo.queries[0]["Limit"] == 5
    assert store.list_scans("user-2") == []


def test_list_scans_newest_first():
    dynamo = FakeDynamo()
    store = ScanStore("menu-scans", client=dynamo)
    for ms in (1.0, 2.0):
        store.put_scan("user-1", "https://x.amazonaws.com/a.jpg", [], "gemini-2.5-flash", ms)
    dynamo.items[0]["createdAt"] = {"S": "2026-01-01T00:00:00+00:00"}
    dynamo.items[1]["createdAt"] = {"S": "2026-01-02T00:00:00+00:00"}
    assert [s.processingMs for s in store.list_scans("user-1")] == [2.0, 1.0]
