import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import boto3

from ...models.menu import MenuScan


class ScanStore:
    """Minimal DynamoDB-backed store for menu scans.

    Table schema (provision this once):
      - TableName: configurable via SCANS_TABLE
      - Partition key: userId (S)
      - Sort key: createdAt (S, ISO-8601 UTC)
    Item shape:
      {
        userId: str, createdAt: str, id: str, imageUrl: str,
        model: str, processingMs: N, updatedAt: str,
        dishes: str (JSON-encoded list)
      }
    Writes are append-only; reads come back newest first.
    """

    def __init__(self, table_name: str, region: Optional[str] = None, client=None) -> None:
        self._table_name = table_name
        self._client = client or boto3.client("dynamodb", region_name=region)

    def put_scan(self, user_id: str, image_url: str, dishes: List[Dict[str, Any]],
                 model: str, processing_ms: float) -> MenuScan:
        now = datetime.now(timezone.utc).isoformat()
        scan = MenuScan(
            id=uuid.uuid4().hex,
            userId=user_id,
            imageUrl=image_url,
            dishes=dishes,
            model=model,
            processingMs=processing_ms,
            createdAt=now,
            updatedAt=now,
        )
        item = {
            "userId": {"S": scan.userId},
            "createdAt": {"S": scan.createdAt},
            "id": {"S": scan.id},
            "imageUrl": {"S": scan.imageUrl},
            "model": {"S": scan.model},
            "processingMs": {"N": str(scan.processingMs)},
            "updatedAt": {"S": scan.updatedAt},
            "dishes": {"S": json.dumps(scan.dishes, ensure_ascii=False)},
        }
        self._client.put_item(TableName=self._table_name, Item=item)
        return scan

    def list_scans(self, user_id: str, limit: int = 20) -> List[MenuScan]:
        res = self._client.query(
            TableName=self._table_name,
            KeyConditionExpression="userId = :uid",
            ExpressionAttributeValues={":uid": {"S": user_id}},
            ScanIndexForward=False,
            Limit=limit,
        )
        return [self._from_item(item) for item in res.get("Items", [])]

    @staticmethod
    def _from_item(item: Dict[str, Any]) -> MenuScan:
        def s(key: str, default: str = "") -> str:
            return (item.get(key) or {}).get("S", default)

        return MenuScan(
            id=s("id"),
            userId=s("userId"),
            imageUrl=s("imageUrl"),
            dishes=json.loads(s("dishes", "[]") or "[]"),
            model=s("model"),
            processingMs=float((item.get("processingMs") or {}).get("N", "0")),
            createdAt=s("createdAt"),
            updatedAt=s("updatedAt"),
        )
