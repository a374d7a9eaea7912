"""
Wrapper around the DynamoDB table holding access token records.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from token_gate.clients.errors import StoreConflictError, StoreUnavailableError
from token_gate.core.config import StoreSettings

_CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class DynamoDBTokenTable:
    """Keyed operations on a table partitioned by owner (pk) and token (sk)."""

    def __init__(self, settings: StoreSettings, resource: Any | None = None) -> None:
        self._settings = settings
        if resource is None:
            config = Config(
                connect_timeout=settings.timeout_seconds,
                read_timeout=settings.timeout_seconds,
                retries={"total_max_attempts": 1},
            )
            resource = boto3.resource(
                "dynamodb",
                region_name=settings.region_name,
                endpoint_url=settings.endpoint_url,
                config=config,
            )
        self._table = resource.Table(settings.table_name)

    @property
    def table(self) -> Any:
        return self._table

    def get_item(self, *, partition_key: str, sort_key: str) -> Optional[Dict[str, Any]]:
        """Retrieve an item using its full key."""
        try:
            response = self._table.get_item(
                Key={"pk": partition_key, "sk": sort_key}, ConsistentRead=True
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreUnavailableError(f"DynamoDB get_item failed: {exc}") from exc
        return response.get("Item")

    def delete_item(self, *, partition_key: str, sort_key: str) -> bool:
        """Delete an item; returns False when it was already gone."""
        try:
            response = self._table.delete_item(
                Key={"pk": partition_key, "sk": sort_key}, ReturnValues="ALL_OLD"
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreUnavailableError(f"DynamoDB delete_item failed: {exc}") from exc
        return bool(response.get("Attributes"))

    def replace_item(self, item: Dict[str, Any]) -> None:
        """Replace an existing item, failing if it no longer exists."""
        try:
            self._table.put_item(
                Item=item,
                ConditionExpression=Attr("pk").exists() & Attr("sk").exists(),
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == _CONDITIONAL_CHECK_FAILED:
                raise StoreConflictError(
                    f"Record {item.get('pk')}/{item.get('sk')} no longer exists."
                ) from exc
            raise StoreUnavailableError(f"DynamoDB put_item failed: {exc}") from exc
        except BotoCoreError as exc:
            raise StoreUnavailableError(f"DynamoDB put_item failed: {exc}") from exc

    def scan_by_sort_key(self, sort_key: str) -> list[Dict[str, Any]]:
        """Full-table scan matching on the sort key alone."""
        items: list[Dict[str, Any]] = []
        kwargs: Dict[str, Any] = {"FilterExpression": Attr("sk").eq(sort_key)}
        try:
            while True:
                response = self._table.scan(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (BotoCoreError, ClientError) as exc:
            raise StoreUnavailableError(f"DynamoDB scan failed: {exc}") from exc
        return items


__all__ = ["DynamoDBTokenTable"]
