"""AWS adapters: S3 snapshots, DynamoDB tag index, CloudFront invalidation.

boto3 clients are blocking, so every call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from collections.abc import Collection, Sequence
from pathlib import Path
from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from routesnap.adapters.base import MAX_BATCH_SIZE
from routesnap.chunks import chunked
from routesnap.errors import IndexWriteError, InvalidationError
from routesnap.types import IndexEntry, SyncSummary

log = structlog.get_logger()

# DeleteObjects accepts at most this many keys per request.
_S3_DELETE_BATCH = 1000


def _client(service: str, client: Any) -> Any:
    if client is not None:
        return client
    import boto3

    return boto3.client(service)


class AsyncS3SnapshotStore:
    """Snapshot store on an S3 bucket."""

    def __init__(self, bucket: str, *, client: Any = None) -> None:
        self._bucket = bucket
        self._client = _client("s3", client)

    def _get(self, key: str) -> bytes | None:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return response["Body"].read()

    async def get(self, key: str) -> bytes | None:
        """Get a snapshot body by key."""
        return await asyncio.to_thread(self._get, key)

    async def put(self, key: str, body: bytes) -> None:
        """Store a snapshot body as JSON."""
        await asyncio.to_thread(
            self._client.put_object,
            Bucket=self._bucket,
            Key=key,
            Body=body,
            ContentType="application/json",
        )

    async def delete(self, key: str) -> None:
        """Delete a snapshot (S3 treats a missing key as success)."""
        await asyncio.to_thread(
            self._client.delete_object, Bucket=self._bucket, Key=key
        )

    def _list(self, prefix: str) -> dict[str, str]:
        """Map of key -> ETag under prefix."""
        remote: dict[str, str] = {}
        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self._bucket, Prefix=f"{prefix}/"):
            for obj in page.get("Contents", []):
                remote[obj["Key"]] = obj.get("ETag", "").strip('"')
        return remote

    def _sync(
        self, local_dir: Path, prefix: str, protect: Collection[str]
    ) -> SyncSummary:
        summary = SyncSummary()
        remote = self._list(prefix)

        local: set[str] = set()
        files = sorted(local_dir.rglob("*")) if local_dir.is_dir() else []
        for file in files:
            if not file.is_file():
                continue
            key = f"{prefix}/{file.relative_to(local_dir).as_posix()}"
            local.add(key)
            body = file.read_bytes()
            # Single-part uploads carry the body's MD5 as ETag
            if remote.get(key) == hashlib.md5(body).hexdigest():
                summary.unchanged.append(key)
                continue
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=body,
                ContentType="application/json",
            )
            summary.uploaded.append(key)

        stale = sorted(
            k
            for k in remote
            if k.startswith(f"{prefix}/") and k not in local and k not in protect
        )
        for chunk in chunked(stale, _S3_DELETE_BATCH):
            response = self._client.delete_objects(
                Bucket=self._bucket,
                Delete={"Objects": [{"Key": k} for k in chunk], "Quiet": True},
            )
            errors = response.get("Errors") or []
            if errors:
                raise RuntimeError(
                    f"Failed to delete {len(errors)} object(s), "
                    f"first: {errors[0].get('Key')} ({errors[0].get('Code')})"
                )
            summary.deleted.extend(chunk)

        log.debug(
            "s3_sync_done",
            bucket=self._bucket,
            prefix=prefix,
            uploaded=len(summary.uploaded),
            unchanged=len(summary.unchanged),
            deleted=len(summary.deleted),
        )
        return summary

    async def sync_directory(
        self,
        local_dir: Path,
        prefix: str,
        *,
        protect: Collection[str] = (),
    ) -> SyncSummary:
        """Mirror local_dir onto prefix, skipping unchanged objects."""
        return await asyncio.to_thread(self._sync, local_dir, prefix, protect)


class AsyncDynamoIndexStore:
    """Tag index on a DynamoDB table.

    Table key: ``tag`` (hash) + ``route`` (range), with a global secondary
    index (``byRoute`` by default) keyed on ``route``.
    """

    def __init__(
        self,
        table_name: str,
        *,
        route_index: str = "byRoute",
        client: Any = None,
    ) -> None:
        self._table = table_name
        self._route_index = route_index
        self._client = _client("dynamodb", client)

    def _query(
        self, key: str, value: str, projection: str, index: str | None
    ) -> list[str]:
        params: dict[str, Any] = {
            "TableName": self._table,
            "KeyConditionExpression": "#k = :v",
            "ExpressionAttributeNames": {"#k": key, "#p": projection},
            "ExpressionAttributeValues": {":v": {"S": value}},
            "ProjectionExpression": "#p",
        }
        if index is not None:
            params["IndexName"] = index

        values: list[str] = []
        paginator = self._client.get_paginator("query")
        for page in paginator.paginate(**params):
            for item in page.get("Items", []):
                attr = item.get(projection, {}).get("S")
                if isinstance(attr, str):
                    values.append(attr)
        return values

    async def query_by_tag(self, tag_key: str) -> list[str]:
        """Route keys stored under a tag key."""
        return await asyncio.to_thread(self._query, "tag", tag_key, "route", None)

    async def query_by_route(self, route_key: str) -> list[str]:
        """Tag keys stored under a route key (via the route index)."""
        return await asyncio.to_thread(
            self._query, "route", route_key, "tag", self._route_index
        )

    def _write(self, requests: list[dict[str, Any]]) -> None:
        if len(requests) > MAX_BATCH_SIZE:
            raise ValueError(
                f"batch of {len(requests)} entries exceeds limit of {MAX_BATCH_SIZE}"
            )
        if not requests:
            return
        response = self._client.batch_write_item(
            RequestItems={self._table: requests}
        )
        unprocessed = response.get("UnprocessedItems", {}).get(self._table, [])
        if unprocessed:
            raise IndexWriteError(
                f"{len(unprocessed)} of {len(requests)} index writes unprocessed",
                unprocessed=len(unprocessed),
            )

    @staticmethod
    def _key(entry: IndexEntry) -> dict[str, Any]:
        return {"tag": {"S": entry.tag}, "route": {"S": entry.route}}

    async def batch_put(self, entries: Sequence[IndexEntry]) -> None:
        """Insert entries with one BatchWriteItem call."""
        requests = [{"PutRequest": {"Item": self._key(e)}} for e in entries]
        await asyncio.to_thread(self._write, requests)

    async def batch_delete(self, entries: Sequence[IndexEntry]) -> None:
        """Delete entries with one BatchWriteItem call."""
        requests = [{"DeleteRequest": {"Key": self._key(e)}} for e in entries]
        await asyncio.to_thread(self._write, requests)


class AsyncCloudFrontCdn:
    """Invalidation on a CloudFront distribution."""

    def __init__(self, distribution_id: str, *, client: Any = None) -> None:
        self._distribution_id = distribution_id
        self._client = _client("cloudfront", client)

    def _invalidate(self, paths: list[str]) -> str:
        try:
            response = self._client.create_invalidation(
                DistributionId=self._distribution_id,
                InvalidationBatch={
                    "CallerReference": str(time.time_ns()),
                    "Paths": {"Quantity": len(paths), "Items": paths},
                },
            )
        except (BotoCoreError, ClientError) as e:
            raise InvalidationError(str(e)) from e
        return str(response["Invalidation"]["Id"])

    async def invalidate(self, paths: Sequence[str]) -> str:
        """Submit one invalidation batch; returns the invalidation id."""
        return await asyncio.to_thread(self._invalidate, list(paths))
