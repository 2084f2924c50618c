"""
Object Storage Client

Uploads, lists and removes blobs under a resource-scoped path prefix
(``{resourceId}/...``) and maps between storage paths and public URLs.
"""

import logging
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request
from starlette.concurrency import run_in_threadpool

from contenthub.config import settings
from contenthub.exceptions import StorageError

logger = logging.getLogger(__name__)


class ObjectStorage:
    """
    Storage operations used by the content services.

    Subclasses implement ``upload``, ``remove`` and ``list``; URL mapping
    and folder deletion are shared.
    """

    def __init__(self, public_base_url: str, delete_max_passes: int = 5):
        self.public_base_url = public_base_url.rstrip("/")
        self.delete_max_passes = delete_max_passes

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "image/webp",
        upsert: bool = True,
    ) -> str:
        raise NotImplementedError

    async def remove(self, bucket: str, paths: list[str]) -> None:
        raise NotImplementedError

    async def list(self, bucket: str, folder: str) -> list[str]:
        raise NotImplementedError

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/{bucket}/{path}"

    def path_from_public_url(self, bucket: str, url: str) -> str | None:
        """Return the object path inside ``bucket`` for a public URL, or None."""
        if not url:
            return None
        marker = f"/{bucket}/"
        url_path = unquote(urlparse(url).path)
        index = url_path.find(marker)
        if index == -1:
            return None
        path = url_path[index + len(marker):]
        return path or None

    async def delete_folder(self, bucket: str, folder: str) -> int:
        """
        Remove every object under ``folder/``.

        The folder is re-listed after each removal pass until it comes back
        empty. Raises StorageError if objects remain after the last pass.
        """
        prefix = folder.rstrip("/") + "/"
        removed = 0

        for attempt in range(1, self.delete_max_passes + 1):
            paths = await self._list_folder(bucket, prefix)
            if not paths:
                logger.info(f"Storage folder {bucket}/{prefix} is empty ({removed} objects removed)")
                return removed

            await self.remove(bucket, paths)
            removed += len(paths)
            logger.debug(f"Pass {attempt}: removed {len(paths)} objects from {bucket}/{prefix}")

        remaining = await self._list_folder(bucket, prefix)
        if remaining:
            raise StorageError(
                f"Storage folder '{prefix}' still has {len(remaining)} objects after {self.delete_max_passes} passes",
                bucket=bucket,
                paths=remaining,
            )
        return removed

    async def _list_folder(self, bucket: str, prefix: str):
        # never touch anything outside the folder, whatever list() returned
        return [path for path in await self.list(bucket, prefix) if path.startswith(prefix)]


class S3Storage(ObjectStorage):
    """S3-compatible storage backed by boto3."""

    def __init__(
        self,
        endpoint_url: str | None,
        access_key: str | None,
        secret_key: str | None,
        region: str,
        public_base_url: str,
        delete_max_passes: int = 5,
    ):
        super().__init__(public_base_url=public_base_url, delete_max_passes=delete_max_passes)
        self.s3_client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )
        logger.info(f"S3 storage client initialized (endpoint={endpoint_url or 'aws'}, region={region})")

    def _exists(self, bucket: str, path: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=bucket, Key=path)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    def _put(self, bucket: str, path: str, data: bytes, content_type: str, upsert: bool) -> None:
        if not upsert and self._exists(bucket, path):
            raise StorageError(f"Object '{path}' already exists", bucket=bucket, paths=[path])
        self.s3_client.put_object(Bucket=bucket, Key=path, Body=data, ContentType=content_type)

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "image/webp",
        upsert: bool = True,
    ) -> str:
        try:
            await run_in_threadpool(self._put, bucket, path, data, content_type, upsert)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Upload to {bucket}/{path} failed: {e}")
            raise StorageError(f"File upload failed: {e}", bucket=bucket, paths=[path]) from e

        logger.info(f"Uploaded {len(data)} bytes to {bucket}/{path}")
        return self.get_public_url(bucket, path)

    def _delete_objects(self, bucket: str, paths: list[str]) -> list[dict]:
        errors = []
        # delete_objects accepts at most 1000 keys per call
        for start in range(0, len(paths), 1000):
            chunk = paths[start:start + 1000]
            response = self.s3_client.delete_objects(
                Bucket=bucket,
                Delete={"Objects": [{"Key": key} for key in chunk], "Quiet": True},
            )
            errors.extend(response.get("Errors", []))
        return errors

    async def remove(self, bucket: str, paths: list[str]) -> None:
        if not paths:
            return
        try:
            errors = await run_in_threadpool(self._delete_objects, bucket, paths)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Removing {len(paths)} objects from {bucket} failed: {e}")
            raise StorageError(f"File deletion failed: {e}", bucket=bucket, paths=paths) from e

        if errors:
            failed = [error.get("Key") for error in errors]
            logger.error(f"Could not remove {len(failed)} objects from {bucket}: {failed}")
            raise StorageError("File deletion failed", bucket=bucket, paths=failed)

    def _list_keys(self, bucket: str, prefix: str) -> list[str]:
        keys = []
        paginator = self.s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            keys.extend(item["Key"] for item in page.get("Contents", []))
        return keys

    async def list(self, bucket: str, folder: str) -> list[str]:
        try:
            return await run_in_threadpool(self._list_keys, bucket, folder)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Listing {bucket}/{folder} failed: {e}")
            raise StorageError(f"File listing failed: {e}", bucket=bucket) from e


def create_storage() -> ObjectStorage:
    return S3Storage(
        endpoint_url=settings.storage_endpoint_url,
        access_key=settings.storage_access_key,
        secret_key=settings.storage_secret_key,
        region=settings.storage_region,
        public_base_url=settings.storage_public_base_url,
        delete_max_passes=settings.storage_delete_max_passes,
    )


def get_storage(request: Request) -> ObjectStorage:
    """FastAPI dependency returning the storage client built at startup."""
    return request.app.state.storage
