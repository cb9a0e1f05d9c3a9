from abc import ABC, abstractmethod
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from argo_render.datasources import DatasourceError


class StateFetchError(DatasourceError):
    """
    Raised when a Terraform state document cannot be retrieved.
    """


class StateFetcher(ABC):
    """
    Retrieves the raw Terraform state document stored under a key.
    """

    @abstractmethod
    def fetch(self, key: str) -> bytes: ...


class S3StateFetcher(StateFetcher):
    """
    Fetches Terraform state from S3. Keys have the form `<bucket>/<object-key>`.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @staticmethod
    def from_environment() -> "S3StateFetcher":
        """
        Create a fetcher with an S3 client configured from the environment (boto3's standard credential chain).
        """

        import boto3

        return S3StateFetcher(boto3.client("s3"))

    @staticmethod
    def split_key(key: str) -> tuple[str, str]:
        bucket, sep, object_key = key.partition("/")
        if not sep:
            raise StateFetchError(f"invalid key {key!r}: expected '<bucket>/<path>'")
        if not bucket:
            raise StateFetchError(f"invalid bucket in key {key!r}")
        if not object_key:
            raise StateFetchError(f"invalid object path in key {key!r}")
        return bucket, object_key

    def fetch(self, key: str) -> bytes:
        bucket, object_key = self.split_key(key)
        logger.info("Fetching Terraform state from s3://{}/{}", bucket, object_key)
        try:
            response = self._client.get_object(Bucket=bucket, Key=object_key)
        except (BotoCoreError, ClientError) as exc:
            raise StateFetchError(f"failed to fetch object {key}: {exc}") from exc
        body = response["Body"]
        try:
            return body.read()
        except (BotoCoreError, OSError) as exc:
            raise StateFetchError(f"failed to read object {key}: {exc}") from exc
        finally:
            body.close()


class CachingStateFetcher(StateFetcher):
    """
    Wraps another fetcher and remembers every document it returned, so each key is fetched at most once. An
    instance is meant to live for a single render job and is not thread-safe.
    """

    def __init__(self, origin: StateFetcher) -> None:
        self._origin = origin
        self._cache: dict[str, bytes] = {}

    def fetch(self, key: str) -> bytes:
        if key in self._cache:
            logger.trace("Using cached Terraform state for '{}'", key)
            return self._cache[key]
        data = self._origin.fetch(key)
        self._cache[key] = data
        return data
