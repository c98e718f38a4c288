"""Remote image capability.

A remote capability is an externally registered hook that stores award
images somewhere other than the local disk.  Whether one is registered
decides, per request, which persistence strategy runs.

Contract
--------
::

    await capability.upload_image({
        "image": {...staged file fields, "name": original_filename},
        "uid":   "<acting user id>",
    })
    # -> {"name": "...", "url": "https://...", ...any other fields}

Errors raised by the capability propagate to the caller unchanged.

A module-level registration slot is filled in ``award_uploads/main.py`` from
config, and may be replaced at any time (tests, other plugins).
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"

# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

_capability: Optional["RemoteImageCapability"] = None


def get_remote_capability() -> Optional["RemoteImageCapability"]:
    """Return the registered remote capability, or None if there is none."""
    return _capability


def set_remote_capability(capability: Optional["RemoteImageCapability"]) -> None:
    """Register (replace, or clear with ``None``) the remote capability."""
    global _capability
    if capability is None:
        logger.info("[uploads] Remote image capability cleared")
    else:
        logger.info("[uploads] Remote image capability registered: %s", capability.name)
    _capability = capability


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class RemoteImageCapability(ABC):
    """Abstract base class for remote image stores."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in logs."""

    @abstractmethod
    async def upload_image(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Store ``payload["image"]`` on behalf of ``payload["uid"]``.

        Returns:
            A dict carrying at least ``name`` and ``url`` (fully qualified).

        Raises:
            Exception: On any store error; the pipeline reports it verbatim.
        """


# ---------------------------------------------------------------------------
# S3 implementation
# ---------------------------------------------------------------------------


class S3ImageCapability(RemoteImageCapability):
    """Remote capability backed by an S3 bucket.

    Objects are written to ``<prefix>/<uid>/<generated filename>``.  The
    returned URL uses ``public_base_url`` when configured (CDN, custom
    domain), otherwise the bucket's virtual-hosted S3 URL.

    Args:
        bucket:                Target bucket name.
        prefix:                Key prefix for award images.
        public_base_url:       Base URL objects are served from.
        aws_access_key_id:     AWS access key.  ``None`` → default credential chain.
        aws_secret_access_key: AWS secret access key.
        region_name:           AWS region.  Defaults to ``us-east-1``.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "ns-awards",
        public_base_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region_name: Optional[str] = None,
    ) -> None:
        self._bucket = bucket
        self._prefix = prefix.strip("/")
        self._region = region_name or DEFAULT_REGION
        self._public_base_url = (
            public_base_url or f"https://{bucket}.s3.{self._region}.amazonaws.com"
        ).rstrip("/")
        self._access_key = aws_access_key_id
        self._secret_key = aws_secret_access_key
        self._client: Optional[object] = None

    @property
    def name(self) -> str:
        return f"s3:{self._bucket}"

    def _get_client(self) -> object:
        """Return a cached boto3 s3 client."""
        if self._client is None:
            try:
                import boto3  # lazy import; not required when mocked in tests
            except ImportError as exc:
                raise ImportError(
                    "boto3 is required for S3ImageCapability. "
                    "Install it with: pip install boto3"
                ) from exc

            kwargs: dict = {"region_name": self._region}
            if self._access_key and self._secret_key:
                kwargs["aws_access_key_id"]     = self._access_key
                kwargs["aws_secret_access_key"] = self._secret_key

            self._client = boto3.client("s3", **kwargs)

        return self._client

    def _object_key(self, image: Dict[str, Any], uid: Any) -> str:
        parts = [self._prefix, str(uid), image["filename"]]
        return "/".join(p for p in parts if p)

    def _put(self, image: Dict[str, Any], key: str) -> None:
        client = self._get_client()
        with Path(image["path"]).open("rb") as body:
            client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=body,
                ContentType=image.get("mime_type") or "application/octet-stream",
            )

    async def upload_image(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        image = payload["image"]
        key = self._object_key(image, payload.get("uid"))

        logger.debug("[s3] put_object bucket=%s key=%s", self._bucket, key)
        await asyncio.to_thread(self._put, image, key)
        logger.info("[s3] Uploaded %s to s3://%s/%s", image.get("name"), self._bucket, key)

        return {
            "name": image.get("name") or image["filename"],
            "url": f"{self._public_base_url}/{key}",
        }
