"""Path and URL helpers for stored award images."""
from pathlib import Path
from typing import Any, Dict

from ..config import UploadSettings
from .schemas import FileRegistryEntry

URL_SCHEME_PREFIX = "http"


def is_remote_value(image: str) -> bool:
    """True when a stored image value is already a URL."""
    return image.startswith(URL_SCHEME_PREFIX)


def get_upload_path(settings: UploadSettings, filename: str) -> Path:
    """Permanent location of a locally stored award image."""
    return settings.permanent_dir / filename


def get_image_url(settings: UploadSettings, image: str) -> str:
    """Turn a stored image value into something a browser can load.

    URLs are returned unchanged; local filenames are joined onto the
    public upload URL.

    Examples:
        >>> get_image_url(UploadSettings(), "http://a/b")
        'http://a/b'
        >>> get_image_url(UploadSettings(), "award-1.png")
        '/assets/uploads/ns-awards/award-1.png'
    """
    if is_remote_value(image):
        return image

    segments = [settings.relative_path, settings.upload_url, settings.upload_dir, image]
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/" + "/".join(parts)


def is_local_file(descriptor: Dict[str, Any]) -> bool:
    """A merged descriptor is local when persistence gave it a local path."""
    return "local_path" in descriptor


def get_final_destination(entry: FileRegistryEntry) -> str:
    """The value the application stores as the award's image.

    Local files are stored by generated filename, remote files by URL.
    """
    descriptor = entry.descriptor()
    if is_local_file(descriptor):
        return descriptor["filename"]
    return descriptor["url"]


def is_within_upload_dir(settings: UploadSettings, path: Path) -> bool:
    """True when ``path`` resolves to somewhere inside the permanent upload directory."""
    return settings.permanent_dir.resolve() in path.resolve().parents
