"""Award uploads application configuration.

Loads settings from two YAML files:
  * awards.settings.yaml: non-secret configuration
  * awards.secrets.yaml: secrets (never committed)

The settings path can be overridden with the ``AWARDS_SETTINGS`` environment
variable; the secrets file is looked up next to it.  Relative upload
directories are resolved against the directory holding the settings file.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("awards.settings.yaml")
SECRETS_FILE  = Path("awards.secrets.yaml")


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _resolve(path: str, base_dir: Path) -> str:
    candidate = Path(path)
    if candidate.is_absolute():
        return str(candidate)
    return str(base_dir / candidate)


# ---------------------------------------------------------------------------
# Secrets models
# ---------------------------------------------------------------------------


class AwsSecrets(BaseModel):
    access_key_id:     Optional[str] = None
    secret_access_key: Optional[str] = None
    region:            Optional[str] = "us-east-1"


class Secrets(BaseModel):
    aws: AwsSecrets = Field(default_factory=AwsSecrets)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class LoggingSettings(BaseModel):
    level: str = "info"


class UploadSettings(BaseModel):
    """Where award images are staged, stored and served from."""
    route:                  str  = "/api/plugins/ns-awards/images"
    field_name:             str  = "award"
    entity_header:          str  = "x-ns-award-entity-id"
    uid_header:             str  = "x-uid"
    upload_path:            str  = "./public/uploads"
    upload_dir:             str  = "ns-awards"
    staging_dir:            str  = "./public/uploads/staging"
    relative_path:          str  = ""
    upload_url:             str  = "/assets/uploads"
    max_file_size_bytes:    int  = 10 * 1024 * 1024
    strict_staging_cleanup: bool = False

    @property
    def permanent_dir(self) -> Path:
        return Path(self.upload_path) / self.upload_dir


class RemoteSettings(BaseModel):
    """Remote image capability.  Disabled means every upload stays local."""
    enabled:         bool                = False
    provider:        Literal["s3"]       = "s3"
    bucket:          Optional[str]       = None
    prefix:          str                 = "ns-awards"
    public_base_url: Optional[str]       = None
    timeout_seconds: Optional[float]     = None


class AppSettings(BaseModel):
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    uploads: UploadSettings  = Field(default_factory=UploadSettings)
    remote:  RemoteSettings  = Field(default_factory=RemoteSettings)
    secrets: Secrets         = Field(default_factory=Secrets)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(settings_path: Optional[Path] = None) -> AppSettings:
    """Load and merge settings + secrets into a single *AppSettings* object."""
    if settings_path is None:
        settings_path = Path(os.environ.get("AWARDS_SETTINGS", SETTINGS_FILE))
    settings_path = Path(settings_path)
    secrets_path = settings_path.parent / SECRETS_FILE.name

    settings_data = _load_yaml(settings_path)
    secrets_data  = _load_yaml(secrets_path)

    # Merge: secrets live under the "secrets" key in AppSettings
    settings_data["secrets"] = secrets_data

    app_settings = AppSettings(**settings_data)

    base_dir = settings_path.resolve().parent
    uploads = app_settings.uploads
    uploads.upload_path = _resolve(uploads.upload_path, base_dir)
    uploads.staging_dir = _resolve(uploads.staging_dir, base_dir)

    logger.info(
        "Settings loaded (upload_path=%s, staging_dir=%s, remote.enabled=%s)",
        uploads.upload_path,
        uploads.staging_dir,
        app_settings.remote.enabled,
    )
    return app_settings


_config: Optional[AppSettings] = None


def get_config() -> AppSettings:
    """Return the process-wide settings, loading them on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[AppSettings]) -> None:
    """Set (or clear) the process-wide settings."""
    global _config
    _config = config
