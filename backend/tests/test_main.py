"""Tests for application startup wiring."""
from pathlib import Path

from fastapi.testclient import TestClient

from award_uploads.config import AppSettings, RemoteSettings, set_config
from award_uploads.main import create_app, register_remote_capability
from award_uploads.uploads.capability import S3ImageCapability, get_remote_capability


def test_remote_disabled_registers_nothing():
    register_remote_capability(AppSettings())
    assert get_remote_capability() is None


def test_remote_without_bucket_registers_nothing():
    register_remote_capability(AppSettings(remote=RemoteSettings(enabled=True)))
    assert get_remote_capability() is None


def test_remote_enabled_registers_s3():
    config = AppSettings(remote=RemoteSettings(enabled=True, bucket="awards-bucket"))
    register_remote_capability(config)

    capability = get_remote_capability()
    assert isinstance(capability, S3ImageCapability)
    assert capability.name == "s3:awards-bucket"


def test_lifespan_registers_capability(upload_settings):
    config = AppSettings(
        uploads=upload_settings,
        remote=RemoteSettings(enabled=True, bucket="awards-bucket"),
    )
    with TestClient(create_app(config)) as client:
        assert client.get("/health").status_code == 200
        capability = get_remote_capability()
        assert isinstance(capability, S3ImageCapability)
        assert capability.name == "s3:awards-bucket"


def test_custom_route(upload_settings):
    upload_settings.route = "/uploads/awards/"
    upload_settings.field_name = "image"
    client = TestClient(create_app(AppSettings(uploads=upload_settings)))
    resp = client.post(
        "/uploads/awards",
        files={"image": ("a.png", b"bytes", "image/png")},
        headers={"x-ns-award-entity-id": "e1"},
    )
    assert resp.status_code == 200
    assert resp.json()["storage"] == "local"


def test_app_uses_its_own_config_over_global(upload_settings, tmp_path):
    elsewhere = AppSettings()
    elsewhere.uploads.upload_path = str(tmp_path / "global-uploads")
    elsewhere.uploads.staging_dir = str(tmp_path / "global-staging")
    set_config(elsewhere)
    try:
        client = TestClient(create_app(AppSettings(uploads=upload_settings)))
        resp = client.post(
            "/api/plugins/ns-awards/images",
            files={"award": ("medal.png", b"bytes", "image/png")},
            headers={"x-ns-award-entity-id": "e1"},
        )
    finally:
        set_config(None)

    assert resp.status_code == 200
    filename = resp.json()["file"]["filename"]
    assert (upload_settings.permanent_dir / filename).exists()
    assert not Path(elsewhere.uploads.staging_dir).exists()
    assert not (tmp_path / "global-uploads").exists()
