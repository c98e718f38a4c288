"""Tests for settings loading and path resolution."""

from pathlib import Path

from award_uploads.config import AppSettings, get_config, load_config, set_config


def test_defaults_when_settings_file_missing(tmp_path):
    """A missing settings file yields defaults, resolved next to it."""
    cfg = load_config(settings_path=tmp_path / "awards.settings.yaml")

    assert cfg.uploads.route == "/api/plugins/ns-awards/images"
    assert cfg.uploads.field_name == "award"
    assert cfg.uploads.entity_header == "x-ns-award-entity-id"
    assert cfg.remote.enabled is False
    assert Path(cfg.uploads.upload_path) == tmp_path / "public" / "uploads"


def test_relative_upload_paths_resolve_from_settings_dir(tmp_path):
    """Relative upload and staging paths resolve from the settings file directory."""
    settings_file = tmp_path / "awards.settings.yaml"
    settings_file.write_text(
        "uploads:\n"
        "  upload_path: data/uploads\n"
        "  staging_dir: data/tmp\n"
        "  upload_dir: awards\n",
        encoding="utf-8",
    )

    cfg = load_config(settings_path=settings_file)

    assert Path(cfg.uploads.upload_path) == tmp_path / "data" / "uploads"
    assert Path(cfg.uploads.staging_dir) == tmp_path / "data" / "tmp"
    assert cfg.uploads.permanent_dir == tmp_path / "data" / "uploads" / "awards"


def test_absolute_upload_path_remains_unchanged(tmp_path):
    """Absolute paths are preserved exactly as configured."""
    absolute_path = tmp_path / "absolute" / "uploads"
    settings_file = tmp_path / "awards.settings.yaml"
    settings_file.write_text(
        "uploads:\n"
        f"  upload_path: {absolute_path}\n",
        encoding="utf-8",
    )

    cfg = load_config(settings_path=settings_file)
    assert Path(cfg.uploads.upload_path) == absolute_path


def test_secrets_are_merged(tmp_path):
    """The secrets file next to the settings file lands under ``secrets``."""
    settings_file = tmp_path / "awards.settings.yaml"
    settings_file.write_text(
        "remote:\n"
        "  enabled: true\n"
        "  bucket: awards-bucket\n"
        "  timeout_seconds: 2.5\n",
        encoding="utf-8",
    )
    (tmp_path / "awards.secrets.yaml").write_text(
        "aws:\n"
        "  access_key_id: AKIA\n"
        "  secret_access_key: SECRET\n"
        "  region: eu-west-1\n",
        encoding="utf-8",
    )

    cfg = load_config(settings_path=settings_file)

    assert cfg.remote.bucket == "awards-bucket"
    assert cfg.remote.timeout_seconds == 2.5
    assert cfg.secrets.aws.access_key_id == "AKIA"
    assert cfg.secrets.aws.region == "eu-west-1"


def test_settings_path_from_environment(tmp_path, monkeypatch):
    settings_file = tmp_path / "custom.yaml"
    settings_file.write_text("uploads:\n  upload_dir: medals\n", encoding="utf-8")
    monkeypatch.setenv("AWARDS_SETTINGS", str(settings_file))

    assert load_config().uploads.upload_dir == "medals"


def test_set_config_overrides_global():
    custom = AppSettings()
    custom.uploads.upload_dir = "custom"
    set_config(custom)
    try:
        assert get_config() is custom
    finally:
        set_config(None)
