"""
Tests for configuration loading, env overrides and the store factory.
"""

import pytest
import yaml
from pydantic import ValidationError

from trade_archive.common.factories import StoreFactory, build_archive, build_partition_store
from trade_archive.config import ArchiveConfig, ConfigLoader, ConfigState, get_config
from trade_archive.infrastructure.checkpoint import (
    InMemoryPartitionStore,
    LocalPartitionStore,
    S3PartitionStore,
)

ENV_VARS = (
    "TRADE_ARCHIVE_ENV",
    "TRADE_ARCHIVE_ROOT",
    "TRADE_ARCHIVE_BACKEND",
    "TRADE_ARCHIVE_BUCKET",
    "TRADE_ARCHIVE_CONFIG_DIR",
    "MINIO_ENDPOINT",
    "HISTORY_API_BASE_URL",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_dir(tmp_path):
    def write(name, data):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data), encoding="utf-8")

    write("archive.yaml", {"backend": "memory", "max_bytes": 1000})
    write("analytics.yaml", {"preferred_currency": "Divine", "row_limits": {"days": 7}})
    write("env/dev.yaml", {"archive": {"shrink_ratio": 0.5}, "logging": {"level": "DEBUG"}})
    return tmp_path


class TestConfigLoader:
    def test_defaults_without_files(self, tmp_path):
        """
        Test 1/5: An empty directory yields model defaults.
        """
        state = ConfigLoader(str(tmp_path)).load()
        assert state == ConfigState(env="dev", config_dir=str(tmp_path))
        assert state.archive.backend == "local"
        assert state.analytics.preferred_currency == "chaos"

    def test_yaml_sections_and_env_file_merge(self, config_dir):
        """
        Test 2/5: Section files load first, env/<env>.yaml overrides them.
        """
        state = ConfigLoader(str(config_dir)).load()

        assert state.archive.backend == "memory"
        assert state.archive.max_bytes == 1000
        assert state.archive.shrink_ratio == 0.5
        assert state.analytics.preferred_currency == "divine"
        assert state.analytics.row_limits.to_row_limits().days == 7
        assert state.analytics.row_limits.to_row_limits().weeks == 12
        assert state.logging.level == "DEBUG"

    def test_env_var_overrides(self, config_dir, monkeypatch):
        """
        Test 3/5: Environment variables win over every file.
        """
        monkeypatch.setenv("TRADE_ARCHIVE_BACKEND", "LOCAL")
        monkeypatch.setenv("TRADE_ARCHIVE_ROOT", "/srv/archive")
        monkeypatch.setenv("HISTORY_API_BASE_URL", "https://trade.example.invalid/")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        state = ConfigLoader(str(config_dir)).load()

        assert state.archive.backend == "local"
        assert state.archive.local_root == "/srv/archive"
        assert state.history_api.base_url == "https://trade.example.invalid"
        assert state.logging.level == "WARNING"

    def test_env_selects_override_file(self, config_dir, monkeypatch):
        """
        Test 4/5: TRADE_ARCHIVE_ENV picks a different override file.
        """
        monkeypatch.setenv("TRADE_ARCHIVE_ENV", "prod")
        state = ConfigLoader(str(config_dir)).load()
        assert state.env == "prod"
        assert state.archive.shrink_ratio == 0.9

    def test_invalid_values_raise(self, tmp_path):
        """
        Test 5/5: Validation errors are not swallowed.
        """
        (tmp_path / "archive.yaml").write_text("backend: floppy\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            ConfigLoader(str(tmp_path)).load()

    def test_get_config_uses_env_dir(self, config_dir, monkeypatch):
        monkeypatch.setenv("TRADE_ARCHIVE_CONFIG_DIR", str(config_dir))
        assert get_config().archive.backend == "memory"

    def test_history_client_config(self):
        client_config = ConfigState().history_api.to_client_config()
        assert client_config.base_url == "https://www.pathofexile.com"
        assert client_config.http_config.timeout == 30.0

    def test_row_limits_config(self):
        limits = ConfigState(analytics={"row_limits": {"days": 3}}).analytics.row_limits.to_row_limits()
        assert (limits.days, limits.weeks) == (3, 12)


class TestStoreFactory:
    def test_backends(self, tmp_path):
        assert isinstance(build_partition_store(ArchiveConfig(backend="memory")), InMemoryPartitionStore)
        local = build_partition_store(ArchiveConfig(backend="local", local_root=str(tmp_path)))
        assert isinstance(local, LocalPartitionStore)
        assert local.root == tmp_path

    def test_s3_backend(self):
        store = build_partition_store(
            ArchiveConfig(backend="s3", bucket="b", endpoint="http://localhost:9000")
        )
        assert isinstance(store, S3PartitionStore)
        assert store.bucket == "b"

    def test_unregistered_backend(self):
        factory = StoreFactory()
        factory.register("local", lambda config: InMemoryPartitionStore())
        with pytest.raises(ValueError, match=r"available: local"):
            factory.create(ArchiveConfig(backend="memory"))
        assert factory.available_backends() == ["local"]

    def test_build_archive_uses_config(self):
        archive = build_archive(ArchiveConfig(backend="memory", shrink_ratio=0.5, root="x"))
        assert archive.shrink_ratio == 0.5
        assert archive.root == "x"
        assert isinstance(archive.store, InMemoryPartitionStore)
