"""Tests for configuration and duration parsing."""

import pytest

from optisync import AsyncMemoryTransport, SyncConfig, create_store, parse_duration


class TestParseDuration:
    """Tests for parse_duration function."""

    def test_units(self) -> None:
        assert parse_duration("250ms") == 250
        assert parse_duration("30s") == 30_000
        assert parse_duration("5m") == 300_000
        assert parse_duration("2h") == 7_200_000
        assert parse_duration("1d") == 86_400_000

    def test_integer_passthrough(self) -> None:
        assert parse_duration(1000) == 1000
        assert parse_duration(0) == 0

    def test_invalid_format(self) -> None:
        for raw in ("invalid", "10x", "s10", "", "10"):
            with pytest.raises(ValueError, match="Invalid duration"):
                parse_duration(raw)

    def test_negative_integer_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid duration"):
            parse_duration(-1)


class TestSyncConfig:
    """Tests for SyncConfig."""

    def test_defaults(self) -> None:
        config = SyncConfig()
        assert config.base_url == "http://localhost:3000"
        assert config.timeout_seconds == 30.0
        assert config.temporary_prefix == "tmp:"
        assert config.log_intents is True

    def test_validation(self) -> None:
        with pytest.raises(ValueError, match="base_url"):
            SyncConfig(base_url="")
        with pytest.raises(ValueError, match="temporary_prefix"):
            SyncConfig(temporary_prefix="")
        with pytest.raises(ValueError, match="request_timeout"):
            SyncConfig(request_timeout=0)
        with pytest.raises(ValueError, match="Invalid duration"):
            SyncConfig(request_timeout="soon")

    def test_from_env(self) -> None:
        config = SyncConfig.from_env(
            {
                "OPTISYNC_BASE_URL": "https://vault.example",
                "OPTISYNC_TIMEOUT": "5s",
                "OPTISYNC_TEMPORARY_PREFIX": "fake-",
                "OPTISYNC_LOG_INTENTS": "off",
                "UNRELATED": "x",
            }
        )
        assert config.base_url == "https://vault.example"
        assert config.timeout_seconds == 5.0
        assert config.temporary_prefix == "fake-"
        assert config.log_intents is False

    def test_from_env_numeric_timeout_is_milliseconds(self) -> None:
        config = SyncConfig.from_env({"OPTISYNC_TIMEOUT": "1500"})
        assert config.timeout_seconds == 1.5

    def test_from_env_defaults(self) -> None:
        assert SyncConfig.from_env({}) == SyncConfig()

    def test_from_env_bad_bool(self) -> None:
        with pytest.raises(ValueError, match="LOG_INTENTS"):
            SyncConfig.from_env({"OPTISYNC_LOG_INTENTS": "maybe"})


class TestCreateStore:
    """Tests for the create_store factory."""

    def test_overrides_apply(self) -> None:
        store = create_store(
            AsyncMemoryTransport(),
            config=SyncConfig(),
            temporary_prefix="draft-",
        )
        assert store.allocator.prefix == "draft-"

    def test_builds_http_transport_by_default(self) -> None:
        pytest.importorskip("httpx")
        from optisync.transports.http import AsyncHttpTransport

        store = create_store(config=SyncConfig(base_url="https://vault.example"))
        assert isinstance(store._transport, AsyncHttpTransport)
