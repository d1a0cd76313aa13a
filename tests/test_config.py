"""Tests for HubConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from hubcommon import HubConfig, LogLevel, SearchApiType, load_hub_config_from_env


class TestHubConfig:
    """Tests for HubConfig model."""

    def test_create_default_config(self) -> None:
        """Test creating a HubConfig with defaults."""
        config = HubConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_json is False
        assert config.portal_url == "https://www.arcgis.com"
        assert config.hub_url == "https://hub.arcgis.com"
        assert config.search_api == SearchApiType.ARCGIS
        assert config.default_num == 10
        assert config.agg_limit == 10
        assert config.alpha_orgs == []

    def test_create_custom_config(self) -> None:
        """Test creating a HubConfig with custom values."""
        config = HubConfig(
            log_level=LogLevel.DEBUG,
            portal_url="https://org.mapsqa.arcgis.com",
            hub_url="https://hubqa.arcgis.com",
            search_api="arcgis-hub",
            default_num=50,
            beta_orgs=["BRXFAKE"],
        )
        assert config.log_level == LogLevel.DEBUG
        assert config.search_api == SearchApiType.ARCGIS_HUB
        assert config.default_num == 50
        assert config.beta_orgs == ["BRXFAKE"]

    def test_log_level_from_string(self) -> None:
        """Test creating config with log level as string."""
        assert HubConfig(log_level="debug").log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        """Test creating config with invalid log level."""
        with pytest.raises(ValueError, match="Invalid log level"):
            HubConfig(log_level="INVALID")

    def test_url_trailing_slash_stripped(self) -> None:
        config = HubConfig(portal_url="https://www.arcgis.com/", hub_url="https://hub.arcgis.com/")
        assert config.portal_url == "https://www.arcgis.com"
        assert config.hub_url == "https://hub.arcgis.com"

    def test_url_validation_invalid(self) -> None:
        """Test invalid url formats."""
        for url in ("www.arcgis.com", "ftp://www.arcgis.com"):
            with pytest.raises(ValueError, match="URL must start with"):
                HubConfig(portal_url=url)

    def test_paging_defaults_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            HubConfig(default_num=0)

    def test_unknown_search_api(self) -> None:
        with pytest.raises(ValueError):
            HubConfig(search_api="solr")

    def test_extra_fields_forbidden(self) -> None:
        """Test that extra fields are forbidden."""
        with pytest.raises(Exception):  # Pydantic validation error
            HubConfig(extra_field="value")  # type: ignore[call-arg]


class TestLoadHubConfigFromEnv:
    """Tests for load_hub_config_from_env function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_load_defaults(self) -> None:
        """Test loading config with no environment variables."""
        config = load_hub_config_from_env()
        assert config == HubConfig()

    @patch.dict(
        os.environ,
        {
            "LOG_LEVEL": "DEBUG",
            "LOG_JSON": "true",
            "HUB_PORTAL_URL": "https://org.mapsdevext.arcgis.com",
            "HUB_URL": "https://hubdev.arcgis.com",
            "HUB_SEARCH_API": "arcgis-hub",
            "HUB_DEFAULT_NUM": "25",
            "HUB_AGG_LIMIT": "5",
            "HUB_REQUEST_TIMEOUT": "2.5",
            "HUB_ALPHA_ORGS": "a1, a2,",
            "HUB_BETA_ORGS": "b1",
        },
        clear=True,
    )
    def test_load_from_env(self) -> None:
        """Test loading config from environment variables."""
        config = load_hub_config_from_env()
        assert config.log_level == LogLevel.DEBUG
        assert config.log_json is True
        assert config.portal_url == "https://org.mapsdevext.arcgis.com"
        assert config.hub_url == "https://hubdev.arcgis.com"
        assert config.search_api == SearchApiType.ARCGIS_HUB
        assert config.default_num == 25
        assert config.agg_limit == 5
        assert config.request_timeout == 2.5
        assert config.alpha_orgs == ["a1", "a2"]
        assert config.beta_orgs == ["b1"]

    def test_log_json_variants(self) -> None:
        """Test LOG_JSON accepts various true values."""
        for value in ("true", "1", "yes", "TRUE"):
            with patch.dict(os.environ, {"LOG_JSON": value}, clear=True):
                assert load_hub_config_from_env().log_json is True
        with patch.dict(os.environ, {"LOG_JSON": "off"}, clear=True):
            assert load_hub_config_from_env().log_json is False
