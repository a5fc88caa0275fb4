"""
Tests for the manifest update checker.
"""

import asyncio
from unittest.mock import Mock, patch

import aiohttp
import pytest

from self_updater.config import UpdateConfig
from self_updater.updates.checker import ManifestUpdateChecker

MANIFEST_URL = "http://host/update_info.json"


@pytest.fixture
def update_config():
    return UpdateConfig(manifest_url=MANIFEST_URL, request_timeout=5)


def checker_for(update_config, current_version="1.0.0"):
    return ManifestUpdateChecker(update_config, current_version=current_version)


class TestCheckForUpdate:
    """Test the update decision."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("latest, current, available", [
        ("2.0.0", "1.0.0", True),
        ("0.9.0", "1.0.0", True),   # older-looking versions still trigger
        ("1.0.0.0", "1.0.0", True),  # exact string comparison
        ("1.0.0", "1.0.0", False),
    ])
    async def test_exact_comparison(self, update_config, mock_aiohttp_session, response_factory,
                                    latest, current, available):
        session = mock_aiohttp_session({
            MANIFEST_URL: response_factory({"version": latest, "updateUrl": "http://host/pkg.zip"}),
        })
        with patch("aiohttp.ClientSession", session):
            decision = await checker_for(update_config, current).check_for_update()

        assert decision.available is available
        if available:
            assert decision.download_url == "http://host/pkg.zip"
            assert decision.latest_version == latest
        else:
            assert decision.download_url is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("latest, available", [
        ("2.0.0", True),
        ("0.9.0", False),
        ("1.0.0.0", False),
    ])
    async def test_semantic_comparison(self, update_config, mock_aiohttp_session, response_factory,
                                       latest, available):
        update_config.version_comparison = "semantic"
        session = mock_aiohttp_session({
            MANIFEST_URL: response_factory({"version": latest, "updateUrl": "http://host/pkg.zip"}),
        })
        with patch("aiohttp.ClientSession", session):
            decision = await checker_for(update_config, "1.0.0").check_for_update()

        assert decision.available is available

    def test_semantic_falls_back_to_exact_for_unparseable(self, update_config):
        update_config.version_comparison = "semantic"
        checker = checker_for(update_config, "1.0.0")
        assert checker.is_update("nightly")
        assert not checker.is_update("1.0.0")

    def test_uses_package_version_by_default(self, update_config):
        from self_updater import __version__
        assert ManifestUpdateChecker(update_config).current_version == __version__


class TestCheckFailures:
    """Every failure degrades to no update."""

    @pytest.mark.asyncio
    async def test_network_error(self, update_config, mock_aiohttp_session):
        session = mock_aiohttp_session({MANIFEST_URL: aiohttp.ClientConnectionError("unreachable")})
        with patch("aiohttp.ClientSession", session):
            decision = await checker_for(update_config).check_for_update()
        assert not decision.available

    @pytest.mark.asyncio
    async def test_timeout(self, update_config, mock_aiohttp_session):
        session = mock_aiohttp_session({MANIFEST_URL: asyncio.TimeoutError()})
        with patch("aiohttp.ClientSession", session):
            decision = await checker_for(update_config).check_for_update()
        assert not decision.available

    @pytest.mark.asyncio
    async def test_http_error_status(self, update_config, mock_aiohttp_session, response_factory):
        error = aiohttp.ClientResponseError(Mock(), (), status=404, message="Not Found")
        session = mock_aiohttp_session({MANIFEST_URL: response_factory(status_error=error)})
        with patch("aiohttp.ClientSession", session):
            decision = await checker_for(update_config).check_for_update()
        assert not decision.available

    @pytest.mark.asyncio
    async def test_malformed_manifest(self, update_config, mock_aiohttp_session, response_factory,
                                      caplog):
        session = mock_aiohttp_session({MANIFEST_URL: response_factory({"version": "2.0.0"})})
        with patch("aiohttp.ClientSession", session), caplog.at_level("ERROR"):
            decision = await checker_for(update_config).check_for_update()
        assert not decision.available
        assert "Invalid update manifest" in caplog.text

    @pytest.mark.asyncio
    async def test_invalid_json(self, update_config, mock_aiohttp_session, response_factory):
        response = response_factory()
        response.json.side_effect = ValueError("Expecting value")
        session = mock_aiohttp_session({MANIFEST_URL: response})
        with patch("aiohttp.ClientSession", session):
            decision = await checker_for(update_config).check_for_update()
        assert not decision.available

    @pytest.mark.asyncio
    async def test_request_is_bounded_by_timeout(self, update_config, mock_aiohttp_session,
                                                 response_factory):
        session = mock_aiohttp_session({
            MANIFEST_URL: response_factory({"version": "1.0.0", "updateUrl": "http://host/pkg.zip"}),
        })
        with patch("aiohttp.ClientSession", session):
            await checker_for(update_config).check_for_update()

        timeout = session.call_args.kwargs["timeout"]
        assert timeout.total == 5
