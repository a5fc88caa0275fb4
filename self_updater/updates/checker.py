"""
Update checking functionality.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from .. import __version__ as app_current_version
from ..config import UpdateConfig
from ..core.interfaces import UpdateChecker
from ..core.models import UpdateDecision, UpdateManifest
from ..utils.logging import get_logger
from ..utils.validators import ValidationError, VersionValidator


class ManifestUpdateChecker(UpdateChecker):
    """Update checker reading a JSON manifest of the form {"version", "updateUrl"}."""

    def __init__(self, config: Optional[UpdateConfig] = None,
                 current_version: Optional[str] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or UpdateConfig()
        self.logger = logger or get_logger(__name__)
        self.manifest_url = self.config.manifest_url
        self.current_version = current_version or app_current_version
        self.version_validator = VersionValidator()

    async def check_for_update(self) -> UpdateDecision:
        """Fetch the manifest and decide whether an update is available.

        Every failure is logged and reported as "no update" so the local
        extraction flow stays reachable without a network.
        """
        self.logger.info(f"Current version: {self.current_version}")
        try:
            manifest = await self.fetch_manifest()
        except aiohttp.ClientError as e:
            self.logger.error(f"Network error during update check: {e}")
            return UpdateDecision.no_update()
        except asyncio.TimeoutError:
            self.logger.error(f"Timeout during update check ({self.config.request_timeout}s).")
            return UpdateDecision.no_update()
        except ValueError as e:
            self.logger.error(f"Invalid update manifest from {self.manifest_url}: {e}")
            return UpdateDecision.no_update()
        except Exception as e:
            self.logger.error(f"Update check failed: {e}", exc_info=True)
            return UpdateDecision.no_update()

        if self.is_update(manifest.version):
            self.logger.info(f"New version found: {manifest.version}")
            return UpdateDecision.update(manifest)

        self.logger.info(f"Version {self.current_version} is up to date (latest: {manifest.version}).")
        return UpdateDecision.no_update()

    async def fetch_manifest(self) -> UpdateManifest:
        """GET the manifest document. Raises on network, status or parse errors."""
        self.logger.info(f"Checking for updates from {self.manifest_url}...")
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.manifest_url) as response:
                response.raise_for_status()
                # Static hosts often serve JSON as text/plain
                data = await response.json(content_type=None)

        return UpdateManifest.from_dict(data)

    def is_update(self, latest_version: str) -> bool:
        """Exact mode: any difference is an update. Semantic mode: only newer versions."""
        if self.config.version_comparison != "semantic":
            return latest_version != self.current_version

        try:
            return self.version_validator.compare_versions(latest_version, self.current_version) > 0
        except ValidationError as e:
            self.logger.warning(f"{e}. Falling back to exact comparison.")
            return latest_version != self.current_version
