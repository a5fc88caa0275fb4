import logging
import os
from pathlib import Path
from typing import Callable, Optional

import aiohttp

from ..utils.logging import PerformanceLogger, get_logger

CHUNK_SIZE = 8192


class UpdateDownloader:
    """Handles downloading release packages."""

    def __init__(self, timeout: int = 600, logger: Optional[logging.Logger] = None):
        self.timeout = timeout
        self.logger = logger or get_logger(__name__)
        self.perf = PerformanceLogger(self.logger)

    async def download(self, url: str, destination: Path,
                       progress_callback: Optional[Callable[[int], None]] = None) -> Path:
        """
        Download a package to destination, replacing any previous file.

        The file is flushed and fsynced before returning so a detached
        process started afterwards sees the complete package.

        Args:
            url: Package URL
            destination: Target file path
            progress_callback: Optional callback for progress updates (0-100)

        Returns:
            Path to the downloaded file

        Raises:
            aiohttp.ClientError, asyncio.TimeoutError, OSError
        """
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"Downloading update from {url} to {destination}")

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        with self.perf.time_block("download"):
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    response.raise_for_status()

                    total_size = int(response.headers.get('content-length', 0))
                    downloaded = 0
                    last_progress = -1

                    with open(destination, 'wb') as f:
                        async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                            f.write(chunk)
                            downloaded += len(chunk)

                            if progress_callback and total_size > 0:
                                progress = min(int(downloaded * 100 / total_size), 100)
                                if progress != last_progress:
                                    last_progress = progress
                                    progress_callback(progress)

                        f.flush()
                        os.fsync(f.fileno())

        self.logger.info(f"Download completed: {destination} ({downloaded} bytes)")
        return destination
