"""Last-frame extraction for continuity chaining.

The end frame of shot N becomes the start frame of shot N+1 in the same
scene.  Extraction runs ffmpeg against the rendered video and hands the still
to an uploader that returns a URL the provider can fetch.
"""
from __future__ import annotations

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Protocol

import structlog

from shot_engine import config
from shot_engine.errors import FrameExtractionError

logger = structlog.get_logger(__name__)

PLACEHOLDER_FRAME_URL = "https://fal.media/files/elephant/OEbhPGhwTQMGOgVOGGJjH_image.webp"

# Uploads a local still and returns its public URL.  Called before the
# temporary file is removed.
Uploader = Callable[[Path], str]


class FrameExtractor(Protocol):
    def extract_last_frame(self, video_url: str) -> Optional[str]: ...


class FfmpegFrameExtractor:
    """Grab the last frame with ffmpeg, then upload it."""

    def __init__(
        self,
        uploader: Uploader,
        *,
        ffmpeg_binary: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.uploader = uploader
        self.ffmpeg_binary = ffmpeg_binary or config.FFMPEG_BINARY
        self.timeout = config.FFMPEG_TIMEOUT_SEC if timeout is None else timeout

    def available(self) -> bool:
        return shutil.which(self.ffmpeg_binary) is not None

    def build_command(self, video_url: str, output_path: Path) -> List[str]:
        # -sseof seeks relative to the end of input.
        return [
            self.ffmpeg_binary, "-y",
            "-sseof", "-0.1",
            "-i", video_url,
            "-frames:v", "1",
            "-q:v", "2",
            str(output_path),
        ]

    def extract_last_frame(self, video_url: str) -> Optional[str]:
        """Return the uploaded URL of the video's last frame.

        Raises:
            FrameExtractionError: ffmpeg is missing, fails, times out, or
                writes no image.
        """
        with tempfile.TemporaryDirectory(prefix="shot_engine_frame_") as tmp:
            output_path = Path(tmp) / "last_frame.jpg"
            cmd = self.build_command(video_url, output_path)
            try:
                result = subprocess.run(cmd, capture_output=True, timeout=self.timeout)
            except FileNotFoundError as exc:
                raise FrameExtractionError(f"ffmpeg not found: {self.ffmpeg_binary}") from exc
            except subprocess.TimeoutExpired as exc:
                raise FrameExtractionError(
                    f"ffmpeg timed out after {self.timeout:.0f}s on {video_url}"
                ) from exc

            if result.returncode != 0:
                stderr = result.stderr.decode(errors="replace")
                raise FrameExtractionError(f"ffmpeg failed: {stderr[-500:]}")
            if not output_path.exists():
                raise FrameExtractionError(f"ffmpeg wrote no frame for {video_url}")

            url = self.uploader(output_path)
            logger.debug("frame_extracted", video_url=video_url, frame_url=url)
            return url


class PlaceholderFrameExtractor:
    """Dry-run extractor: every video "ends" on the same placeholder still."""

    def __init__(self, frame_url: str = PLACEHOLDER_FRAME_URL) -> None:
        self.frame_url = frame_url

    def extract_last_frame(self, video_url: str) -> Optional[str]:
        return self.frame_url


def make_frame_extractor(
    dry_run: Optional[bool] = None,
    uploader: Optional[Uploader] = None,
) -> FrameExtractor:
    use_dry_run = config.DRY_RUN if dry_run is None else dry_run
    if use_dry_run:
        return PlaceholderFrameExtractor()
    if uploader is None:
        raise ValueError("an uploader is required for real frame extraction")
    return FfmpegFrameExtractor(uploader)
