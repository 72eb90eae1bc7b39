"""
Video Composer - runs the ffmpeg composition for one upload.

This module is responsible for:
- Choosing the background input (image, video, or generated canvas)
- Building the ffmpeg command line from the filter graph
- Running ffmpeg as a blocking subprocess (optionally throttled)
- Guaranteeing the output path holds a complete file or nothing

ffmpeg writes to ``<output>.part``; the file is moved into place only
after ffmpeg exits cleanly and the result probes as a video.
"""

import asyncio
import logging
import os
import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from docvid.core.video.filter_graph import (
    CompositionSettings,
    FilterGraphBuilder,
    output_mapping,
    render_filter_complex,
)
from docvid.utils.filename_utils import PARTIAL_SUFFIX
from .exceptions import MediaProcessingError
from .ffmpeg_utils import verify_video_output

logger = logging.getLogger(__name__)

BACKGROUND_IMAGE = "image"
BACKGROUND_VIDEO = "video"

# Trailing stderr kept on failures
STDERR_TAIL_CHARS = 2000


@dataclass
class CompositionJob:
    """Inputs and output for a single composition. Consumed once."""
    video_path: Path
    output_path: Path
    text_block: str
    background_path: Optional[Path] = None
    background_kind: Optional[str] = None

    @property
    def partial_path(self) -> Path:
        return self.output_path.with_name(self.output_path.name + PARTIAL_SUFFIX)


class VideoComposer:
    """
    Composites a video onto a background with a drawtext block.

    Example:
        >>> composer = VideoComposer.from_settings()
        >>> composer.compose(CompositionJob(
        ...     video_path=Path("uploads/clip.mp4"),
        ...     background_path=Path("uploads/bg.png"),
        ...     background_kind="image",
        ...     output_path=Path("processed/output_1700000000000.mp4"),
        ...     text_block="'Doctor Jane Doe'",
        ... ))
    """

    def __init__(
        self,
        composition: CompositionSettings,
        ffmpeg_binary: str = "ffmpeg",
        timeout: Optional[float] = None,
        max_concurrency: int = 0,
        canvas_color: str = "black",
        canvas_fps: int = 30,
        verify_output: bool = True,
        executor_workers: int = 64,
    ):
        """
        Initialize VideoComposer.

        Args:
            composition: Canvas, font and layout parameters
            ffmpeg_binary: ffmpeg executable
            timeout: Seconds before ffmpeg is killed (None = wait forever)
            max_concurrency: Concurrent ffmpeg processes for compose_async (0 = unlimited)
            canvas_color: Colour of the generated canvas when no background is given
            canvas_fps: Frame rate of the generated canvas
            verify_output: Probe the result before publishing it
            executor_workers: Threads for compose_async when max_concurrency is 0
        """
        self.composition = composition
        self.graph_builder = FilterGraphBuilder(composition)
        self.ffmpeg_binary = ffmpeg_binary
        self.timeout = timeout
        self.canvas_color = canvas_color
        self.canvas_fps = canvas_fps
        self.verify_output = verify_output

        self._max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None
        self.max_workers = max_concurrency if max_concurrency > 0 else executor_workers
        # The loop's default executor would cap runs at min(32, cpu + 4)
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="docvid-ffmpeg",
        )

        logger.info(
            f"VideoComposer initialized: ffmpeg={ffmpeg_binary}, timeout={timeout}, "
            f"max_concurrency={max_concurrency or 'unlimited'}, workers={self.max_workers}"
        )

    @classmethod
    def from_settings(cls) -> "VideoComposer":
        from docvid import settings

        return cls(
            composition=settings.build_composition_settings(),
            ffmpeg_binary=settings.get_ffmpeg_binary(),
            timeout=settings.get_ffmpeg_timeout_seconds(),
            max_concurrency=settings.get_max_concurrent_jobs(),
            canvas_color=settings.get_canvas_color(),
            canvas_fps=settings.get_canvas_fps(),
            verify_output=settings.should_verify_output(),
            executor_workers=settings.get_executor_workers(),
        )

    def _background_input_args(self, job: CompositionJob) -> Tuple[List[str], bool]:
        """
        Input arguments for input 0.

        Returns:
            (args, shortest) where ``shortest`` means the background never
            ends on its own and the overlay must stop with the foreground
        """
        if job.background_path is None:
            c = self.composition
            canvas = (
                f"color=c={self.canvas_color}:"
                f"s={c.canvas_width}x{c.canvas_height}:r={self.canvas_fps}"
            )
            return ["-f", "lavfi", "-i", canvas], True

        if job.background_kind == BACKGROUND_IMAGE:
            return ["-loop", "1", "-i", str(job.background_path)], True

        return ["-i", str(job.background_path)], False

    def build_command(self, job: CompositionJob) -> List[str]:
        """Build the full ffmpeg argv for a job (writes to the partial path)."""
        background_args, shortest = self._background_input_args(job)
        stages = self.graph_builder.build(job.text_block, shortest=shortest)

        return [
            self.ffmpeg_binary,
            "-hide_banner",
            *background_args,
            "-i", str(job.video_path),
            "-filter_complex", render_filter_complex(stages),
            *output_mapping(),
            "-f", "mp4",
            "-y",
            str(job.partial_path),
        ]

    def _discard_partial(self, job: CompositionJob) -> None:
        try:
            job.partial_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove partial output {job.partial_path}: {e}")

    def compose(self, job: CompositionJob) -> Path:
        """
        Run ffmpeg for a job and publish the output atomically.

        Args:
            job: Composition job

        Returns:
            Path to the finished output

        Raises:
            MediaProcessingError: On spawn failure, timeout, non-zero exit,
                or an output without a video stream
        """
        cmd = self.build_command(job)
        job.output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"FFmpeg command: {subprocess.list2cmdline(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            self._discard_partial(job)
            logger.error(f"FFmpeg executable not found: {self.ffmpeg_binary}")
            raise MediaProcessingError("ffmpeg executable not found") from e
        except subprocess.TimeoutExpired as e:
            self._discard_partial(job)
            logger.error(f"FFmpeg timed out after {self.timeout}s for {job.output_path.name}")
            raise MediaProcessingError(
                f"ffmpeg timed out after {self.timeout}s", file_path=str(job.output_path)
            ) from e
        except OSError as e:
            self._discard_partial(job)
            logger.error(f"Failed to start ffmpeg: {e}")
            raise MediaProcessingError(f"Failed to start ffmpeg: {e}") from e

        if result.returncode != 0:
            self._discard_partial(job)
            stderr_tail = (result.stderr or "")[-STDERR_TAIL_CHARS:]
            logger.error(
                f"❌ FFmpeg composition FAILED\n"
                f"   Video: {job.video_path}\n"
                f"   Background: {job.background_path or 'generated canvas'}\n"
                f"   Output: {job.output_path}\n"
                f"   Exit code: {result.returncode}\n"
                f"   Error: {stderr_tail}"
            )
            raise MediaProcessingError(
                "ffmpeg exited with an error",
                file_path=str(job.output_path),
                returncode=result.returncode,
                stderr=stderr_tail,
            )

        try:
            if self.verify_output:
                verify_video_output(job.partial_path)
            os.replace(job.partial_path, job.output_path)
        except MediaProcessingError:
            self._discard_partial(job)
            raise
        except OSError as e:
            self._discard_partial(job)
            raise MediaProcessingError(
                f"Failed to publish output: {e}", file_path=str(job.output_path)
            ) from e

        logger.info(f"✅ Composition finished: {job.output_path.name}")
        return job.output_path

    async def compose_async(self, job: CompositionJob) -> Path:
        """Run ``compose`` on the composer's thread pool, honouring the concurrency limit."""
        loop = asyncio.get_running_loop()
        if self._semaphore is None:
            return await loop.run_in_executor(self._executor, self.compose, job)
        async with self._semaphore:
            return await loop.run_in_executor(self._executor, self.compose, job)

    def shutdown(self) -> None:
        """Stop the thread pool after running compositions finish."""
        self._executor.shutdown(wait=True)
