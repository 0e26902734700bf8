"""Media Tool - runs FFmpeg compilation passes described by a LayoutSpec."""

import subprocess
import time
from pathlib import Path
from typing import Any, Optional

from hollywood_studio.core.config import Settings
from hollywood_studio.core.errors import CompilationFailure, GenerationCancelled
from hollywood_studio.models.schemas import LayoutSpec
from hollywood_studio.utils.cancellation import CancellationToken

POLL_INTERVAL_SECONDS = 0.5
STDERR_TAIL_CHARS = 2000


class MediaTool:
    """Thin wrapper around the ffmpeg / ffprobe binaries."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize media tool.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.ffmpeg_binary = settings.ffmpeg_binary
        self.ffprobe_binary = settings.ffprobe_binary

    def build_command(self, spec: LayoutSpec) -> list[str]:
        """Translate a LayoutSpec into an ffmpeg argument list."""
        args = [self.ffmpeg_binary, "-y", "-hide_banner", "-loglevel", "error"]
        for input_spec in spec.inputs:
            args.extend(input_spec.options)
            args.extend(["-i", input_spec.source])
        if spec.filter_graph:
            args.extend(["-filter_complex", spec.filter_graph])
        for label in spec.maps:
            args.extend(["-map", label])
        args.extend(spec.output_options)
        args.append(str(spec.output_path))
        return args

    def compile_layout(self, spec: LayoutSpec, cancel_token: Optional[CancellationToken] = None) -> Path:
        """
        Run one compilation pass.

        Args:
            spec: Layout to compile
            cancel_token: Optional cancellation token; the subprocess is killed when it fires

        Returns:
            Path of the written output

        Raises:
            CompilationFailure: Nonzero exit, timeout, missing binary or missing output
            GenerationCancelled: If cancellation is requested while ffmpeg runs
        """
        args = self.build_command(spec)
        output_path = Path(spec.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.logger.debug(f"Running ffmpeg with {len(spec.inputs)} input(s) -> {output_path.name}")

        try:
            process = subprocess.Popen(args, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE)
        except FileNotFoundError as e:
            raise CompilationFailure(
                f"ffmpeg binary not found: {self.ffmpeg_binary}", {"binary": self.ffmpeg_binary}
            ) from e
        except OSError as e:
            raise CompilationFailure(f"Could not start ffmpeg: {e}") from e

        started = time.monotonic()
        while True:
            try:
                _, stderr = process.communicate(timeout=POLL_INTERVAL_SECONDS)
                break
            except subprocess.TimeoutExpired:
                if cancel_token is not None and cancel_token.cancelled:
                    self._kill(process)
                    output_path.unlink(missing_ok=True)
                    raise GenerationCancelled(details={"stage": "compilation", "reason": cancel_token.reason})
                if time.monotonic() - started > spec.timeout_seconds:
                    self._kill(process)
                    output_path.unlink(missing_ok=True)
                    raise CompilationFailure(
                        f"ffmpeg timed out after {spec.timeout_seconds:.0f}s",
                        {"timeout_seconds": spec.timeout_seconds},
                    )

        stderr_text = (stderr or b"").decode("utf-8", errors="replace")
        if process.returncode != 0:
            raise CompilationFailure(
                f"ffmpeg exited with code {process.returncode}",
                {"returncode": process.returncode, "stderr": stderr_text[-STDERR_TAIL_CHARS:]},
            )
        if not output_path.exists() or output_path.stat().st_size == 0:
            raise CompilationFailure(
                "ffmpeg reported success but wrote no output",
                {"output_path": str(output_path), "stderr": stderr_text[-STDERR_TAIL_CHARS:]},
            )
        return output_path

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        process.kill()
        try:
            process.communicate(timeout=5)
        except subprocess.TimeoutExpired:
            pass

    def probe_duration(self, path: Path) -> Optional[float]:
        """Media duration in seconds via ffprobe, or None when it cannot be read."""
        cmd = [
            self.ffprobe_binary,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            str(path),
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
        except (OSError, subprocess.TimeoutExpired) as e:
            self.logger.debug(f"ffprobe failed for {path}: {e}")
            return None
        if result.returncode != 0:
            return None
        try:
            return float(result.stdout.strip())
        except ValueError:
            return None
