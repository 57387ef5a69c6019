"""Optional subtitle retrieval: caption track selection and transcript flattening.

Two interchangeable tools are supported:
- TranscriptApiTool: youtube-transcript-api (sync, run in a worker thread).
- YtDlpTool: the external ``yt-dlp`` CLI, which writes a json3 captions file
  into a temporary directory that is removed after reading.

Either tool raises ToolUnavailable when it cannot run at all and SubtitleError
when the video itself cannot be captioned; a video with no caption track
simply yields None.
"""

import asyncio
import json
import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api._errors import (
    CouldNotRetrieveTranscript,
    NoTranscriptFound,
    RequestBlocked,
    TranscriptsDisabled,
    YouTubeRequestFailed,
)
from youtube_transcript_api.proxies import GenericProxyConfig

from news_curator.config import Settings
from news_curator.extraction.errors import ToolUnavailable
from news_curator.extraction.normalize import collapse_whitespace

logger = logging.getLogger(__name__)


class SubtitleError(Exception):
    """The subtitle tool ran but could not produce captions."""


@dataclass(frozen=True)
class CaptionTrack:
    language: str
    generated: bool
    source: Any = field(default=None, compare=False, repr=False)


def _language_matches(track_language: str, wanted: str) -> bool:
    track_language = track_language.lower()
    wanted = wanted.lower()
    return track_language == wanted or track_language.split("-")[0] == wanted


def select_track(tracks: list[CaptionTrack], primary: str, fallback: str) -> CaptionTrack | None:
    """Pick a caption track: primary language, then fallback, then the first available.

    Within a language, uploaded captions win over auto-generated ones.
    """
    if not tracks:
        return None
    for language in (primary, fallback):
        for generated in (False, True):
            for track in tracks:
                if track.generated == generated and _language_matches(track.language, language):
                    return track
    return tracks[0]


def flatten_timed_segments(payload: dict) -> str:
    """Flatten a json3 captions payload into one whitespace-normalized transcript.

    Each event's ``segs[].utf8`` runs are concatenated; events are joined
    with spaces.
    """
    texts = []
    for event in payload.get("events") or []:
        segments = event.get("segs") or []
        text = "".join(segment.get("utf8", "") for segment in segments).strip()
        if text:
            texts.append(text)
    return collapse_whitespace(" ".join(texts))


class SubtitleTool(Protocol):
    async def fetch_transcript(self, video_id: str, primary: str, fallback: str) -> str | None: ...


class TranscriptApiTool:
    """Subtitle retrieval through youtube-transcript-api."""

    def __init__(self, proxy_url: str = ""):
        self.proxy_url = proxy_url

    def _fetch_sync(self, video_id: str, primary: str, fallback: str) -> str | None:
        proxy_config = GenericProxyConfig(https_url=self.proxy_url) if self.proxy_url else None
        api = YouTubeTranscriptApi(proxy_config=proxy_config)
        tracks = [
            CaptionTrack(language=t.language_code, generated=t.is_generated, source=t)
            for t in api.list(video_id)
        ]
        track = select_track(tracks, primary, fallback)
        if track is None:
            return None
        fetched = track.source.fetch()
        return collapse_whitespace(" ".join(snippet.text for snippet in fetched)) or None

    async def fetch_transcript(self, video_id: str, primary: str, fallback: str) -> str | None:
        try:
            return await asyncio.to_thread(self._fetch_sync, video_id, primary, fallback)
        except (TranscriptsDisabled, NoTranscriptFound):
            return None
        except (RequestBlocked, YouTubeRequestFailed) as exc:
            # IP blocks and failed requests: the service cannot serve captions
            raise ToolUnavailable(f"Transcript service unavailable: {type(exc).__name__}") from exc
        except CouldNotRetrieveTranscript as exc:
            # Unavailable, unplayable or age-gated video
            raise SubtitleError(f"No transcript for {video_id}: {type(exc).__name__}") from exc


class YtDlpTool:
    """Subtitle retrieval through the ``yt-dlp`` command-line tool."""

    def __init__(self, binary: str = "yt-dlp"):
        self.binary = binary

    def _resolve_binary(self) -> str:
        path = shutil.which(self.binary)
        if path is None:
            raise ToolUnavailable(f"{self.binary} not found on PATH")
        return path

    async def _run(self, *args: str) -> bytes:
        binary = self._resolve_binary()
        try:
            proc = await asyncio.create_subprocess_exec(
                binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ToolUnavailable(f"Could not start {self.binary}: {exc}") from exc
        try:
            stdout, stderr = await proc.communicate()
        finally:
            # Cancelled mid-run (timeout or caller): do not leave the process behind
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip().splitlines()
            raise SubtitleError(message[-1] if message else f"{self.binary} exited {proc.returncode}")
        return stdout

    async def fetch_transcript(self, video_id: str, primary: str, fallback: str) -> str | None:
        watch_url = f"https://www.youtube.com/watch?v={video_id}"
        info = json.loads(await self._run("-J", "--skip-download", "--no-warnings", watch_url))

        tracks = [CaptionTrack(language=lang, generated=False) for lang in info.get("subtitles") or {}]
        tracks += [CaptionTrack(language=lang, generated=True) for lang in info.get("automatic_captions") or {}]
        track = select_track(tracks, primary, fallback)
        if track is None:
            return None

        with tempfile.TemporaryDirectory(prefix="news-curator-subs-") as tmp:
            await self._run(
                "--skip-download",
                "--write-auto-subs" if track.generated else "--write-subs",
                "--sub-langs",
                track.language,
                "--sub-format",
                "json3",
                "--no-warnings",
                "-o",
                str(Path(tmp) / "%(id)s.%(ext)s"),
                watch_url,
            )
            files = sorted(Path(tmp).glob("*.json3"))
            if not files:
                return None
            payload = json.loads(files[0].read_text(encoding="utf-8"))

        return flatten_timed_segments(payload) or None


def get_subtitle_tool(settings: Settings) -> SubtitleTool | None:
    """Return the configured subtitle tool, or None when subtitles are disabled."""
    if settings.subtitle_backend == "yt-dlp":
        return YtDlpTool(settings.yt_dlp_path)
    if settings.subtitle_backend == "transcript-api":
        return TranscriptApiTool(settings.youtube_proxy_url)
    return None
