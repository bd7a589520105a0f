"""Structured-content builders for the CityQuest widgets.

Each builder turns validated tool arguments into the payload that the
widget hydrates from. Builders are pure apart from the one timestamp field
a payload may carry, which is taken fresh on every call.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any
from urllib.parse import parse_qs, urlsplit

logger = logging.getLogger(__name__)

MAX_BADGES = 6
MAX_HIGHLIGHTS = 8

DEFAULT_PLAYER_NAME = "Adventurer"
DEFAULT_CHECKPOINT = "Awaiting new intel."
DEFAULT_SCORE_STATUS = "Score beacon updated"
DEFAULT_VIDEO_TITLE = "Mission recap"
DEFAULT_VIDEO_SUMMARY = "No summary yet."
DEFAULT_PICTURE_LOCATION = "Current checkpoint"
DEFAULT_PICTURE_PROMPT = "Snap a photo to prove you made it."


# =============================================================================
# Normalization helpers
# =============================================================================


def clamp_percentage(value: Any) -> float | None:
    """Clamp a percentage into [0, 100]; non-numeric input gives None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return min(100, max(0, value))


def clean_text(value: Any, default: str) -> str:
    """Trim a free-text value, falling back to ``default`` when empty."""
    if not isinstance(value, str):
        return default
    return value.strip() or default


def optional_text(value: Any) -> str | None:
    """Trim a free-text value, giving None when empty."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def clean_list(values: Iterable[Any] | None, cap: int) -> list[str]:
    """Trim each entry, drop empties, keep order, cap the length."""
    if not values:
        return []
    cleaned = [v.strip() for v in values if isinstance(v, str)]
    return [v for v in cleaned if v][:cap]


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _last_segment(path: str) -> str | None:
    segments = [s for s in path.split("/") if s]
    return segments[-1] if segments else None


def video_embed_url(url: str | None) -> str | None:
    """Derive an embeddable player URL from a shareable video link.

    YouTube and Vimeo links map to their embed players. Any other host, or
    input that does not parse, is returned unchanged.
    """
    if not url:
        return None
    try:
        parsed = urlsplit(url)
        host = (parsed.hostname or "").removeprefix("www.")
        if host.endswith("youtube.com"):
            video_id = parse_qs(parsed.query).get("v", [None])[0]
            video_id = video_id or _last_segment(parsed.path)
            if video_id:
                return f"https://www.youtube.com/embed/{video_id}"
        if host == "youtu.be":
            video_id = parsed.path.replace("/", "", 1)
            if video_id:
                return f"https://www.youtube.com/embed/{video_id}"
        if host.endswith("vimeo.com"):
            video_id = _last_segment(parsed.path)
            if video_id:
                return f"https://player.vimeo.com/video/{video_id}"
    except ValueError as e:
        logger.debug(f"Unable to build embed url for {url!r}: {e}")
    return url


# =============================================================================
# Builders
# =============================================================================


def build_adventure_content(base_url: str) -> dict[str, Any]:
    """Payload for the adventure console launcher."""
    return {"status": "ready", "adventureUrl": f"{base_url}greeting"}


def build_score_content(args: Mapping[str, Any]) -> dict[str, Any]:
    """Payload for the live scoreboard card."""
    payload: dict[str, Any] = {
        "playerName": clean_text(args.get("playerName"), DEFAULT_PLAYER_NAME),
        "score": args["score"],
        "badges": clean_list(args.get("badges"), MAX_BADGES),
        "lastCheckpoint": clean_text(args.get("lastCheckpoint"), DEFAULT_CHECKPOINT),
        "status": clean_text(args.get("status"), DEFAULT_SCORE_STATUS),
        "updatedAt": utc_timestamp(),
    }
    progress = clamp_percentage(args.get("progressPercentage"))
    if progress is not None:
        payload["progressPercentage"] = progress
    delta = args.get("scoreDelta")
    if isinstance(delta, (int, float)) and not isinstance(delta, bool):
        payload["scoreDelta"] = delta
    return payload


def build_video_content(args: Mapping[str, Any]) -> dict[str, Any]:
    """Payload for the mission video recap."""
    video_url = args["videoUrl"]
    payload: dict[str, Any] = {
        "title": clean_text(args.get("title"), DEFAULT_VIDEO_TITLE),
        "videoUrl": video_url,
        "summary": clean_text(args.get("summary"), DEFAULT_VIDEO_SUMMARY),
        "status": "ready",
    }
    highlights = clean_list(args.get("highlights"), MAX_HIGHLIGHTS)
    if highlights:
        payload["highlights"] = highlights
    call_to_action = optional_text(args.get("callToAction"))
    if call_to_action:
        payload["callToAction"] = call_to_action
    payload["ctaUrl"] = args.get("ctaUrl") or video_url
    duration = optional_text(args.get("duration"))
    if duration:
        payload["duration"] = duration
    if args.get("thumbnailUrl"):
        payload["thumbnailUrl"] = args["thumbnailUrl"]
    embed_url = video_embed_url(video_url)
    if embed_url:
        payload["embedUrl"] = embed_url
    return payload


def build_calculator_content(args: Mapping[str, Any]) -> dict[str, Any]:
    """The calculator renders its initial state straight from the arguments."""
    return dict(args)


def build_picture_content(args: Mapping[str, Any], base_url: str) -> dict[str, Any]:
    """Payload for the checkpoint photo request."""
    return {
        "status": "awaiting-photo",
        "location": clean_text(args.get("location"), DEFAULT_PICTURE_LOCATION),
        "prompt": clean_text(args.get("prompt"), DEFAULT_PICTURE_PROMPT),
        "uploadUrl": f"{base_url}take-picture",
        "requestedAt": utc_timestamp(),
    }
