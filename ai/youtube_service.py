"""
YouTubeService - educational video search through the YouTube Data API v3.

Search failures never reach callers: a list of placeholder videos (source
"fallback") is returned instead.
"""
import logging
import random
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings

from .exceptions import ExternalServiceFailure

logger = logging.getLogger(__name__)

SERVICE_NAME = 'youtube'

FALLBACK_VIDEO_IDS = [
    "dQw4w9WgXcQ", "oHg5SJYRHA0", "kJQP7kiw5Fk", "L_jWHffIx5E",
    "fJ9rUzIMcZQ", "9bZkp7q19f0", "GtQdIYUtAHg", "Sagg08DrO5U",
]
FALLBACK_TITLE_PREFIXES = ["Introduction to", "Advanced", "Complete Guide to", "Mastering", "Learn"]
FALLBACK_DESCRIPTIONS = [
    "Learn {topic} from scratch with practical examples and hands-on exercises",
    "Master {topic} with this comprehensive tutorial covering all essential concepts",
    "Complete {topic} course for beginners and intermediate learners",
    "Step-by-step {topic} tutorial with real-world projects and examples",
    "Comprehensive {topic} guide with practical applications and best practices",
]


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def embed_url(video_id: str) -> str:
    return f"https://www.youtube.com/embed/{video_id}"


def parse_search_response(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Convert a search.list payload into video dicts; items without a video id are skipped.
    """
    videos = []
    for item in payload.get('items') or []:
        video_id = (item.get('id') or {}).get('videoId')
        snippet = item.get('snippet')
        if not video_id or not snippet:
            continue

        thumbnail = (snippet.get('thumbnails') or {}).get('medium') or {}
        videos.append({
            'id': video_id,
            'title': snippet.get('title', ''),
            'description': snippet.get('description') or '',
            'url': watch_url(video_id),
            'embed_url': embed_url(video_id),
            'thumbnail_url': thumbnail.get('url', ''),
            'channel_title': snippet.get('channelTitle', ''),
            'source': 'youtube',
        })
    return videos


def build_fallback_videos(topic: str, max_results: int) -> List[Dict[str, Any]]:
    videos = []
    for video_id in FALLBACK_VIDEO_IDS[:max_results]:
        videos.append({
            'id': video_id,
            'title': f"{random.choice(FALLBACK_TITLE_PREFIXES)} {topic}",
            'description': random.choice(FALLBACK_DESCRIPTIONS).format(topic=topic),
            'url': watch_url(video_id),
            'embed_url': embed_url(video_id),
            'thumbnail_url': f"https://img.youtube.com/vi/{video_id}/mqdefault.jpg",
            'channel_title': "Educational Channel",
            'source': 'fallback',
        })
    return videos


class YouTubeService:

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, timeout: Optional[int] = None):
        self.api_key = api_key if api_key is not None else settings.YOUTUBE_API_KEY
        self.base_url = base_url or settings.YOUTUBE_API_URL
        self.timeout = timeout or settings.EXTERNAL_SERVICE_TIMEOUT

    def _search(self, query: str, max_results: int) -> List[Dict[str, Any]]:
        if not self.api_key:
            raise ExternalServiceFailure(SERVICE_NAME, "YOUTUBE_API_KEY is not configured")

        params = {
            'part': 'snippet',
            'type': 'video',
            'q': query,
            'maxResults': max_results,
            'key': self.api_key,
        }
        try:
            response = requests.get(f"{self.base_url}/search", params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise ExternalServiceFailure(SERVICE_NAME, f"search request failed: {e}")
        except ValueError as e:
            raise ExternalServiceFailure(SERVICE_NAME, f"invalid JSON payload: {e}")

        return parse_search_response(payload)

    def search_videos(self, query: str, max_results: int = 5) -> List[Dict[str, Any]]:
        try:
            videos = self._search(query, max_results)
        except ExternalServiceFailure as e:
            logger.warning(f"YouTube search failed for '{query}', using fallback: {e}")
            return build_fallback_videos(query, max_results)

        logger.info(f"Found {len(videos)} YouTube videos for '{query}'")
        return videos

    def search_videos_for_topics(self, topics: List[str], max_results_per_topic: int = 2) -> List[Dict[str, Any]]:
        videos = []
        for topic in topics:
            videos.extend(self.search_videos(f"{topic} tutorial", max_results_per_topic))
        return videos
