"""
CodeforcesService - practice problems from the Codeforces problem bank.

Problems are filtered into difficulty bands by rating. When the API cannot be
reached (or returns an error status) a short list of sample problems is
returned so assignment authoring can continue.
"""
import hashlib
import logging
import random
import time
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings

from .exceptions import ExternalServiceFailure

logger = logging.getLogger(__name__)

SERVICE_NAME = 'codeforces'

PROBLEM_URL = "https://codeforces.com/problemset/problem/{contest_id}/{index}"

# Inclusive rating windows per difficulty; None means unbounded
RATING_WINDOWS = {
    'EASY': (800, 1200),
    'BEGINNER': (800, 1200),
    'MEDIUM': (1200, 1600),
    'INTERMEDIATE': (1200, 1600),
    'HARD': (1600, 2100),
    'ADVANCED': (1600, 2100),
    'EXPERT': (2100, None),
}

FALLBACK_RATINGS = {
    'EASY': 1000,
    'BEGINNER': 1000,
    'MEDIUM': 1400,
    'INTERMEDIATE': 1400,
    'HARD': 1800,
    'ADVANCED': 1800,
    'EXPERT': 2200,
}

TOPIC_TAGS = [
    (('algorithm', 'sorting'), 'sortings'),
    (('graph',), 'graphs'),
    (('dynamic', 'dp'), 'dp'),
    (('string',), 'strings'),
    (('math',), 'math'),
    (('greedy',), 'greedy'),
    (('implementation',), 'implementation'),
]

FALLBACK_LIMIT = 5


def tags_for_topic(topic: Optional[str]) -> List[str]:
    if not topic:
        return []
    lower_topic = topic.lower()
    return [tag for keywords, tag in TOPIC_TAGS if any(k in lower_topic for k in keywords)]


def matches_difficulty(rating: Optional[int], difficulty: Optional[str]) -> bool:
    """
    Unknown difficulty labels match everything; unrated problems match only then.
    """
    if not difficulty:
        return True
    window = RATING_WINDOWS.get(difficulty.upper())
    if window is None:
        return True
    if rating is None:
        return False
    low, high = window
    return rating >= low and (high is None or rating <= high)


def build_fallback_problems(difficulty: Optional[str], limit: int) -> List[Dict[str, Any]]:
    rating = FALLBACK_RATINGS.get((difficulty or '').upper(), 1200)
    problems = []
    for i in range(1, min(limit, FALLBACK_LIMIT) + 1):
        contest_id = 1000 + i
        problems.append({
            'contest_id': contest_id,
            'index': 'A',
            'name': f"Sample Problem {i} ({difficulty})",
            'type': 'PROGRAMMING',
            'rating': rating,
            'tags': ['implementation', 'math'],
            'solved_count': 1000 + i * 100,
            'url': PROBLEM_URL.format(contest_id=contest_id, index='A'),
        })
    return problems


def parse_problems_response(payload: Dict[str, Any], difficulty: Optional[str], limit: int) -> List[Dict[str, Any]]:
    if payload.get('status') != 'OK':
        raise ExternalServiceFailure(SERVICE_NAME, f"API returned error: {payload.get('comment')}")

    result = payload.get('result') or {}
    statistics = {
        (s.get('contestId'), s.get('index')): s.get('solvedCount', 0)
        for s in result.get('problemStatistics') or []
    }

    problems = []
    for problem in result.get('problems') or []:
        if len(problems) >= limit:
            break
        rating = problem.get('rating')
        if not matches_difficulty(rating, difficulty):
            continue
        contest_id = problem.get('contestId')
        index = problem.get('index')
        problems.append({
            'contest_id': contest_id,
            'index': index,
            'name': problem.get('name'),
            'type': problem.get('type'),
            'rating': rating,
            'tags': list(problem.get('tags') or []),
            'solved_count': statistics.get((contest_id, index), 0),
            'url': PROBLEM_URL.format(contest_id=contest_id, index=index),
        })
    return problems


class CodeforcesService:

    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None,
                 api_secret: Optional[str] = None, timeout: Optional[int] = None):
        self.api_url = api_url or settings.CODEFORCES_API_URL
        self.api_key = api_key if api_key is not None else settings.CODEFORCES_API_KEY
        self.api_secret = api_secret if api_secret is not None else settings.CODEFORCES_API_SECRET
        self.timeout = timeout or settings.EXTERNAL_SERVICE_TIMEOUT

    def sign_params(self, method: str, params: Dict[str, str], now: Optional[int] = None,
                    rand: Optional[str] = None) -> Dict[str, str]:
        """
        Add apiKey, time and apiSig to params for an authorized call.

        apiSig is rand + sha512("rand/method?sorted_params#secret").
        """
        signed = dict(params)
        signed['apiKey'] = self.api_key
        signed['time'] = str(now if now is not None else int(time.time()))
        rand = rand or f"{random.randint(0, 999999):06d}"

        query = '&'.join(f"{key}={signed[key]}" for key in sorted(signed))
        digest = hashlib.sha512(f"{rand}/{method}?{query}#{self.api_secret}".encode('utf-8')).hexdigest()
        signed['apiSig'] = rand + digest
        return signed

    def _call(self, method: str, params: Dict[str, str], signed: bool = False) -> Any:
        if signed and self.api_key and self.api_secret:
            params = self.sign_params(method, params)

        try:
            response = requests.get(f"{self.api_url}/{method}", params=params, timeout=self.timeout)
            payload = response.json()
        except requests.RequestException as e:
            raise ExternalServiceFailure(SERVICE_NAME, f"{method} request failed: {e}")
        except ValueError as e:
            raise ExternalServiceFailure(SERVICE_NAME, f"{method} returned invalid JSON: {e}")

        return payload

    def get_problems(self, difficulty: Optional[str], tags: List[str], limit: int) -> List[Dict[str, Any]]:
        params = {'tags': ';'.join(tags)} if tags else {}
        try:
            payload = self._call('problemset.problems', params)
            problems = parse_problems_response(payload, difficulty, limit)
        except ExternalServiceFailure as e:
            logger.warning(f"Codeforces problem fetch failed, using fallback: {e}")
            return build_fallback_problems(difficulty, limit)

        logger.info(f"Fetched {len(problems)} Codeforces problems (difficulty={difficulty}, tags={tags})")
        return problems

    def get_problems_by_difficulty(self, difficulty: Optional[str], topic: Optional[str], count: int) -> List[Dict[str, Any]]:
        return self.get_problems(difficulty, tags_for_topic(topic), count)

    def get_user_info(self, handle: str) -> Dict[str, Any]:
        try:
            payload = self._call('user.info', {'handles': handle}, signed=True)
        except ExternalServiceFailure as e:
            logger.warning(f"Codeforces user fetch failed for {handle}: {e}")
            return {}

        if payload.get('status') != 'OK' or not payload.get('result'):
            return {}

        user = payload['result'][0]
        return {
            'handle': user.get('handle'),
            'rating': user.get('rating'),
            'max_rating': user.get('maxRating'),
            'rank': user.get('rank'),
            'max_rank': user.get('maxRank'),
        }
