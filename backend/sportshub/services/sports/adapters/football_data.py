import logging
import math
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests

from sportshub.realtime.events import GameStatus
from .base import AdapterResponse, GameData, RateLimit, ScoreData, SportAdapter, TeamData

logger = logging.getLogger(__name__)

BASE_URL = 'https://api.football-data.org/v4'

_STATUS_MAP = {
    'SCHEDULED': GameStatus.SCHEDULED,
    'TIMED': GameStatus.SCHEDULED,
    'LIVE': GameStatus.IN_PROGRESS,
    'IN_PLAY': GameStatus.IN_PROGRESS,
    'PAUSED': GameStatus.IN_PROGRESS,
    'FINISHED': GameStatus.FINAL,
    'POSTPONED': GameStatus.DELAYED,
    'SUSPENDED': GameStatus.DELAYED,
    'CANCELLED': GameStatus.CANCELLED,
}


def transform_match(match: dict, league: Optional[str] = None) -> GameData:
    """Map a football-data.org match onto our GameData shape."""
    status = _STATUS_MAP.get(match.get('status'), GameStatus.SCHEDULED)
    minute = match.get('minute')
    full_time = (match.get('score') or {}).get('fullTime') or {}
    score = None
    if full_time.get('home') is not None:
        score = ScoreData(home=full_time['home'], away=full_time.get('away') or 0)

    def team(raw):
        return TeamData(
            name=raw['name'],
            short_name=raw.get('shortName') or raw.get('tla'),
            external_id=str(raw['id']),
            logo_url=raw.get('crest') or None,
        )

    return GameData(
        id=f"football-data-{match['id']}",
        external_id=str(match['id']),
        home_team=team(match['homeTeam']),
        away_team=team(match['awayTeam']),
        start_time=match['utcDate'],
        status=status,
        period=math.ceil(minute / 45) if minute else None,
        clock=f"{minute}'" if minute else None,
        venue=match.get('venue'),
        league=league,
        score=score,
    )


class FootballDataAdapter(SportAdapter):
    """Premier League fixtures and live scores from football-data.org.

    Without an API key the adapter serves a fixed pair of mock matches so
    local development works offline.
    """

    sport = 'soccer'
    league = 'Premier League'
    name = 'football-data'

    def __init__(self, api_key: str = '', competition_id: int = 2021, session: requests.Session = None, timeout: float = 10.0):
        self.api_key = api_key
        self.competition_id = competition_id
        self.session = session or requests.Session()
        self.timeout = timeout
        self.last_call = None
        if not self.api_key:
            logger.warning('FOOTBALL_DATA_API_KEY not set; adapter will return mock data')

    def fetch_todays_games(self):
        today = datetime.now(timezone.utc).date().isoformat()
        return self._fetch_games({'dateFrom': today, 'dateTo': today})

    def fetch_live_games(self):
        return self._fetch_games({'status': 'LIVE,IN_PLAY,PAUSED'})

    def get_health(self):
        return {'healthy': True, 'last_call': self.last_call.isoformat() if self.last_call else None}

    def _fetch_games(self, params):
        response = self._request(f"{BASE_URL}/competitions/{self.competition_id}/matches", params)
        if not response.success or response.data is None:
            return AdapterResponse(success=False, error=response.error or 'Failed to fetch data')
        try:
            games = [transform_match(m, self.league) for m in response.data.get('matches', [])]
        except (KeyError, TypeError, ValueError) as exc:
            logger.error(f"[adapter] malformed match payload: {exc}")
            return AdapterResponse(success=False, error=f"Malformed response: {exc}")
        return AdapterResponse(success=True, data=games, rate_limit=response.rate_limit)

    def _request(self, url, params):
        if not self.api_key:
            return _mock_response()
        self.last_call = datetime.now(timezone.utc)
        try:
            resp = self.session.get(url, params=params, headers={'X-Auth-Token': self.api_key}, timeout=self.timeout)
        except requests.RequestException as exc:
            return AdapterResponse(success=False, error=str(exc) or 'Network error')
        rate_limit = RateLimit(
            remaining=int(resp.headers.get('X-Requests-Available-Minute') or 0),
            reset_time=time.time() + 60,
        )
        if not resp.ok:
            return AdapterResponse(success=False, error=f"HTTP {resp.status_code}: {resp.reason}", rate_limit=rate_limit)
        try:
            data = resp.json()
        except ValueError as exc:
            return AdapterResponse(success=False, error=f"Invalid JSON: {exc}", rate_limit=rate_limit)
        return AdapterResponse(success=True, data=data, rate_limit=rate_limit)


def _mock_response():
    now = datetime.now(timezone.utc)
    tomorrow = now + timedelta(days=1)
    matches = [
        {
            'id': 12345,
            'utcDate': now.isoformat(),
            'status': 'SCHEDULED',
            'minute': None,
            'score': {'fullTime': {'home': None, 'away': None}},
            'homeTeam': {'id': 57, 'name': 'Arsenal FC', 'shortName': 'Arsenal', 'tla': 'ARS'},
            'awayTeam': {'id': 61, 'name': 'Chelsea FC', 'shortName': 'Chelsea', 'tla': 'CHE'},
            'venue': 'Emirates Stadium',
        },
        {
            'id': 12346,
            'utcDate': tomorrow.isoformat(),
            'status': 'LIVE',
            'minute': 67,
            'score': {'fullTime': {'home': 2, 'away': 1}},
            'homeTeam': {'id': 65, 'name': 'Manchester City FC', 'shortName': 'Man City', 'tla': 'MCI'},
            'awayTeam': {'id': 66, 'name': 'Manchester United FC', 'shortName': 'Man United', 'tla': 'MUN'},
            'venue': 'Etihad Stadium',
        },
    ]
    return AdapterResponse(
        success=True,
        data={'count': len(matches), 'matches': matches},
        rate_limit=RateLimit(remaining=9, reset_time=time.time() + 60),
    )
