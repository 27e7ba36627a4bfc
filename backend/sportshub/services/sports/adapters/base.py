from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

from sportshub.realtime.events import GameStatus

T = TypeVar('T')


class TeamData(BaseModel):
    name: str
    short_name: Optional[str] = None
    external_id: str
    logo_url: Optional[str] = None


class ScoreData(BaseModel):
    home: int
    away: int


class GameData(BaseModel):
    id: str
    external_id: str
    home_team: TeamData
    away_team: TeamData
    start_time: datetime
    status: GameStatus
    period: Optional[int] = None
    clock: Optional[str] = None
    venue: Optional[str] = None
    league: Optional[str] = None
    score: Optional[ScoreData] = None


class RateLimit(BaseModel):
    remaining: int
    reset_time: float


class AdapterResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    rate_limit: Optional[RateLimit] = None


class SportAdapter:
    """Source of game data for one sport and league."""

    sport: str = ''
    league: str = ''
    name: str = ''

    def fetch_todays_games(self) -> AdapterResponse[List[GameData]]:
        raise NotImplementedError

    def fetch_live_games(self) -> AdapterResponse[List[GameData]]:
        raise NotImplementedError

    def get_health(self) -> dict:
        return {'healthy': True}
