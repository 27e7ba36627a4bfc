from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .broadcaster import TopicBroadcaster, game_topics


class GameStatus(str, Enum):
    SCHEDULED = 'SCHEDULED'
    IN_PROGRESS = 'IN_PROGRESS'
    FINAL = 'FINAL'
    CANCELLED = 'CANCELLED'
    DELAYED = 'DELAYED'


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ScorePair(_Wire):
    home: int
    away: int


class GamePayload(_Wire):
    id: str
    home_team: str
    away_team: str
    score: Optional[ScorePair] = None
    status: GameStatus
    period: Optional[int] = None
    clock: Optional[str] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class GameUpdateEvent(_Wire):
    """A change to one game, delivered to its global, sport and game topics."""

    kind: Literal['game_update', 'game_new', 'score_update']
    game_id: str
    sport_id: str
    data: GamePayload

    @property
    def topics(self) -> tuple:
        return game_topics(self.sport_id, self.game_id)

    def to_wire(self) -> dict:
        return self.data.model_dump(mode='json', by_alias=True)


def publish_game_update(broadcaster: TopicBroadcaster, event: GameUpdateEvent) -> int:
    return broadcaster.publish(event.kind, event.to_wire(), event.topics)
