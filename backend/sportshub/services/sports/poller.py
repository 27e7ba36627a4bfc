import logging
import threading

from sportshub import db
from sportshub.realtime import TopicBroadcaster
from sportshub.realtime.events import GamePayload, GameStatus, GameUpdateEvent, ScorePair, publish_game_update
from .adapters.base import SportAdapter
from .game_service import CHANGE_NEW, CHANGE_SCORE, GameService

POLL_DAILY = 'daily'
POLL_LIVE = 'live'

_EVENT_FOR_CHANGE = {
    CHANGE_NEW: 'game_new',
    CHANGE_SCORE: 'score_update',
}


class SportsPoller:
    """Fetch games from an adapter, persist them and publish changes.

    Events go to the game's `all`, `sport:<id>` and `game:<id>` topics:
    - game_new: first time a game is seen
    - score_update: the stored score changed
    - game_update: any other refresh of an in-progress game

    Only one poll runs at a time; an overlapping request is skipped.
    """

    def __init__(self, adapter: SportAdapter, game_service: GameService, broadcaster: TopicBroadcaster,
                 sport_id: int, logger: logging.Logger = None):
        self.adapter = adapter
        self.game_service = game_service
        self.broadcaster = broadcaster
        self.sport_id = sport_id
        self.logger = logger or logging.getLogger(__name__)
        self._running = threading.Lock()

    def run(self, kind: str) -> int:
        """Run one poll; returns the number of events published."""
        if kind not in (POLL_DAILY, POLL_LIVE):
            raise ValueError(f"Unknown poll kind: {kind}")
        if not self._running.acquire(blocking=False):
            self.logger.info(f"[poll-skip] kind={kind} sport={self.sport_id} previous poll still running")
            return 0
        try:
            return self._run(kind)
        finally:
            self._running.release()

    def _run(self, kind):
        if kind == POLL_DAILY:
            response = self.adapter.fetch_todays_games()
        else:
            response = self.adapter.fetch_live_games()

        if not response.success or response.data is None:
            self.logger.error(f"[poll-fail] kind={kind} sport={self.sport_id} error={response.error}")
            return 0

        published = 0
        for game_data in response.data:
            try:
                game, change = self.game_service.upsert_game(self.sport_id, game_data)
            except Exception as exc:
                db.session.rollback()
                self.logger.error(f"[poll-upsert-fail] external_id={game_data.external_id} error={exc}")
                continue
            event_kind = _EVENT_FOR_CHANGE.get(change)
            if event_kind is None and game_data.status == GameStatus.IN_PROGRESS:
                event_kind = 'game_update'
            if event_kind is None:
                continue
            event = GameUpdateEvent(
                kind=event_kind,
                game_id=str(game.id),
                sport_id=str(game.sport_id),
                data=GamePayload(
                    id=str(game.id),
                    home_team=game_data.home_team.name,
                    away_team=game_data.away_team.name,
                    score=ScorePair(home=game_data.score.home, away=game_data.score.away) if game_data.score else None,
                    status=game_data.status,
                    period=game_data.period,
                    clock=game_data.clock,
                ),
            )
            publish_game_update(self.broadcaster, event)
            published += 1

        self.logger.info(f"[poll] kind={kind} sport={self.sport_id} games={len(response.data)} events={published}")
        return published
