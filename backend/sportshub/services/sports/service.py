import threading

from sportshub import db
from sportshub.models import Sport
from sportshub.realtime import get_realtime
from .adapters import FootballDataAdapter
from .game_service import GameService
from .poller import POLL_DAILY, SportsPoller
from .scheduler import start_daily_fetch, start_live_polling

SOCCER_KEY = 'soccer'


def ensure_sport(key: str, name: str) -> Sport:
    sport = Sport.query.filter_by(key=key).first()
    if sport is None:
        sport = Sport(key=key, name=name)
        db.session.add(sport)
        db.session.commit()
    return sport


class SportsService:
    """Seeds supported sports and owns their polling jobs."""

    def __init__(self, app):
        self.app = app
        self.pollers = {}
        self.stop_event = threading.Event()

    def initialize_sports(self, start_polling: bool = True) -> None:
        with self.app.app_context():
            self._initialize_soccer(start_polling)
        self.app.logger.info('[sports] initialization complete')

    def _initialize_soccer(self, start_polling):
        cfg = self.app.config
        soccer = ensure_sport(SOCCER_KEY, 'Soccer')
        self.app.logger.info(f"[sports] soccer initialized id={soccer.id}")

        adapter = FootballDataAdapter(
            api_key=cfg.get('FOOTBALL_DATA_API_KEY', ''),
            competition_id=int(cfg.get('FOOTBALL_DATA_COMPETITION_ID', 2021)),
        )
        poller = SportsPoller(
            adapter,
            GameService(adapter.name),
            get_realtime(self.app).broadcaster,
            soccer.id,
            logger=self.app.logger,
        )
        self.pollers[SOCCER_KEY] = poller
        if not start_polling:
            return

        start_daily_fetch(self.app, poller, int(cfg.get('DAILY_FETCH_HOUR', 6)), self.stop_event)
        start_live_polling(self.app, poller, int(cfg.get('LIVE_POLL_INTERVAL_SEC', 30)), self.stop_event)
        # Immediate fetch so today's games exist before the first scheduled run
        poller.run(POLL_DAILY)
        self.app.logger.info('[sports] soccer polling jobs scheduled')

    def trigger_fetch(self, kind: str, sport_key: str = SOCCER_KEY) -> int:
        poller = self.pollers.get(sport_key)
        if poller is None:
            raise LookupError(f"Sport {sport_key} not initialized")
        return poller.run(kind)

    def get_soccer_sport_id(self) -> int:
        soccer = Sport.query.filter_by(key=SOCCER_KEY).first()
        if soccer is None:
            raise LookupError('Soccer sport not initialized')
        return soccer.id

    def shutdown(self) -> None:
        self.stop_event.set()
