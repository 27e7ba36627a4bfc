"""Sports data services: adapters, persistence and polling.

HTTP routes and the CLI import from here; the polling job is the only
producer of game events for the realtime broadcaster.
"""

from .game_service import GameService
from .poller import POLL_DAILY, POLL_LIVE, SportsPoller
from .service import SportsService, ensure_sport

__all__ = ['GameService', 'POLL_DAILY', 'POLL_LIVE', 'SportsPoller', 'SportsService', 'ensure_sport']
