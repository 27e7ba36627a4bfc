from datetime import datetime, timedelta, timezone

from sportshub import db
from sportshub.models import Game, GameScore, Team, utcnow
from .adapters.base import GameData, TeamData

CHANGE_NEW = 'new'
CHANGE_SCORE = 'score'
CHANGE_UPDATE = 'update'


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class GameService:
    """Persistence for teams, games and scores coming from adapters."""

    def __init__(self, adapter_name: str = 'football-data'):
        self.adapter_name = adapter_name

    def upsert_team(self, sport_id: int, team_data: TeamData) -> Team:
        team = Team.query.filter_by(sport_id=sport_id, external_id=team_data.external_id).first()
        if team is None:
            team = Team(sport_id=sport_id, external_id=team_data.external_id)
        team.name = team_data.name
        team.short_name = team_data.short_name
        team.logo_url = team_data.logo_url
        db.session.add(team)
        db.session.flush()
        return team

    def upsert_game(self, sport_id: int, game_data: GameData):
        """Insert or update a game and its score.

        Returns ``(game, change)`` where change is one of ``new``, ``score``
        (the score moved) or ``update``.
        """
        home = self.upsert_team(sport_id, game_data.home_team)
        away = self.upsert_team(sport_id, game_data.away_team)

        game = Game.query.filter_by(sport_id=sport_id, external_id=game_data.external_id).first()
        change = CHANGE_UPDATE
        if game is None:
            game = Game(
                sport_id=sport_id,
                home_team_id=home.id,
                away_team_id=away.id,
                external_id=game_data.external_id,
                adapter=self.adapter_name,
            )
            change = CHANGE_NEW
        game.start_time = _naive_utc(game_data.start_time)
        game.status = game_data.status.value
        game.period = game_data.period
        game.clock = game_data.clock
        game.venue = game_data.venue
        db.session.add(game)
        db.session.flush()

        if game_data.score is not None:
            score = game.score
            if score is None:
                score = GameScore(game_id=game.id)
                if change != CHANGE_NEW:
                    change = CHANGE_SCORE
            elif (score.home_score, score.away_score) != (game_data.score.home, game_data.score.away):
                change = CHANGE_SCORE
            score.home_score = game_data.score.home
            score.away_score = game_data.score.away
            db.session.add(score)

        db.session.commit()
        return game, change

    def get_todays_games(self, sport_id: int):
        """All games on the calendar day of the next upcoming game."""
        next_game = (
            Game.query.filter(Game.sport_id == sport_id, Game.start_time >= utcnow())
            .order_by(Game.start_time.asc())
            .first()
        )
        if next_game is None:
            return []
        start_of_day = datetime.combine(next_game.start_time.date(), datetime.min.time())
        end_of_day = start_of_day + timedelta(days=1)
        return (
            Game.query.filter(
                Game.sport_id == sport_id,
                Game.start_time >= start_of_day,
                Game.start_time < end_of_day,
            )
            .order_by(Game.start_time.asc())
            .all()
        )

    def get_live_games(self, sport_id: int):
        return (
            Game.query.filter_by(sport_id=sport_id, status='IN_PROGRESS')
            .order_by(Game.start_time.asc())
            .all()
        )
