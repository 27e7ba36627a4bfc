from .base import AdapterResponse, GameData, ScoreData, SportAdapter, TeamData
from .football_data import FootballDataAdapter

__all__ = ['AdapterResponse', 'FootballDataAdapter', 'GameData', 'ScoreData', 'SportAdapter', 'TeamData']
