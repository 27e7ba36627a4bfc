from datetime import datetime, timezone
import uuid

from flask_login import UserMixin

from sportshub import bcrypt, db


def utcnow():
    # Stored naive, always UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() + 'Z' if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(128), nullable=True)
    image = db.Column(db.String(512), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'name': self.name or self.username,
            'image': self.image,
        }


class Sport(db.Model):
    __tablename__ = 'sport'
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(32), unique=True, nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)

    def to_dict(self):
        return {'id': self.id, 'key': self.key, 'name': self.name}


class Team(db.Model):
    __tablename__ = 'team'
    __table_args__ = (db.UniqueConstraint('sport_id', 'external_id', name='uq_team_sport_external'),)
    id = db.Column(db.Integer, primary_key=True)
    sport_id = db.Column(db.Integer, db.ForeignKey('sport.id'), nullable=False)
    external_id = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(128), nullable=False)
    short_name = db.Column(db.String(64), nullable=True)
    logo_url = db.Column(db.String(512), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'short_name': self.short_name,
            'logo_url': self.logo_url,
        }


class Game(db.Model):
    __tablename__ = 'game'
    __table_args__ = (db.UniqueConstraint('sport_id', 'external_id', name='uq_game_sport_external'),)
    id = db.Column(db.Integer, primary_key=True)
    sport_id = db.Column(db.Integer, db.ForeignKey('sport.id'), nullable=False, index=True)
    home_team_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False)
    away_team_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False)
    external_id = db.Column(db.String(64), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(16), default='SCHEDULED', nullable=False)  # SCHEDULED, IN_PROGRESS, FINAL, CANCELLED, DELAYED
    period = db.Column(db.Integer, nullable=True)
    clock = db.Column(db.String(16), nullable=True)
    venue = db.Column(db.String(128), nullable=True)
    adapter = db.Column(db.String(32), nullable=True)
    sport = db.relationship('Sport')
    home_team = db.relationship('Team', foreign_keys=[home_team_id])
    away_team = db.relationship('Team', foreign_keys=[away_team_id])
    score = db.relationship('GameScore', back_populates='game', uselist=False)

    def to_dict(self):
        return {
            'id': self.id,
            'sport_id': self.sport_id,
            'external_id': self.external_id,
            'home_team': self.home_team.to_dict() if self.home_team else None,
            'away_team': self.away_team.to_dict() if self.away_team else None,
            'start_time': _iso(self.start_time),
            'status': self.status,
            'period': self.period,
            'clock': self.clock,
            'venue': self.venue,
            'score': self.score.to_dict() if self.score else None,
        }


class GameScore(db.Model):
    __tablename__ = 'game_score'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), unique=True, nullable=False)
    home_score = db.Column(db.Integer, default=0, nullable=False)
    away_score = db.Column(db.Integer, default=0, nullable=False)
    game = db.relationship('Game', back_populates='score')

    def to_dict(self):
        return {'home': self.home_score, 'away': self.away_score}


class ScreenShareSession(db.Model):
    __tablename__ = 'screen_share_session'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    host_user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=True, index=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    status = db.Column(db.String(16), default='ACTIVE', nullable=False)  # ACTIVE, PAUSED, ENDED
    is_public = db.Column(db.Boolean, default=True, nullable=False)
    max_viewers = db.Column(db.Integer, nullable=True)
    current_viewers = db.Column(db.Integer, default=0, nullable=False)
    total_views = db.Column(db.Integer, default=0, nullable=False)
    started_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    ended_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    host = db.relationship('User')
    game = db.relationship('Game')
    viewers = db.relationship('ScreenShareViewer', back_populates='session', lazy='dynamic')

    def to_dict(self, include_viewers=False):
        data = {
            'id': self.id,
            'host_user_id': self.host_user_id,
            'game_id': self.game_id,
            'title': self.title,
            'description': self.description,
            'status': self.status,
            'is_public': self.is_public,
            'max_viewers': self.max_viewers,
            'current_viewers': self.current_viewers,
            'total_views': self.total_views,
            'started_at': _iso(self.started_at),
            'ended_at': _iso(self.ended_at),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'host': self.host.to_dict() if self.host else None,
        }
        if self.game:
            data['game'] = {
                'id': self.game.id,
                'home_team': {'name': self.game.home_team.name},
                'away_team': {'name': self.game.away_team.name},
                'status': self.game.status,
            }
        if include_viewers:
            data['viewers'] = [v.to_dict() for v in self.viewers.filter_by(is_active=True).all()]
        return data


class ScreenShareViewer(db.Model):
    __tablename__ = 'screen_share_viewer'
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(36), db.ForeignKey('screen_share_session.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    joined_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    left_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    session = db.relationship('ScreenShareSession', back_populates='viewers')
    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'session_id': self.session_id,
            'user_id': self.user_id,
            'joined_at': _iso(self.joined_at),
            'left_at': _iso(self.left_at),
            'is_active': self.is_active,
            'user': self.user.to_dict() if self.user else None,
        }
