"""Screen-share session lifecycle.

Persisted sessions and viewer records live here; the signaling relay only
knows which connections are in which room. Lifecycle changes made here are
pushed to the session's room as `screen-share:session-updated` and
`screen-share:session-ended`.
"""

from datetime import timedelta
from typing import Optional

from sportshub import db
from sportshub.models import Game, ScreenShareSession, ScreenShareViewer, utcnow
from sportshub.realtime.relay import SESSION_ENDED, SESSION_UPDATED, SignalingRelay

STATUS_ACTIVE = 'ACTIVE'
STATUS_PAUSED = 'PAUSED'
STATUS_ENDED = 'ENDED'


class ScreenShareError(Exception):
    status_code = 400


class SessionNotFound(ScreenShareError):
    status_code = 404

    def __init__(self, message='Session not found'):
        super().__init__(message)


class AccessDenied(ScreenShareError):
    status_code = 403

    def __init__(self, message='Session not found or access denied'):
        super().__init__(message)


class SessionNotActive(ScreenShareError):
    def __init__(self, message='Session is not active'):
        super().__init__(message)


class SessionFull(ScreenShareError):
    def __init__(self, message='Session is full'):
        super().__init__(message)


class ScreenShareService:
    def __init__(self, relay: SignalingRelay, config, logger=None):
        self.relay = relay
        self.config = config
        self.logger = logger

    @property
    def max_viewers_cap(self) -> int:
        return int(self.config.get('SCREEN_SHARE_MAX_VIEWERS_PER_SESSION', 50))

    @property
    def ice_servers(self):
        return list(self.config.get('WEBRTC_ICE_SERVERS') or [])

    def _log(self, message):
        if self.logger:
            self.logger.info(message)

    def create_session(self, host_user_id: int, title: str, description: Optional[str] = None,
                       game_id: Optional[int] = None, is_public: bool = True,
                       max_viewers: Optional[int] = None) -> ScreenShareSession:
        if game_id is not None and db.session.get(Game, game_id) is None:
            raise ScreenShareError('Game not found')
        session = ScreenShareSession(
            host_user_id=host_user_id,
            title=title,
            description=description,
            game_id=game_id,
            is_public=is_public,
            max_viewers=min(max_viewers or 50, self.max_viewers_cap),
            status=STATUS_ACTIVE,
        )
        db.session.add(session)
        db.session.commit()
        self._log(f"[screen-share] created session={session.id} host={host_user_id}")
        return session

    def get_active_sessions(self, limit: int = 20):
        return (
            ScreenShareSession.query.filter_by(status=STATUS_ACTIVE, is_public=True)
            .order_by(ScreenShareSession.started_at.desc())
            .limit(limit)
            .all()
        )

    def get_session(self, session_id: str) -> Optional[ScreenShareSession]:
        return db.session.get(ScreenShareSession, session_id)

    def update_session(self, session_id: str, host_user_id: int, **changes) -> ScreenShareSession:
        session = self.get_session(session_id)
        if session is None or session.host_user_id != host_user_id:
            raise AccessDenied()

        for field in ('title', 'description', 'is_public'):
            if changes.get(field) is not None:
                setattr(session, field, changes[field])
        if changes.get('max_viewers') is not None:
            session.max_viewers = min(int(changes['max_viewers']), self.max_viewers_cap)
        status = changes.get('status')
        if status is not None:
            session.status = status
            if status == STATUS_ENDED:
                session.ended_at = utcnow()
        db.session.add(session)
        db.session.commit()

        self.relay.broadcast_to_session(session.id, SESSION_UPDATED, session.to_dict())
        self._log(f"[screen-share] updated session={session.id}")
        return session

    def end_session(self, session_id: str, host_user_id: int) -> ScreenShareSession:
        session = self.update_session(session_id, host_user_id, status=STATUS_ENDED)
        self.relay.broadcast_to_session(session_id, SESSION_ENDED, {'sessionId': session_id})

        now = utcnow()
        for viewer in session.viewers.filter_by(is_active=True).all():
            viewer.is_active = False
            viewer.left_at = now
            db.session.add(viewer)
        session.current_viewers = 0
        db.session.add(session)
        db.session.commit()
        self._log(f"[screen-share] ended session={session_id}")
        return session

    def join_session(self, session_id: str, user_id: Optional[int] = None) -> dict:
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFound()
        if session.status != STATUS_ACTIVE:
            raise SessionNotActive()
        if session.max_viewers and session.current_viewers >= session.max_viewers:
            raise SessionFull()

        viewer = None
        if user_id is not None:
            viewer = ScreenShareViewer.query.filter_by(session_id=session_id, user_id=user_id).first()
        if viewer is None:
            viewer = ScreenShareViewer(session_id=session_id, user_id=user_id)
        elif viewer.is_active:
            # Already watching; don't count the same viewer twice
            return {'session': session, 'viewer_id': viewer.id, 'ice_servers': self.ice_servers}
        viewer.is_active = True
        viewer.left_at = None
        viewer.joined_at = utcnow()
        db.session.add(viewer)

        session.current_viewers += 1
        session.total_views += 1
        db.session.add(session)
        db.session.commit()

        self._log(f"[screen-share] user={user_id or 'anonymous'} joined session={session_id}")
        return {'session': session, 'viewer_id': viewer.id, 'ice_servers': self.ice_servers}

    def leave_session(self, session_id: str, user_id: Optional[int] = None, viewer_id: Optional[int] = None) -> int:
        """Deactivate the caller's viewer record; returns how many were closed."""
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFound()

        query = ScreenShareViewer.query.filter_by(session_id=session_id, is_active=True)
        if viewer_id is not None:
            # A viewer record can only be closed by the user it belongs to
            query = query.filter_by(id=viewer_id, user_id=user_id)
        elif user_id is not None:
            query = query.filter_by(user_id=user_id)
        else:
            # Anonymous viewers must say which viewer record is theirs
            return 0

        now = utcnow()
        closed = 0
        for viewer in query.all():
            viewer.is_active = False
            viewer.left_at = now
            db.session.add(viewer)
            closed += 1
        if closed:
            session.current_viewers = max(0, session.current_viewers - closed)
            db.session.add(session)
        db.session.commit()
        self._log(f"[screen-share] user={user_id or 'anonymous'} left session={session_id} closed={closed}")
        return closed

    def get_sessions_for_game(self, game_id: int):
        return (
            ScreenShareSession.query.filter_by(game_id=game_id, status=STATUS_ACTIVE, is_public=True)
            .order_by(ScreenShareSession.started_at.desc())
            .all()
        )

    def get_user_sessions(self, user_id: int, limit: int = 20):
        return (
            ScreenShareSession.query.filter_by(host_user_id=user_id)
            .order_by(ScreenShareSession.started_at.desc())
            .limit(limit)
            .all()
        )

    def cleanup_expired_sessions(self) -> int:
        timeout = int(self.config.get('SCREEN_SHARE_SESSION_TIMEOUT_MINUTES', 180))
        cutoff = utcnow() - timedelta(minutes=timeout)
        expired = ScreenShareSession.query.filter(
            ScreenShareSession.status != STATUS_ENDED,
            ScreenShareSession.started_at < cutoff,
        ).all()
        for session in expired:
            self.end_session(session.id, session.host_user_id)
        if expired:
            self._log(f"[screen-share] cleaned up {len(expired)} expired sessions")
        return len(expired)
