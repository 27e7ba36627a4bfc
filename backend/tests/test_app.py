import sportshub
from sportshub import create_app
from sportshub.services.sports import SportsService

from conftest import TestConfig


class BootConfig(TestConfig):
    TESTING = False
    ENABLE_POLLING = True


def test_sweeper_starts_even_when_sports_bootstrap_fails(monkeypatch):
    started = []

    def broken_initialize(self, start_polling=True):
        raise RuntimeError('feed unavailable')

    monkeypatch.setattr(SportsService, 'initialize_sports', broken_initialize)
    monkeypatch.setattr(sportshub, '_start_session_sweeper', lambda app, svc, sports: started.append(app))

    flask_app = create_app(BootConfig)
    assert started == [flask_app]


def test_sweeper_starts_without_polling(monkeypatch):
    started = []

    class NoPollingConfig(BootConfig):
        ENABLE_POLLING = False

    monkeypatch.setattr(SportsService, 'initialize_sports', lambda self, start_polling=True: started.append('sports'))
    monkeypatch.setattr(sportshub, '_start_session_sweeper', lambda app, svc, sports: started.append('sweeper'))

    create_app(NoPollingConfig)
    assert started == ['sweeper']
