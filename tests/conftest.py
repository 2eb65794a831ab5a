"""Shared test fixtures."""
import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from disposition_router.database import Base, import_models


# Modules that bind get_session at import time; each gets the test session.
SESSION_TARGETS = [
    'disposition_router.database.get_session',
    'disposition_router.services.router.get_session',
    'disposition_router.services.metrics.get_session',
    'disposition_router.services.catalog.get_session',
]


class FakeRedis:
    """Minimal in-memory Redis fake for circuit breaker tests."""

    def __init__(self):
        self.get_store = {}
        self.hash_store = {}

    def get(self, key):
        return self.get_store.get(key)

    def set(self, key, value):
        self.get_store[key] = str(value)

    def incr(self, key):
        val = int(self.get_store.get(key, 0)) + 1
        self.get_store[key] = str(val)
        return val

    def delete(self, *keys):
        for k in keys:
            self.get_store.pop(k, None)
            self.hash_store.pop(k, None)

    def hset(self, key, field, value):
        self.hash_store.setdefault(key, {})[field] = value

    def hincrby(self, key, field, amount):
        h = self.hash_store.setdefault(key, {})
        h[field] = str(int(h.get(field, 0)) + amount)

    def hgetall(self, key):
        return dict(self.hash_store.get(key, {}))

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    """Fake Redis pipeline that buffers ops until execute()."""

    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    def __getattr__(self, name):
        def _buffer(*args):
            self._ops.append((name, args))
            return self
        return _buffer

    def execute(self):
        for name, args in self._ops:
            getattr(self._redis, name)(*args)
        self._ops = []


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine('sqlite:///:memory:')
    import_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(db_session):
    """Route all get_session() calls to the test session.

    We disable close() so that services calling session.close() in their
    finally blocks don't invalidate the shared test session. Commits and
    rollbacks made by the services are real, so fixtures commit their rows.
    """
    _real_close = db_session.close
    db_session.close = lambda: None
    patchers = [patch(target, return_value=db_session) for target in SESSION_TARGETS]
    for p in patchers:
        p.start()
    yield db_session
    for p in reversed(patchers):
        p.stop()
    db_session.close = _real_close


@pytest.fixture(autouse=True)
def _reset_module_state():
    """Clear the breaker registry, trigger cache and RQ queue between tests."""
    from disposition_router.services import circuit_breaker, functions, triggers
    circuit_breaker._registry.clear()
    triggers.reset_cache()
    functions._queue = None
    yield
    circuit_breaker._registry.clear()
    triggers.reset_cache()
    functions._queue = None


@pytest.fixture
def fake_redis():
    """In-memory Redis fake with dict-backed storage."""
    return FakeRedis()


@pytest.fixture
def mock_redis():
    """Mock Redis client. Returns a MagicMock with common Redis methods."""
    mock = MagicMock()
    mock.get.return_value = None
    mock.hgetall.return_value = {}
    with patch('disposition_router.extensions.redis_client', mock):
        yield mock


@pytest.fixture
def app(fake_redis):
    """Flask test app with breakers backed by the Redis fake."""
    with patch('disposition_router.extensions.redis_client', fake_redis):
        from disposition_router import create_app
        app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def sent_effects():
    """Capture side effects the router would dispatch after commit."""
    with patch('disposition_router.services.router.dispatch_side_effects') as mock:
        mock.return_value = {'sent': 0, 'failed': 0}
        yield mock


# ---------------------------------------------------------------------------
# Row factories, each commits so service rollbacks leave fixture data intact
# ---------------------------------------------------------------------------

USER_ID = 'user-test-001'


@pytest.fixture
def make_lead(db_session):
    """Factory fixture: insert and commit a Lead."""
    from disposition_router.models.lead import Lead

    def _make(**overrides):
        defaults = dict(
            user_id=USER_ID,
            phone_number='+15550001111',
            first_name='Jamie',
            last_name='Rivera',
            email='jamie@example.com',
            status='new',
        )
        defaults.update(overrides)
        lead = Lead(**defaults)
        db_session.add(lead)
        db_session.commit()
        return lead
    return _make


@pytest.fixture
def make_board(db_session):
    """Factory fixture: insert and commit a PipelineBoard."""
    from disposition_router.models.pipeline import PipelineBoard

    def _make(name, user_id=USER_ID, **overrides):
        board = PipelineBoard(user_id=user_id, name=name, **overrides)
        db_session.add(board)
        db_session.commit()
        return board
    return _make


@pytest.fixture
def make_disposition(db_session):
    """Factory fixture: insert and commit a Disposition."""
    from disposition_router.models.disposition import Disposition

    def _make(name, user_id=USER_ID, **overrides):
        row = Disposition(user_id=user_id, name=name, **overrides)
        db_session.add(row)
        db_session.commit()
        return row
    return _make


@pytest.fixture
def make_rule(db_session):
    """Factory fixture: insert and commit a DispositionAutoAction."""
    from disposition_router.models.disposition import DispositionAutoAction

    def _make(action_type, user_id=USER_ID, **overrides):
        defaults = dict(action_config={}, priority=0, active=True)
        defaults.update(overrides)
        row = DispositionAutoAction(user_id=user_id, action_type=action_type, **defaults)
        db_session.add(row)
        db_session.commit()
        return row
    return _make


@pytest.fixture
def make_enrollment(db_session):
    """Factory fixture: insert and commit a LeadWorkflowProgress row."""
    from disposition_router.models.workflow import LeadWorkflowProgress

    def _make(lead, workflow_id='wf-1', campaign_id='camp-1', status='active'):
        row = LeadWorkflowProgress(
            user_id=lead.user_id, lead_id=lead.id,
            workflow_id=workflow_id, campaign_id=campaign_id, status=status,
        )
        db_session.add(row)
        db_session.commit()
        return row
    return _make


@pytest.fixture
def make_queue_entry(db_session):
    """Factory fixture: insert and commit a DialingQueueEntry."""
    from disposition_router.models.workflow import DialingQueueEntry

    def _make(lead, status='pending', campaign_id='camp-1'):
        row = DialingQueueEntry(lead_id=lead.id, status=status, campaign_id=campaign_id)
        db_session.add(row)
        db_session.commit()
        return row
    return _make
