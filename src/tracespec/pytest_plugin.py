"""
pytest plugin for TraceSpec.

Owns the run-scoped TraceSession: it is created when the test session
starts and flushed when it finishes. Applications under test attach it with
the ``tracespec_session`` fixture:

    @pytest.fixture
    def client(tracespec_session):
        app.add_middleware(TraceMiddleware, session=tracespec_session)
        return TestClient(app)

Enable recording with ``--tracespec PATH`` or TRACESPEC_OUTPUT.
"""

import os

import pytest

from .config import TEST_ENVIRONMENT, TraceConfig
from .session import TraceSession

_SESSION_KEY = pytest.StashKey[TraceSession]()


def pytest_addoption(parser):
    group = parser.getgroup('tracespec')
    group.addoption(
        '--tracespec',
        action='store',
        default=None,
        metavar='PATH',
        help='Record exchanges into this OpenAPI file (.yaml) or directory',
    )


def pytest_configure(config):
    output = config.getoption('--tracespec', default=None)
    if output:
        os.environ['TRACESPEC_OUTPUT'] = output
    if not os.environ.get('TRACESPEC_OUTPUT'):
        return

    # Running under pytest is the test environment
    os.environ.setdefault('TRACESPEC_ENV', TEST_ENVIRONMENT)
    config.stash[_SESSION_KEY] = TraceSession(TraceConfig.from_env())


def pytest_unconfigure(config):
    session = config.stash.get(_SESSION_KEY, None)
    if session is not None:
        session.close()


@pytest.fixture(scope='session')
def tracespec_session(pytestconfig):
    """The run's TraceSession (disabled when no output is configured)."""
    session = pytestconfig.stash.get(_SESSION_KEY, None)
    if session is None:
        session = TraceSession(TraceConfig())
    return session
