"""Test configuration and fixtures."""
import copy

import pytest

from app import create_app
from web.extensions import db
from web.models import Job, OptimizerSettings


class TestConfig:
    """Test configuration."""
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = 'WARNING'
    DEFAULT_ORIGIN_X = 0.0
    DEFAULT_ORIGIN_Y = 0.0
    CUT_HOLES_FIRST = False


def _line(shape_id, x1, y1, x2, y2):
    return {
        'id': shape_id,
        'type': 'line',
        'geometry': {'start': {'x': x1, 'y': y1}, 'end': {'x': x2, 'y': y2}}
    }


def _square(chain_id, x, y, size):
    """Closed CCW square chain in wire format, starting at its lower-left corner."""
    return {
        'id': chain_id,
        'shapes': [
            _line(f'{chain_id}-s1', x, y, x + size, y),
            _line(f'{chain_id}-s2', x + size, y, x + size, y + size),
            _line(f'{chain_id}-s3', x + size, y + size, x, y + size),
            _line(f'{chain_id}-s4', x, y + size, x, y)
        ]
    }


# A plate with two holes, plus a loose line outside it
SAMPLE_JOB_DATA = {
    'chains': [
        _square('shell', 0, 0, 100),
        _square('hole-a', 10, 10, 10),
        _square('hole-b', 70, 70, 10),
        {'id': 'loose', 'shapes': [_line('loose-s1', 150, 0, 160, 0)]}
    ],
    'cuts': [
        {'id': 'cut-shell', 'chain_id': 'shell', 'name': 'Outer profile'},
        {'id': 'cut-hole-a', 'chain_id': 'hole-a'},
        {'id': 'cut-hole-b', 'chain_id': 'hole-b'},
        {'id': 'cut-loose', 'chain_id': 'loose'}
    ],
    'parts': [
        {'id': 'plate', 'shell_chain_id': 'shell', 'hole_chain_ids': ['hole-a', 'hole-b']}
    ]
}


@pytest.fixture
def app():
    """Create and configure a test application instance."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def sample_job_data():
    """Job wire-format data: one part with two holes and one loose cut."""
    return copy.deepcopy(SAMPLE_JOB_DATA)


@pytest.fixture
def sample_job(app, sample_job_data):
    """Create a saved job for testing."""
    with app.app_context():
        job = Job(name='Test Plate', data=sample_job_data)
        db.session.add(job)
        db.session.commit()
        yield job


@pytest.fixture
def optimizer_settings(app):
    """Create optimizer settings for testing."""
    with app.app_context():
        settings = OptimizerSettings(
            id=1,
            origin_x=0.0,
            origin_y=0.0,
            cut_holes_first=False,
            preserve_order=False
        )
        db.session.add(settings)
        db.session.commit()
        yield settings
