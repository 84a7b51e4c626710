"""
Pytest configuration and fixtures for karate score calculator tests
"""

import pytest
import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from scoring import ScoreBoard, ScoringConfig, EventPublisher, Competitor


FIXED_TIME = datetime(2024, 11, 3, 10, 30, tzinfo=timezone.utc)


def _make_competitor(competitor_id, scores, total=None, name=""):
    return Competitor(
        id=competitor_id,
        name=name,
        scores=tuple(Decimal(s) if s is not None else None for s in scores),
        total=total,
    )


@pytest.fixture
def fixed_time():
    return FIXED_TIME


@pytest.fixture
def make_competitor():
    """점수가 채워진 선수 생성 함수"""
    return _make_competitor


@pytest.fixture(scope="function")
def config():
    """환경 변수와 무관한 기본 설정"""
    return ScoringConfig(debug_mode=False, initial_competitors=5, event_log_size=100)


@pytest.fixture(scope="function")
def publisher():
    return EventPublisher(max_log_size=100)


@pytest.fixture(scope="function")
def board(config, publisher):
    """고정 시각 clock을 쓰는 채점판"""
    return ScoreBoard(config=config, publisher=publisher, clock=lambda: FIXED_TIME)


@pytest.fixture(scope="function")
def sample_roster():
    """CLI 명단 샘플"""
    return [
        {"name": "Sato", "scores": ["9.99", "9.96", "9.97"]},
        {"name": "Kim", "scores": ["9.93", "9.93", "9.99"]},
        {"name": "Lee", "scores": ["9.95", "9.96", "9.95"]},
        {"name": "Park", "scores": ["9.96", "9.95"]},
    ]
