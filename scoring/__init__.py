"""
카타 채점 엔진

- 점수 → 포인트 환산
- 심판 점수 이상치 감지 및 조정 제안
- 제안 수락/거절과 조정 이력
"""
from .models import (
    Competitor,
    Suggestion,
    DiscrepancyResult,
    ActionResult,
    ScoringIssue,
    OutlierKind,
    HistoryEntry,
    HistoryLog,
    SLOT_COUNT,
    parse_score,
    format_score,
)
from .mapper import SCORE_TABLE, points_for, total_points
from .discrepancy import analyze
from .events import EventPublisher, EventType, ScoreBoardEvent
from .config import ScoringConfig, scoring_config
from .engine import ScoreBoard, BoardState, calculate

__all__ = [
    # Models
    "Competitor",
    "Suggestion",
    "DiscrepancyResult",
    "ActionResult",
    "ScoringIssue",
    "OutlierKind",
    "HistoryEntry",
    "HistoryLog",
    "SLOT_COUNT",
    "parse_score",
    "format_score",
    # Mapper
    "SCORE_TABLE",
    "points_for",
    "total_points",
    # Discrepancy
    "analyze",
    # Events
    "EventPublisher",
    "EventType",
    "ScoreBoardEvent",
    # Config
    "ScoringConfig",
    "scoring_config",
    # Engine
    "ScoreBoard",
    "BoardState",
    "calculate",
]
