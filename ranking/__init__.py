"""
카타 순위 계산

감점식 포인트 합계 + 최고 점수 개수 타이브레이크
"""
from .calculator import (
    rank_competitors,
    apply_rankings,
    highest_score_count,
    TIE_BREAK_NOTE,
)

__all__ = [
    "rank_competitors",
    "apply_rankings",
    "highest_score_count",
    "TIE_BREAK_NOTE",
]
