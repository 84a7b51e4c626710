"""
점수 → 포인트 환산

감점식 채점: 소수 점수가 높을수록 포인트가 적다 (9.93 → 6, 9.99 → 0).
표에 없는 값은 0포인트로 처리한다.
"""
from decimal import Decimal, DecimalException
from typing import Iterable, Optional, Tuple

from .models import parse_score


# (점수, 포인트) - 점수 오름차순
SCORE_TABLE: Tuple[Tuple[Decimal, int], ...] = (
    (Decimal("9.93"), 6),
    (Decimal("9.94"), 5),
    (Decimal("9.95"), 4),
    (Decimal("9.96"), 3),
    (Decimal("9.97"), 2),
    (Decimal("9.98"), 1),
    (Decimal("9.99"), 0),
)

# 표에 없는 점수의 포인트
FALLBACK_POINTS = 0

MIN_SCORE = SCORE_TABLE[0][0]
MAX_SCORE = SCORE_TABLE[-1][0]

# 1/100 단위 정수 키 조회용
_POINTS_BY_HUNDREDTHS = {int(score * 100): points for score, points in SCORE_TABLE}


def to_hundredths(value: Decimal) -> Optional[int]:
    """1/100 단위 정수로 변환. 1/100 단위로 나누어떨어지지 않으면 None"""
    try:
        scaled = value * 100
        if scaled != scaled.to_integral_value():
            return None
        return int(scaled)
    except DecimalException:
        return None


def points_for(score) -> int:
    """
    점수 하나의 포인트

    str/float/Decimal 모두 허용. 해석 불가, 미입력, 표에 없는 값은 0.
    """
    try:
        value = parse_score(score)
    except ValueError:
        return FALLBACK_POINTS
    if value is None:
        return FALLBACK_POINTS

    hundredths = to_hundredths(value)
    if hundredths is None:
        return FALLBACK_POINTS
    return _POINTS_BY_HUNDREDTHS.get(hundredths, FALLBACK_POINTS)


def total_points(scores: Iterable) -> int:
    """슬롯 포인트 합계"""
    return sum(points_for(s) for s in scores)


def is_canonical(score: Decimal) -> bool:
    """7개 정규 점수 중 하나인지"""
    hundredths = to_hundredths(score)
    return hundredths is not None and hundredths in _POINTS_BY_HUNDREDTHS
