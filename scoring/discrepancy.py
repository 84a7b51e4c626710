"""
심판 점수 이상치 분석

세 점수 중 하나가 나머지 둘과 0.02 초과로 벌어지면 이상치로 보고
중간 점수 기준 ±0.02로 조정을 제안한다.

부동소수 비교 오차를 피하기 위해 모든 차이는 1/100 단위 정수로 비교한다.
"""
from decimal import ROUND_HALF_UP, Decimal, DecimalException
from typing import Optional, Sequence

from loguru import logger

from .models import DiscrepancyResult, OutlierKind, format_score, parse_score


# 이상치 임계값 (1/100 단위, 0.02)
THRESHOLD_HUNDREDTHS = 2

# 제안 값 = 중간 점수 ± 0.02
SUGGESTION_OFFSET = Decimal("0.02")

_NORMALIZE_QUANT = Decimal("0.001")
_SUGGESTION_QUANT = Decimal("0.01")


def _normalize(value) -> Decimal:
    """소수 셋째 자리로 반올림"""
    score = parse_score(value)
    if score is None:
        raise ValueError("세 점수 모두 입력되어야 분석할 수 있습니다")
    try:
        return score.quantize(_NORMALIZE_QUANT, rounding=ROUND_HALF_UP)
    except DecimalException:
        raise ValueError(f"분석할 수 없는 점수: {value!r}") from None


def _hundredths(diff: Decimal) -> int:
    return int((diff * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _first_slot_with(normalized: Sequence[Decimal], target: Decimal) -> int:
    # 같은 값이 여러 슬롯에 있으면 앞쪽 슬롯
    return next(i for i, v in enumerate(normalized) if v == target)


def analyze(scores: Sequence) -> DiscrepancyResult:
    """
    세 점수 이상치 분석

    Args:
        scores: 원래 입력 순서의 점수 3개 (str/float/Decimal)

    Returns:
        DiscrepancyResult (이상치가 없으면 outlier=NONE, 제안 없음)

    Raises:
        ValueError: 점수가 3개가 아니거나 미입력 슬롯, 해석 불가 점수가 있는 경우
    """
    if len(scores) != 3:
        raise ValueError(f"점수는 3개여야 합니다: {len(scores)}개")

    normalized = [_normalize(s) for s in scores]
    low, mid, high = sorted(normalized)

    diff_low_mid = _hundredths(mid - low)
    diff_high_mid = _hundredths(high - mid)
    diff_high_low = _hundredths(high - low)

    high_is_outlier = diff_high_mid > THRESHOLD_HUNDREDTHS and diff_high_low > THRESHOLD_HUNDREDTHS
    low_is_outlier = diff_low_mid > THRESHOLD_HUNDREDTHS and diff_high_low > THRESHOLD_HUNDREDTHS

    outlier = OutlierKind.NONE
    target_slot: Optional[int] = None
    suggested_value: Optional[Decimal] = None
    message: Optional[str] = None
    reason: Optional[str] = None

    # high 판정이 우선
    if high_is_outlier:
        outlier = OutlierKind.HIGH
        suggested_value = (mid + SUGGESTION_OFFSET).quantize(_SUGGESTION_QUANT, rounding=ROUND_HALF_UP)
        target_slot = _first_slot_with(normalized, high)
        message = (
            "Score discrepancy > 0.02. "
            f"Suggest adjusting the high score down to about {suggested_value}"
        )
        reason = f"Adjusted high score from {format_score(high)} to {suggested_value}"
    elif low_is_outlier:
        outlier = OutlierKind.LOW
        suggested_value = (mid - SUGGESTION_OFFSET).quantize(_SUGGESTION_QUANT, rounding=ROUND_HALF_UP)
        target_slot = _first_slot_with(normalized, low)
        message = (
            "Score discrepancy > 0.02. "
            f"Suggest adjusting the low score up to about {suggested_value}"
        )
        reason = f"Adjusted low score from {format_score(low)} to {suggested_value}"

    branch = {
        OutlierKind.HIGH: "high_outlier",
        OutlierKind.LOW: "low_outlier",
        OutlierKind.NONE: "no_outlier",
    }[outlier]
    trace = (
        f"Scores: [{','.join(format_score(s) for s in (low, mid, high))}], "
        f"low_mid={diff_low_mid}, high_mid={diff_high_mid}, high_low={diff_high_low} | {branch}"
    )
    logger.debug(f"이상치 분석: {trace}")

    return DiscrepancyResult(
        sorted_scores=(low, mid, high),
        diff_low_mid=diff_low_mid,
        diff_high_mid=diff_high_mid,
        diff_high_low=diff_high_low,
        outlier=outlier,
        target_slot=target_slot,
        suggested_value=suggested_value,
        message=message,
        reason=reason,
        trace=trace,
    )
