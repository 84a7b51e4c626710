"""
채점 데이터 모델 정의 (Pydantic)

모든 모델은 frozen - 상태 변경은 model_copy(update=...)로 새 인스턴스를 만든다.
"""
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .history import HistoryEntry, HistoryLog


# 선수당 심판 점수 슬롯 수
SLOT_COUNT = 3

ScoreSlots = Tuple[Optional[Decimal], ...]

EMPTY_SCORES: ScoreSlots = (None,) * SLOT_COUNT

# 입력 허용 최대 절대값 (이 이상은 해석 불가로 처리)
MAX_SCORE_MAGNITUDE = Decimal("1000000")


class ScoringIssue(str, Enum):
    """채점 처리 중 발생하는 상황 분류"""
    INCOMPLETE_SCORES = "incomplete_scores"             # 슬롯 미입력 (오류 아님)
    SCORE_DISCREPANCY = "score_discrepancy"             # 이상 점수 감지
    INVALID_SUGGESTION_STATE = "invalid_suggestion_state"  # 제안 없음
    LAST_COMPETITOR_REMOVAL = "last_competitor_removal"  # 마지막 선수 삭제 시도
    UNKNOWN_COMPETITOR = "unknown_competitor"
    INVALID_SLOT = "invalid_slot"
    INVALID_SCORE_INPUT = "invalid_score_input"


class OutlierKind(str, Enum):
    """이상 점수 판정 결과"""
    NONE = "none"
    HIGH = "high"
    LOW = "low"


class ActionResult(BaseModel):
    """상태 변경 요청 처리 결과"""
    model_config = ConfigDict(frozen=True)

    applied: bool = Field(default=True, description="적용 여부")
    issue: Optional[ScoringIssue] = Field(None, description="거부/경고 사유")
    message: str = Field(default="", description="사용자 메시지")

    @classmethod
    def ok(cls, message: str = "") -> "ActionResult":
        return cls(applied=True, message=message)

    @classmethod
    def refused(cls, issue: ScoringIssue, message: str) -> "ActionResult":
        return cls(applied=False, issue=issue, message=message)


class DiscrepancyResult(BaseModel):
    """세 점수의 이상치 분석 결과"""
    model_config = ConfigDict(frozen=True)

    sorted_scores: Tuple[Decimal, Decimal, Decimal]
    diff_low_mid: int = Field(..., description="mid - low (1/100 단위)")
    diff_high_mid: int = Field(..., description="high - mid (1/100 단위)")
    diff_high_low: int = Field(..., description="high - low (1/100 단위)")
    outlier: OutlierKind = OutlierKind.NONE
    target_slot: Optional[int] = Field(None, description="조정 대상 슬롯 (원래 입력 순서)")
    suggested_value: Optional[Decimal] = None
    message: Optional[str] = Field(None, description="사용자 안내 메시지")
    reason: Optional[str] = Field(None, description="이력에 남길 조정 사유")
    trace: str = Field(..., description="진단 trace")

    @property
    def has_outlier(self) -> bool:
        return self.outlier is not OutlierKind.NONE


class Suggestion(BaseModel):
    """단일 슬롯 조정 제안 (수락 전까지 저장되지 않음)"""
    model_config = ConfigDict(frozen=True)

    slot_index: int = Field(..., ge=0, lt=SLOT_COUNT)
    suggested_value: Decimal
    updated_scores: ScoreSlots
    reason: str


class Competitor(BaseModel):
    """선수 채점 상태"""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="선수 고유 ID")
    name: str = Field(default="", description="선수명 (선택)")
    scores: ScoreSlots = Field(default=EMPTY_SCORES, description="심판 점수 3개")

    # calculate() 시 산출되는 값
    total: Optional[int] = Field(None, description="환산 포인트 합계")
    placement: Optional[int] = Field(None, ge=1, description="순위 (1부터)")
    tie_break_note: Optional[str] = None
    discrepancy_message: Optional[str] = None
    debug_trace: Optional[str] = None
    suggestion: Optional[Suggestion] = None
    issue: Optional[ScoringIssue] = Field(None, description="미입력/이상 점수 등 계산 결과 상태")

    history: HistoryLog = Field(default_factory=HistoryLog)

    @field_validator("scores")
    @classmethod
    def validate_slot_count(cls, v: ScoreSlots) -> ScoreSlots:
        """슬롯 수 검증"""
        if len(v) != SLOT_COUNT:
            raise ValueError(f"점수 슬롯은 {SLOT_COUNT}개여야 합니다: {len(v)}개")
        return v

    @property
    def is_complete(self) -> bool:
        """세 슬롯 모두 입력되었는지"""
        return all(s is not None for s in self.scores)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


def parse_score(value: Any) -> Optional[Decimal]:
    """
    원시 입력을 Decimal로 변환

    None / 빈 문자열 → None (미입력)
    float는 repr 문자열을 거쳐 변환 (9.93 → Decimal('9.93'))

    Raises:
        ValueError: 숫자로 해석할 수 없거나 유한하지 않은 값, 범위를 크게 벗어난 값
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"점수로 해석할 수 없는 값: {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        score = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"점수로 해석할 수 없는 값: {value!r}") from None
    if not score.is_finite():
        raise ValueError(f"유한한 값이 아닙니다: {value!r}")
    if abs(score) >= MAX_SCORE_MAGNITUDE:
        raise ValueError(f"점수 범위를 벗어난 값: {value!r}")
    return score


def format_score(score: Optional[Decimal]) -> str:
    """표시용 점수 문자열 (후행 0 제거, 지수 표기 없음)"""
    if score is None:
        return ""
    return format(score.normalize(), "f")
