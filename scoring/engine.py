"""
선수 채점 엔진

채점판 상태는 불변 BoardState 하나로 관리한다. 모든 동작은 현재 상태를 읽어
새 상태를 만든 뒤 통째로 교체한다 (부분 갱신된 상태는 외부에 보이지 않음).

점수 입력은 버퍼링만 하고, 합계/제안/순위는 calculate()에서만 산출된다.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict

from ranking import apply_rankings

from .config import ScoringConfig, scoring_config
from .discrepancy import analyze
from .events import EventPublisher, EventType, ScoreBoardEvent
from .history import HistoryEntry
from .mapper import MAX_SCORE, MIN_SCORE, is_canonical, total_points
from .models import (
    SLOT_COUNT,
    ActionResult,
    Competitor,
    ScoringIssue,
    Suggestion,
    format_score,
    parse_score,
)


# 스테퍼 1회 증감량
STEP = Decimal("0.01")

# 미입력 슬롯을 스테퍼로 조정할 때 시작 값
DEFAULT_STEP_START = MIN_SCORE


class BoardState(BaseModel):
    """채점판 전체 상태"""
    model_config = ConfigDict(frozen=True)

    competitors: Tuple[Competitor, ...] = ()


# =====================================================
# 순수 함수
# =====================================================

def create_competitor(competitor_id: int) -> Competitor:
    """빈 선수 생성"""
    return Competitor(id=competitor_id)


def initial_state(count: int = 5) -> BoardState:
    """ID 1..count의 빈 선수로 구성된 초기 상태"""
    return BoardState(competitors=tuple(create_competitor(i + 1) for i in range(count)))


def next_competitor_id(competitors: Tuple[Competitor, ...]) -> int:
    """기존 최대 ID + 1 (선수가 없으면 1)"""
    return max((c.id for c in competitors), default=0) + 1


def calculate_competitor(competitor: Competitor) -> Competitor:
    """
    선수 한 명의 합계, 이상치 제안 산출

    미완성 선수는 합계/제안 없이 반환 (오류 아님)
    """
    if not competitor.is_complete:
        return competitor.model_copy(update={
            "total": None,
            "suggestion": None,
            "discrepancy_message": None,
            "debug_trace": None,
            "tie_break_note": None,
            "issue": ScoringIssue.INCOMPLETE_SCORES,
        })

    total = total_points(competitor.scores)
    try:
        result = analyze(competitor.scores)
    except ValueError as e:
        # 분석 불가 점수는 이 선수만 제안 없이 처리하고 나머지 계산은 계속한다
        logger.warning(f"선수 {competitor.id}: 이상치 분석 불가 - {e}")
        return competitor.model_copy(update={
            "total": total,
            "suggestion": None,
            "discrepancy_message": None,
            "debug_trace": None,
            "tie_break_note": None,
            "issue": ScoringIssue.INVALID_SCORE_INPUT,
        })

    # 새 제안은 이전 미처리 제안을 대체한다
    suggestion = None
    if result.has_outlier:
        updated = list(competitor.scores)
        updated[result.target_slot] = result.suggested_value
        suggestion = Suggestion(
            slot_index=result.target_slot,
            suggested_value=result.suggested_value,
            updated_scores=tuple(updated),
            reason=result.reason,
        )
        logger.info(f"선수 {competitor.id}: {result.message}")

    return competitor.model_copy(update={
        "total": total,
        "suggestion": suggestion,
        "discrepancy_message": result.message,
        "debug_trace": result.trace,
        "tie_break_note": None,
        "issue": ScoringIssue.SCORE_DISCREPANCY if result.has_outlier else None,
    })


def calculate(competitors: Tuple[Competitor, ...]) -> Tuple[Competitor, ...]:
    """전체 선수 합계/제안/순위/타이브레이크 산출"""
    return apply_rankings(calculate_competitor(c) for c in competitors)


# =====================================================
# 채점판
# =====================================================

class ScoreBoard:
    """
    카타 채점판

    기능:
    - 선수 추가/삭제, 이름/점수 입력
    - calculate(): 합계, 이상치 제안, 순위 산출
    - 제안 수락/거절 및 조정 이력 관리
    """

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        publisher: Optional[EventPublisher] = None,
        clock: Optional[Callable[[], datetime]] = None,
        debug_mode: Optional[bool] = None,
    ):
        self.config = config or scoring_config
        self.publisher = publisher or EventPublisher(max_log_size=self.config.event_log_size)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.debug_mode = self.config.debug_mode if debug_mode is None else debug_mode
        self._state = initial_state(self.config.initial_competitors)

    # ==================== 조회 ====================

    @property
    def state(self) -> BoardState:
        """현재 상태 (진단 trace 포함 원본)"""
        return self._state

    def get_state(self) -> Tuple[Competitor, ...]:
        """화면 표시용 스냅샷. 디버그 모드가 아니면 진단 trace를 제외한다"""
        if self.debug_mode:
            return self._state.competitors
        return tuple(
            c.model_copy(update={"debug_trace": None}) if c.debug_trace else c
            for c in self._state.competitors
        )

    def get_competitor(self, competitor_id: int) -> Optional[Competitor]:
        return next((c for c in self._state.competitors if c.id == competitor_id), None)

    def label_for(self, competitor_id: int) -> Optional[str]:
        """화면 표시 순번 라벨 (Competitor #n)"""
        for position, c in enumerate(self._state.competitors, start=1):
            if c.id == competitor_id:
                return f"Competitor #{position}"
        return None

    def __len__(self) -> int:
        return len(self._state.competitors)

    # ==================== 선수 관리 ====================

    def add_competitor(self) -> Competitor:
        """새 선수 추가 (ID = 기존 최대 ID + 1)"""
        competitor = create_competitor(next_competitor_id(self._state.competitors))
        self._commit(self._state.competitors + (competitor,))
        logger.info(f"선수 추가: {competitor.id}")
        self._publish(EventType.COMPETITOR_ADDED, competitor.id)
        return competitor

    def remove_competitor(self, competitor_id: int) -> ActionResult:
        """선수 삭제. 마지막 한 명은 삭제할 수 없다"""
        if self.get_competitor(competitor_id) is None:
            return self._refuse(ScoringIssue.UNKNOWN_COMPETITOR, f"선수를 찾을 수 없습니다: {competitor_id}")
        if len(self._state.competitors) <= 1:
            return self._refuse(
                ScoringIssue.LAST_COMPETITOR_REMOVAL,
                "마지막 선수는 삭제할 수 없습니다",
            )

        self._commit(tuple(c for c in self._state.competitors if c.id != competitor_id))
        logger.info(f"선수 삭제: {competitor_id}")
        self._publish(EventType.COMPETITOR_REMOVED, competitor_id)
        return ActionResult.ok()

    def set_name(self, competitor_id: int, name: str) -> ActionResult:
        """선수명 변경"""
        competitor = self.get_competitor(competitor_id)
        if competitor is None:
            return self._refuse(ScoringIssue.UNKNOWN_COMPETITOR, f"선수를 찾을 수 없습니다: {competitor_id}")

        name = name or ""
        self._replace(competitor.model_copy(update={"name": name}))
        self._publish(EventType.COMPETITOR_RENAMED, competitor_id, {"old": competitor.name, "new": name})
        return ActionResult.ok()

    # ==================== 점수 입력 ====================

    def set_score(self, competitor_id: int, slot_index: int, value: Any) -> ActionResult:
        """
        슬롯 점수 입력

        합계/제안은 calculate() 전까지 갱신되지 않는다.
        None 또는 빈 문자열은 슬롯을 비운다.
        """
        competitor = self.get_competitor(competitor_id)
        if competitor is None:
            return self._refuse(ScoringIssue.UNKNOWN_COMPETITOR, f"선수를 찾을 수 없습니다: {competitor_id}")
        if not self._valid_slot(slot_index):
            return self._refuse(ScoringIssue.INVALID_SLOT, f"잘못된 슬롯 번호: {slot_index}")

        try:
            score = parse_score(value)
        except ValueError as e:
            return self._refuse(ScoringIssue.INVALID_SCORE_INPUT, str(e))

        if score is not None and not is_canonical(score):
            # 표에 없는 점수는 0포인트로 계산된다
            logger.warning(f"선수 {competitor_id} 슬롯 {slot_index}: 표에 없는 점수 {score} (0포인트)")

        self._write_slot(competitor, slot_index, score)
        return ActionResult.ok()

    def step_score(self, competitor_id: int, slot_index: int, steps: int) -> ActionResult:
        """
        스테퍼 방식 점수 조정

        0.01 단위로 steps만큼 증감하고 [9.93, 9.99] 범위로 제한한다.
        미입력 슬롯은 9.93에서 시작한다.
        """
        competitor = self.get_competitor(competitor_id)
        if competitor is None:
            return self._refuse(ScoringIssue.UNKNOWN_COMPETITOR, f"선수를 찾을 수 없습니다: {competitor_id}")
        if not self._valid_slot(slot_index):
            return self._refuse(ScoringIssue.INVALID_SLOT, f"잘못된 슬롯 번호: {slot_index}")

        current = competitor.scores[slot_index]
        start = DEFAULT_STEP_START if current is None or current == 0 else current
        score = min(max(start + STEP * steps, MIN_SCORE), MAX_SCORE).quantize(STEP)

        self._write_slot(competitor, slot_index, score)
        return ActionResult.ok()

    # ==================== 계산 ====================

    def calculate(self) -> Tuple[Competitor, ...]:
        """합계, 이상치 제안, 순위, 타이브레이크 안내 재계산"""
        self._commit(calculate(self._state.competitors))

        ranked = sum(1 for c in self._state.competitors if c.placement is not None)
        suggestions = sum(1 for c in self._state.competitors if c.suggestion is not None)
        logger.info(
            f"계산 완료: {len(self._state.competitors)}명 중 {ranked}명 순위, 조정 제안 {suggestions}건"
        )
        self._publish(EventType.SCORES_CALCULATED, data={"ranked": ranked, "suggestions": suggestions})
        return self.get_state()

    # ==================== 제안 처리 ====================

    def accept_suggestion(self, competitor_id: int) -> ActionResult:
        """제안 수락 - 점수 교체 후 이력 기록"""
        competitor = self.get_competitor(competitor_id)
        if competitor is None:
            return self._refuse(ScoringIssue.UNKNOWN_COMPETITOR, f"선수를 찾을 수 없습니다: {competitor_id}")
        suggestion = competitor.suggestion
        if suggestion is None:
            return self._refuse(
                ScoringIssue.INVALID_SUGGESTION_STATE,
                f"선수 {competitor_id}: 수락할 제안이 없습니다",
            )

        entry = HistoryEntry(
            before=competitor.scores,
            after=suggestion.updated_scores,
            reason=suggestion.reason,
            timestamp=self._clock(),
        )
        self._replace(competitor.model_copy(update={
            "scores": suggestion.updated_scores,
            "history": competitor.history.append(entry),
            "suggestion": None,
            "discrepancy_message": None,
            "issue": None,
        }))
        logger.info(f"선수 {competitor_id} 제안 수락: {suggestion.reason}")
        self._publish(EventType.SUGGESTION_ACCEPTED, competitor_id, {
            "before": [format_score(s) for s in entry.before],
            "after": [format_score(s) for s in entry.after],
            "reason": entry.reason,
        })
        return ActionResult.ok(suggestion.reason)

    def reject_suggestion(self, competitor_id: int) -> ActionResult:
        """제안 거절 - 점수와 이력은 그대로"""
        competitor = self.get_competitor(competitor_id)
        if competitor is None:
            return self._refuse(ScoringIssue.UNKNOWN_COMPETITOR, f"선수를 찾을 수 없습니다: {competitor_id}")
        if competitor.suggestion is None:
            return self._refuse(
                ScoringIssue.INVALID_SUGGESTION_STATE,
                f"선수 {competitor_id}: 거절할 제안이 없습니다",
            )

        self._replace(competitor.model_copy(update={"suggestion": None}))
        logger.info(f"선수 {competitor_id} 제안 거절")
        self._publish(EventType.SUGGESTION_REJECTED, competitor_id)
        return ActionResult.ok()

    # ==================== 초기화 ====================

    def reset(self) -> None:
        """초기 빈 선수 목록으로 복원 (점수, 제안, 이력 모두 폐기)"""
        self._state = initial_state(self.config.initial_competitors)
        logger.info(f"채점판 초기화: 선수 {self.config.initial_competitors}명")
        self._publish(EventType.BOARD_RESET)

    # ==================== 내부 ====================

    @staticmethod
    def _valid_slot(slot_index: Any) -> bool:
        return isinstance(slot_index, int) and not isinstance(slot_index, bool) and 0 <= slot_index < SLOT_COUNT

    def _write_slot(self, competitor: Competitor, slot_index: int, score: Optional[Decimal]) -> None:
        scores = list(competitor.scores)
        scores[slot_index] = score
        self._replace(competitor.model_copy(update={"scores": tuple(scores)}))
        self._publish(EventType.SCORE_SET, competitor.id, {
            "slot": slot_index,
            "value": format_score(score),
        })

    def _replace(self, updated: Competitor) -> None:
        self._commit(tuple(
            updated if c.id == updated.id else c for c in self._state.competitors
        ))

    def _commit(self, competitors: Tuple[Competitor, ...]) -> None:
        self._state = BoardState(competitors=competitors)

    def _refuse(self, issue: ScoringIssue, message: str) -> ActionResult:
        logger.warning(f"요청 거부 ({issue.value}): {message}")
        return ActionResult.refused(issue, message)

    def _publish(self, event_type: EventType, competitor_id: Optional[int] = None, data: Optional[dict] = None) -> None:
        self.publisher.publish(ScoreBoardEvent(
            event_type=event_type,
            competitor_id=competitor_id,
            data=data or {},
        ))
