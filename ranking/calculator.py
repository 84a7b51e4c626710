"""
카타 순위 계산 모듈

감점식 포인트 기준 순위
- 포인트 합계 오름차순 (적을수록 상위)
- 동점 시 자신의 최고 점수가 몇 개인지로 결정 (많을수록 상위)
- 동점 그룹 전원에게 타이브레이크 안내 표시
"""
from typing import TYPE_CHECKING, Iterable, List, Tuple

from loguru import logger

if TYPE_CHECKING:
    from scoring.models import Competitor


# =====================================================
# 상수 정의
# =====================================================

TIE_BREAK_NOTE = "Tie-break used: decided by highest scores."


# =====================================================
# 타이브레이크
# =====================================================

def highest_score_count(competitor: "Competitor") -> int:
    """선수 본인의 최고 점수와 같은 슬롯 수 (미완성이면 0)"""
    if not competitor.is_complete:
        return 0
    top = max(competitor.scores)
    return sum(1 for s in competitor.scores if s == top)


def _sort_key(competitor: "Competitor") -> Tuple[int, int]:
    return competitor.total, -highest_score_count(competitor)


# =====================================================
# 순위 계산
# =====================================================

def rank_competitors(competitors: Iterable["Competitor"]) -> List["Competitor"]:
    """
    합계가 있는 선수만 정렬하여 순위 부여

    Args:
        competitors: 선수 목록 (total이 None인 선수는 제외)

    Returns:
        순위 순으로 정렬된 선수 목록 (placement, tie_break_note 설정됨)
    """
    ranked = sorted(
        (c for c in competitors if c.total is not None),
        key=_sort_key,
    )

    result: List["Competitor"] = []
    i = 0
    while i < len(ranked):
        # 같은 합계 구간 [i, j)
        j = i + 1
        while j < len(ranked) and ranked[j].total == ranked[i].total:
            j += 1
        note = TIE_BREAK_NOTE if j - i > 1 else None
        for k in range(i, j):
            result.append(ranked[k].model_copy(update={
                "placement": k + 1,
                "tie_break_note": note,
            }))
        i = j

    ties = sum(1 for c in result if c.tie_break_note)
    logger.debug(f"순위 계산 완료: {len(result)}명 (동점 {ties}명)")
    return result


def apply_rankings(competitors: Iterable["Competitor"]) -> Tuple["Competitor", ...]:
    """
    순위 결과를 원래 순서의 선수 목록에 반영

    순위 대상이 아닌 선수는 placement, tie_break_note가 비워진다.
    """
    competitors = tuple(competitors)
    ranked_by_id = {c.id: c for c in rank_competitors(competitors)}
    return tuple(
        ranked_by_id.get(c.id) or c.model_copy(update={"placement": None, "tie_break_note": None})
        for c in competitors
    )
