"""
채점판 이벤트 발행/구독

상태 변경이 적용될 때마다 화면 등 외부 구성요소에 알리기 위한 로컬 이벤트 시스템
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import json

from loguru import logger


class EventType(str, Enum):
    """이벤트 유형"""
    # 선수 관련
    COMPETITOR_ADDED = "competitor.added"
    COMPETITOR_REMOVED = "competitor.removed"
    COMPETITOR_RENAMED = "competitor.renamed"

    # 점수 관련
    SCORE_SET = "score.set"
    SCORES_CALCULATED = "scores.calculated"

    # 제안 관련
    SUGGESTION_ACCEPTED = "suggestion.accepted"
    SUGGESTION_REJECTED = "suggestion.rejected"

    BOARD_RESET = "board.reset"


@dataclass
class ScoreBoardEvent:
    """채점판 변경 이벤트"""
    event_type: EventType
    competitor_id: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "competitor_id": self.competitor_id,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


class EventPublisher:
    """이벤트 발행자"""

    def __init__(self, max_log_size: int = 1000):
        self.local_subscribers: Dict[EventType, List[Callable]] = defaultdict(list)
        self._event_log: List[ScoreBoardEvent] = []
        self._max_log_size = max_log_size

    def publish(self, event: ScoreBoardEvent) -> None:
        """이벤트 발행"""
        logger.debug(f"Event published: {event.event_type.value} - competitor:{event.competitor_id}")

        self._event_log.append(event)
        if len(self._event_log) > self._max_log_size:
            self._event_log = self._event_log[-self._max_log_size:]

        # 구독자 오류는 상태 변경에 영향을 주지 않는다
        for subscriber in list(self.local_subscribers.get(event.event_type, [])):
            try:
                subscriber(event)
            except Exception as e:
                logger.error(f"구독자 호출 실패: {event.event_type.value} - {e}")

    def subscribe(self, event_type: EventType, callback: Callable) -> None:
        """이벤트 구독"""
        self.local_subscribers[event_type].append(callback)
        logger.debug(f"Subscribed to {event_type.value}")

    def subscribe_all(self, callback: Callable) -> None:
        """모든 유형 구독"""
        for event_type in EventType:
            self.subscribe(event_type, callback)

    def unsubscribe(self, event_type: EventType, callback: Callable) -> None:
        """이벤트 구독 해제"""
        if callback in self.local_subscribers[event_type]:
            self.local_subscribers[event_type].remove(callback)
            logger.debug(f"Unsubscribed from {event_type.value}")

    def get_recent_events(self, limit: int = 100) -> List[ScoreBoardEvent]:
        """최근 이벤트 조회"""
        return self._event_log[-limit:]
