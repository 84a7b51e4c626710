"""
점수 조정 이력 (append-only)

수락된 제안만 기록된다. 항목 수정/삭제 API는 없다.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class HistoryEntry(BaseModel):
    """수락된 점수 조정 기록"""
    model_config = ConfigDict(frozen=True)

    before: Tuple[Optional[Decimal], ...] = Field(..., description="조정 전 점수")
    after: Tuple[Optional[Decimal], ...] = Field(..., description="조정 후 점수")
    reason: str = Field(..., description="조정 사유")
    timestamp: datetime = Field(..., description="수락 시각 (UTC)")


class HistoryLog(BaseModel):
    """선수별 조정 이력"""
    model_config = ConfigDict(frozen=True)

    entries: Tuple[HistoryEntry, ...] = ()

    def append(self, entry: HistoryEntry) -> "HistoryLog":
        """항목을 추가한 새 로그 반환 (기존 로그는 그대로)"""
        return HistoryLog(entries=self.entries + (entry,))

    @property
    def latest(self) -> Optional[HistoryEntry]:
        return self.entries[-1] if self.entries else None

    def __len__(self) -> int:
        return len(self.entries)
