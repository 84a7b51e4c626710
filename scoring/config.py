"""
채점기 설정
"""
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class ScoringConfig(BaseSettings):
    """카타 채점기 설정"""

    model_config = SettingsConfigDict(env_prefix="KARATE_", case_sensitive=False)

    # 진단 정보 (DiscrepancyAnalyzer trace) 노출 여부
    debug_mode: bool = Field(default=False, description="진단 trace 포함 여부")

    # 초기화 시 생성할 빈 선수 수
    initial_competitors: int = Field(default=5, ge=1, description="초기 선수 수")

    # 로깅
    log_level: str = Field(default="INFO", description="콘솔 로그 레벨")
    log_file: Optional[str] = Field(default=None, description="로그 파일 경로 (선택)")

    # 이벤트 로그 최대 크기
    event_log_size: int = Field(default=1000, ge=1, description="최근 이벤트 보관 개수")


# 전역 설정 인스턴스
scoring_config = ScoringConfig()
