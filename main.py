"""
카타 채점기 CLI

JSON 선수 명단을 읽어 합계/순위/조정 제안을 출력한다.

명단 형식:
    [{"name": "Kim", "scores": ["9.95", "9.96", "9.97"]}, ...]
또는
    {"competitors": [...]}
"""
import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from scoring import ScoreBoard, ScoringConfig, format_score
from scoring.models import SLOT_COUNT


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(config: ScoringConfig) -> None:
    """로깅 설정"""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=config.log_level.upper())
    if config.log_file:
        logger.add(
            config.log_file,
            rotation="1 day",
            retention="30 days",
            level="DEBUG",
        )


def load_roster(path: Path) -> List[Dict[str, Any]]:
    """JSON 명단 로드"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("competitors", [])
    if not isinstance(data, list) or not data:
        raise ValueError(f"명단이 비어 있거나 형식이 올바르지 않습니다: {path}")
    return data


def build_board(roster: List[Dict[str, Any]], config: ScoringConfig) -> ScoreBoard:
    """명단으로 채점판 구성 (선수 ID는 명단 순서대로 1..N)"""
    board_config = config.model_copy(update={"initial_competitors": len(roster)})
    board = ScoreBoard(config=board_config)

    for competitor, entry in zip(board.get_state(), roster):
        board.set_name(competitor.id, str(entry.get("name", "")))
        scores = list(entry.get("scores", []))[:SLOT_COUNT]
        for slot, value in enumerate(scores):
            result = board.set_score(competitor.id, slot, value)
            if not result.applied:
                logger.warning(f"{board.label_for(competitor.id)}: {result.message}")
    return board


def format_standings(board: ScoreBoard) -> str:
    """순위표 문자열"""
    competitors = sorted(
        board.get_state(),
        key=lambda c: (c.placement is None, c.placement or 0),
    )

    lines = ["\n=== 순위 ==="]
    for c in competitors:
        label = c.name or board.label_for(c.id)
        scores = ", ".join(format_score(s) or "-" for s in c.scores)
        placement = c.placement if c.placement is not None else "Not Ranked"
        total = c.total if c.total is not None else "Not Calculated"
        lines.append(f"  {placement:>10} | {label:<20} | {scores:<20} | {total}")
        if c.tie_break_note:
            lines.append(f"             {c.tie_break_note}")
        if c.discrepancy_message:
            lines.append(f"             {c.discrepancy_message}")
        if c.suggestion:
            lines.append(
                "             Suggested new scores: "
                + ", ".join(format_score(s) for s in c.suggestion.updated_scores)
            )
        if c.debug_trace:
            lines.append(f"             Debug: {c.debug_trace}")
        for entry in c.history.entries:
            lines.append(
                f"             History: {', '.join(format_score(s) for s in entry.before)}"
                f" -> {', '.join(format_score(s) for s in entry.after)} ({entry.reason})"
            )
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """메인 함수"""
    parser = argparse.ArgumentParser(description="카타 채점기")
    parser.add_argument(
        "roster",
        type=Path,
        help="선수 명단 JSON 파일",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="이상치 진단 trace 포함",
    )
    parser.add_argument(
        "--accept-suggestions",
        action="store_true",
        help="조정 제안을 모두 수락한 뒤 재계산",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="결과를 JSON으로 출력",
    )

    args = parser.parse_args(argv)

    config = ScoringConfig()
    if args.debug:
        config = config.model_copy(update={"debug_mode": True})
    setup_logging(config)

    try:
        roster = load_roster(args.roster)
    except (OSError, ValueError) as e:
        logger.error(f"명단 로드 실패: {e}")
        return 1

    board = build_board(roster, config)
    board.calculate()

    if args.accept_suggestions:
        accepted = 0
        for c in board.get_state():
            if c.suggestion and board.accept_suggestion(c.id).applied:
                accepted += 1
        if accepted:
            logger.info(f"조정 제안 {accepted}건 수락 - 재계산")
            board.calculate()

    if args.json:
        print(json.dumps([c.to_dict() for c in board.get_state()], ensure_ascii=False, indent=2))
    else:
        print(format_standings(board))
    return 0


if __name__ == "__main__":
    sys.exit(main())
