"""
카타 순위 계산 테스트
"""
from ranking import apply_rankings, highest_score_count, rank_competitors, TIE_BREAK_NOTE


class TestHighestScoreCount:
    """타이브레이크 기준 - 최고 점수 개수"""

    def test_count(self, make_competitor):
        c = make_competitor(1, ["9.97", "9.95", "9.97"], total=6)
        assert highest_score_count(c) == 2

    def test_all_equal(self, make_competitor):
        c = make_competitor(1, ["9.95", "9.95", "9.95"], total=12)
        assert highest_score_count(c) == 3

    def test_incomplete(self, make_competitor):
        c = make_competitor(1, ["9.95", None, "9.95"])
        assert highest_score_count(c) == 0


class TestRankCompetitors:
    """rank_competitors 테스트"""

    def test_lower_total_ranks_higher(self, make_competitor):
        competitors = [
            make_competitor(1, ["9.93", "9.93", "9.93"], total=18),
            make_competitor(2, ["9.99", "9.99", "9.99"], total=0),
            make_competitor(3, ["9.96", "9.96", "9.96"], total=9),
        ]
        ranked = rank_competitors(competitors)
        assert [c.id for c in ranked] == [2, 3, 1]
        assert [c.placement for c in ranked] == [1, 2, 3]
        assert all(c.tie_break_note is None for c in ranked)

    def test_tie_break_by_highest_score_count(self, make_competitor):
        """합계 (5, 5, 7): 동점자는 최고 점수 개수로, 둘 다 안내 표시"""
        competitors = [
            make_competitor(2, ["9.99", "9.96", "9.97"], total=5),
            make_competitor(3, ["9.97", "9.97", "9.96"], total=7),
            # 최고 점수 9.98 두 개
            make_competitor(4, ["9.98", "9.98", "9.96"], total=5),
        ]
        ranked = rank_competitors(competitors)
        by_id = {c.id: c for c in ranked}

        assert by_id[4].placement == 1
        assert by_id[2].placement == 2
        assert by_id[3].placement == 3
        assert by_id[4].tie_break_note == TIE_BREAK_NOTE
        assert by_id[2].tie_break_note == TIE_BREAK_NOTE
        assert by_id[3].tie_break_note is None

    def test_full_tie_keeps_input_order(self, make_competitor):
        """합계와 최고 점수 개수가 모두 같으면 입력 순서 유지"""
        competitors = [
            make_competitor(7, ["9.95", "9.96", "9.97"], total=9),
            make_competitor(3, ["9.97", "9.96", "9.95"], total=9),
        ]
        ranked = rank_competitors(competitors)
        assert [c.id for c in ranked] == [7, 3]
        assert [c.placement for c in ranked] == [1, 2]
        assert all(c.tie_break_note == TIE_BREAK_NOTE for c in ranked)

    def test_unscored_excluded(self, make_competitor):
        """합계 없는 선수는 순위 대상 아님"""
        competitors = [
            make_competitor(1, ["9.95", None, None]),
            make_competitor(2, ["9.95", "9.95", "9.95"], total=12),
        ]
        ranked = rank_competitors(competitors)
        assert [c.id for c in ranked] == [2]
        assert ranked[0].placement == 1

    def test_empty(self):
        assert rank_competitors([]) == []


class TestApplyRankings:
    """apply_rankings 테스트"""

    def test_keeps_original_order_and_clears_unranked(self, make_competitor):
        stale = make_competitor(1, ["9.95", None, "9.95"]).model_copy(
            update={"placement": 1, "tie_break_note": TIE_BREAK_NOTE}
        )
        competitors = (
            stale,
            make_competitor(2, ["9.93", "9.93", "9.93"], total=18),
            make_competitor(3, ["9.99", "9.99", "9.99"], total=0),
        )
        result = apply_rankings(competitors)

        assert [c.id for c in result] == [1, 2, 3]
        assert result[0].placement is None
        assert result[0].tie_break_note is None
        assert result[1].placement == 2
        assert result[2].placement == 1

    def test_placements_contiguous(self, make_competitor):
        competitors = [
            make_competitor(i, ["9.95", "9.95", "9.95"], total=i % 3) for i in range(1, 8)
        ]
        placements = sorted(c.placement for c in apply_rankings(competitors))
        assert placements == list(range(1, 8))
