"""
채점판 이벤트 테스트
"""
from scoring import EventPublisher, EventType, ScoreBoardEvent


class TestEventPublisher:
    """EventPublisher 테스트"""

    def test_subscribe_and_publish(self, publisher):
        received = []
        publisher.subscribe(EventType.SCORE_SET, received.append)

        publisher.publish(ScoreBoardEvent(event_type=EventType.SCORE_SET, competitor_id=1))
        publisher.publish(ScoreBoardEvent(event_type=EventType.BOARD_RESET))

        assert len(received) == 1
        assert received[0].competitor_id == 1

    def test_unsubscribe(self, publisher):
        received = []
        publisher.subscribe(EventType.BOARD_RESET, received.append)
        publisher.unsubscribe(EventType.BOARD_RESET, received.append)
        publisher.publish(ScoreBoardEvent(event_type=EventType.BOARD_RESET))
        assert received == []

    def test_failing_subscriber_does_not_break_publish(self, publisher):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        publisher.subscribe(EventType.BOARD_RESET, broken)
        publisher.subscribe(EventType.BOARD_RESET, received.append)
        publisher.publish(ScoreBoardEvent(event_type=EventType.BOARD_RESET))
        assert len(received) == 1

    def test_log_size_bounded(self):
        publisher = EventPublisher(max_log_size=3)
        for i in range(5):
            publisher.publish(ScoreBoardEvent(event_type=EventType.SCORE_SET, competitor_id=i))
        recent = publisher.get_recent_events()
        assert [e.competitor_id for e in recent] == [2, 3, 4]

    def test_to_json(self):
        event = ScoreBoardEvent(event_type=EventType.SCORE_SET, competitor_id=2, data={"slot": 0})
        assert '"score.set"' in event.to_json()
        assert event.to_dict()["data"] == {"slot": 0}


class TestBoardEvents:
    """ScoreBoard 동작별 이벤트"""

    def test_actions_publish_events(self, board, publisher):
        received = []
        publisher.subscribe_all(received.append)

        board.set_name(1, "Abe")
        for slot, value in enumerate(["9.93", "9.93", "9.99"]):
            board.set_score(1, slot, value)
        board.calculate()
        board.accept_suggestion(1)
        board.add_competitor()
        board.remove_competitor(6)
        board.reset()

        assert [e.event_type for e in received] == [
            EventType.COMPETITOR_RENAMED,
            EventType.SCORE_SET,
            EventType.SCORE_SET,
            EventType.SCORE_SET,
            EventType.SCORES_CALCULATED,
            EventType.SUGGESTION_ACCEPTED,
            EventType.COMPETITOR_ADDED,
            EventType.COMPETITOR_REMOVED,
            EventType.BOARD_RESET,
        ]
        accepted = received[5]
        assert accepted.data["before"] == ["9.93", "9.93", "9.99"]
        assert accepted.data["after"] == ["9.93", "9.93", "9.95"]

    def test_refused_actions_publish_nothing(self, board, publisher):
        received = []
        publisher.subscribe_all(received.append)

        board.accept_suggestion(1)
        board.reject_suggestion(1)
        board.remove_competitor(99)
        board.set_score(1, 7, "9.95")

        assert received == []

    def test_calculated_event_counts(self, board, publisher):
        for slot, value in enumerate(["9.93", "9.93", "9.99"]):
            board.set_score(2, slot, value)
        board.calculate()
        event = publisher.get_recent_events(1)[0]
        assert event.event_type is EventType.SCORES_CALCULATED
        assert event.data == {"ranked": 1, "suggestions": 1}
