"""events.py 테스트"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from opening.notifications.events import (
    EventType,
    Event,
    EventEmitter,
    get_event_emitter,
)


class TestEvent:
    """Event 테스트"""

    def test_event_creation(self):
        """이벤트 생성"""
        event = Event(event_type=EventType.STAGE_CHANGED, data={"to_step": 8})

        assert event.event_type == EventType.STAGE_CHANGED
        assert event.data["to_step"] == 8
        assert event.timestamp is not None

    def test_event_to_dict(self):
        """딕셔너리 변환"""
        d = Event(event_type=EventType.PM_UNASSIGNED, data={"policy": "random"}, source="test").to_dict()

        assert d["event_type"] == "pm.unassigned"
        assert d["data"]["policy"] == "random"
        assert d["source"] == "test"


class TestEventEmitter:
    """EventEmitter 테스트"""

    def setup_method(self):
        """테스트 설정"""
        self.emitter = EventEmitter()
        self.received_events = []

    def test_subscribe_and_emit(self):
        """구독 및 발행"""
        self.emitter.on(EventType.PROJECT_CREATED, self.received_events.append)
        self.emitter.emit(EventType.PROJECT_CREATED, {"project_id": "p1"})

        assert len(self.received_events) == 1
        assert self.received_events[0].data["project_id"] == "p1"

    def test_other_event_not_delivered(self):
        self.emitter.on(EventType.PROJECT_CREATED, self.received_events.append)
        self.emitter.emit(EventType.MESSAGE_SENT)

        assert self.received_events == []

    def test_global_handler(self):
        """전역 핸들러"""
        self.emitter.on_all(self.received_events.append)

        self.emitter.emit(EventType.STAGE_CHANGED)
        self.emitter.emit(EventType.PROJECT_CANCELLED)

        assert [e.event_type for e in self.received_events] == [
            EventType.STAGE_CHANGED,
            EventType.PROJECT_CANCELLED,
        ]

    def test_unsubscribe(self):
        """구독 해제"""
        self.emitter.on(EventType.STAGE_CHANGED, self.received_events.append)
        self.emitter.off(EventType.STAGE_CHANGED, self.received_events.append)
        self.emitter.off(EventType.MESSAGE_SENT, self.received_events.append)

        self.emitter.emit(EventType.STAGE_CHANGED)

        assert self.received_events == []

    def test_handler_error_does_not_propagate(self, caplog):
        """핸들러 에러는 로그만 남기고 다음 핸들러 계속"""
        def broken(event):
            raise RuntimeError("boom")

        self.emitter.on(EventType.STAGE_CHANGED, broken)
        self.emitter.on(EventType.STAGE_CHANGED, self.received_events.append)

        event = self.emitter.emit(EventType.STAGE_CHANGED)

        assert self.received_events == [event]
        assert "boom" in caplog.text

    def test_global_emitter_singleton(self):
        assert get_event_emitter() is get_event_emitter()
