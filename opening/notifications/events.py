"""
이벤트 시스템

창업 여정 이벤트 발행 및 구독 시스템
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Any, Callable
from enum import Enum
import logging
import threading


logger = logging.getLogger(__name__)


class EventType(Enum):
    """이벤트 유형"""
    # 프로젝트
    PROJECT_CREATED = "project.created"
    PROJECT_CANCELLED = "project.cancelled"
    STAGE_CHANGED = "stage.changed"

    # 배정 / 견적
    PM_UNASSIGNED = "pm.unassigned"
    ESTIMATE_UNAVAILABLE = "estimate.unavailable"

    # 채팅
    MESSAGE_SENT = "message.sent"


@dataclass
class Event:
    """이벤트 데이터"""
    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    source: str = ""
    correlation_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리 변환"""
        return {
            "event_type": self.event_type.value,
            "data": self.data,
            "timestamp": self.timestamp,
            "source": self.source,
            "correlation_id": self.correlation_id,
        }


EventHandler = Callable[[Event], None]


class EventEmitter:
    """이벤트 발행/구독 시스템

    핸들러 예외는 로그만 남기고 발행한 쪽으로 전파하지 않는다.
    """

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
        self._lock = threading.Lock()

    def on(self, event_type: EventType, handler: EventHandler):
        """특정 이벤트 구독"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

    def on_all(self, handler: EventHandler):
        """모든 이벤트 구독"""
        with self._lock:
            self._global_handlers.append(handler)

    def off(self, event_type: EventType, handler: EventHandler):
        """이벤트 구독 해제"""
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def emit(
        self,
        event_type: EventType,
        data: Dict[str, Any] = None,
        source: str = "",
        correlation_id: str = ""
    ) -> Event:
        """이벤트 발행"""
        event = Event(
            event_type=event_type,
            data=data or {},
            source=source,
            correlation_id=correlation_id
        )

        with self._lock:
            handlers = list(self._handlers.get(event_type, [])) + list(self._global_handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"이벤트 핸들러 오류 ({event_type.value}): {e}",
                    exc_info=True,
                )

        return event


# 전역 이벤트 이미터
_global_emitter = EventEmitter()


def get_event_emitter() -> EventEmitter:
    """전역 이벤트 이미터 반환"""
    return _global_emitter
