"""알림 모듈"""
from .events import EventType, Event, EventEmitter, get_event_emitter
from .slack_notifier import SlackNotifier, SlackNotifierConfig

__all__ = [
    "EventType",
    "Event",
    "EventEmitter",
    "get_event_emitter",
    "SlackNotifier",
    "SlackNotifierConfig",
]
