"""messaging.py 테스트"""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import Mock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from opening.core.exceptions import NetworkError, ValidationError
from opening.domain.models import Message, SenderType
from opening.notifications.events import EventType
from opening.services.messaging import MessageFeed, MessageService


class TestMessageService:
    """MessageService 테스트"""

    def test_send_strips_text(self, repository, emitter):
        received = []
        emitter.on(EventType.MESSAGE_SENT, received.append)
        service = MessageService(repository, emitter=emitter, retry_delay=0)

        message = service.send("p1", "  안녕하세요  ")

        assert message.message == "안녕하세요"
        assert message.sender_type == SenderType.USER
        assert service.list_messages("p1")[0].id == message.id
        assert received[0].data["message_id"] == message.id

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_message_rejected(self, repository, text):
        service = MessageService(repository, retry_delay=0)

        with pytest.raises(ValidationError):
            service.send("p1", text)

        assert service.list_messages("p1") == []

    def test_post_system(self, repository):
        message = MessageService(repository, retry_delay=0).post_system("p1", "시스템 공지")
        assert message.sender_type == SenderType.SYSTEM

    def test_retry_gives_up(self):
        """재시도 한도 초과 시 오류 전파"""
        repo = Mock()
        repo.add_message.side_effect = NetworkError("연결 끊김")
        service = MessageService(repo, max_retries=2, retry_delay=0)

        with pytest.raises(NetworkError):
            service.send("p1", "hi")

        assert repo.add_message.call_count == 3


class TestMessageFeed:
    """MessageFeed 테스트"""

    def test_live_messages_delivered(self, repository):
        service = MessageService(repository, retry_delay=0)
        received = []

        feed = service.open_feed("p1", on_message=received.append)
        sent = service.send("p1", "새 메시지")
        feed.close()

        assert [m.id for m in received] == [sent.id]
        assert [m.id for m in feed.messages] == [sent.id]

    def test_closed_feed_stops_receiving(self, repository):
        service = MessageService(repository, retry_delay=0)
        received = []

        feed = service.open_feed("p1", on_message=received.append)
        feed.close()
        service.send("p1", "늦은 메시지")

        assert received == []

    def test_subscribe_before_fetch_and_dedup(self):
        """초기 조회 중 도착한 메시지도 한 번만 포함"""
        base = datetime(2026, 1, 1, 9, 0)
        old = Message(id="m1", project_id="p1", message="예전", created_at=base)
        racing = Message(id="m2", project_id="p1", message="경합", created_at=base + timedelta(seconds=5))
        order = []
        callbacks = []

        repo = Mock()

        def subscribe(project_id, callback):
            order.append("subscribe")
            callbacks.append(callback)
            return Mock()

        def fetch(project_id):
            order.append("fetch")
            # 조회 도중 실시간으로 먼저 도착
            callbacks[0](racing)
            return [old, racing]

        repo.subscribe_messages.side_effect = subscribe
        repo.get_messages.side_effect = fetch

        received = []
        with MessageFeed(repo, "p1", on_message=received.append) as feed:
            assert order == ["subscribe", "fetch"]
            assert [m.id for m in feed.messages] == ["m1", "m2"]

            # 같은 메시지 재전송은 무시
            callbacks[0](racing)
            assert [m.id for m in received] == ["m2"]

    def test_messages_sorted_by_created_at(self):
        base = datetime(2026, 1, 1, 9, 0)
        later = Message(id="b", project_id="p1", created_at=base + timedelta(minutes=1))
        earlier = Message(id="a", project_id="p1", created_at=base)

        repo = Mock()
        repo.get_messages.return_value = [later, earlier]

        feed = MessageFeed(repo, "p1").open()

        assert [m.id for m in feed.messages] == ["a", "b"]
