"""
messaging.py - 프로젝트 채팅

메시지는 추가만 가능하다. 실시간 피드는 구독을 먼저 연 뒤 기존 메시지를
읽어오고, 그 사이에 도착한 메시지는 id 기준으로 중복 제거해 합친다.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from ..core.error_handler import RetryContext
from ..core.exceptions import NetworkError, SupabaseError, ValidationError
from ..domain.models import Message, SenderType
from ..notifications.events import EventEmitter, EventType


logger = logging.getLogger(__name__)


class MessageFeed:
    """프로젝트 메시지 피드

    사용법:
        with MessageFeed(repo, project_id, on_message=print) as feed:
            feed.messages
    """

    def __init__(self, repository, project_id: str, on_message: Optional[Callable[[Message], None]] = None):
        self.repository = repository
        self.project_id = project_id
        self.on_message = on_message

        self._messages: Dict[str, Message] = {}
        self._lock = threading.Lock()
        self._unsubscribe = None

    def open(self) -> "MessageFeed":
        """구독 후 기존 메시지 로드"""
        self._unsubscribe = self.repository.subscribe_messages(self.project_id, self._on_live)
        for message in self.repository.get_messages(self.project_id):
            self._merge(message)
        return self

    def close(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def messages(self) -> List[Message]:
        """작성 시각 순 메시지"""
        with self._lock:
            return sorted(self._messages.values(), key=lambda m: (m.created_at, m.id))

    def _on_live(self, message: Message):
        if self._merge(message) and self.on_message:
            self.on_message(message)

    def _merge(self, message: Message) -> bool:
        """새 메시지면 True"""
        with self._lock:
            if message.id in self._messages:
                return False
            self._messages[message.id] = message
            return True


class MessageService:
    """채팅 메시지 서비스"""

    def __init__(
        self,
        repository,
        emitter: Optional[EventEmitter] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        self.repository = repository
        self.emitter = emitter
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def send(
        self,
        project_id: str,
        text: str,
        sender_type: SenderType = SenderType.USER,
        sender_id: Optional[str] = None,
    ) -> Message:
        """메시지 전송

        Raises:
            ValidationError: 빈 메시지
            SupabaseError / NetworkError: 재시도 후에도 저장 실패
        """
        body = (text or "").strip()
        if not body:
            raise ValidationError("빈 메시지는 보낼 수 없습니다.", field="message", value=text)

        message = Message(
            project_id=project_id,
            sender_type=sender_type,
            sender_id=sender_id,
            message=body,
        )
        saved = self._insert_with_retry(message)

        if self.emitter:
            self.emitter.emit(
                EventType.MESSAGE_SENT,
                {"project_id": project_id, "message_id": saved.id, "sender_type": sender_type.value},
                source="messaging",
            )
        return saved

    def post_system(self, project_id: str, text: str) -> Message:
        """시스템 메시지"""
        return self.send(project_id, text, sender_type=SenderType.SYSTEM)

    def list_messages(self, project_id: str) -> List[Message]:
        """프로젝트 메시지 (오래된 순)"""
        return self.repository.get_messages(project_id)

    def open_feed(self, project_id: str, on_message: Optional[Callable[[Message], None]] = None) -> MessageFeed:
        """실시간 피드 열기 (close() 필요)"""
        return MessageFeed(self.repository, project_id, on_message).open()

    def _insert_with_retry(self, message: Message) -> Message:
        with RetryContext(
            max_retries=self.max_retries,
            exceptions=(SupabaseError, NetworkError),
            initial_delay=self.retry_delay,
            logger=logger,
        ) as retry:
            while True:
                try:
                    return self.repository.add_message(message)
                except (SupabaseError, NetworkError) as e:
                    if not retry.should_retry(e):
                        raise
