"""
realtime.py - Supabase 실시간 구독

동기 supabase 클라이언트는 realtime 을 지원하지 않으므로 비동기 클라이언트
(acreate_client)를 전용 이벤트 루프 스레드에서 돌리고, 동기 코드에서는
subscribe / unsubscribe 만 호출한다.

사용법:
    bridge = RealtimeBridge(url, key)
    channel = bridge.subscribe("project-p1", "project_messages", "project_id=eq.p1", handler)
    bridge.unsubscribe(channel)
    bridge.close()
"""

import asyncio
import logging
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Dict

from supabase import acreate_client

from ..core.exceptions import NetworkError


logger = logging.getLogger(__name__)

PayloadHandler = Callable[[Dict[str, Any]], None]


class RealtimeBridge:
    """비동기 realtime 채널을 동기 코드에서 쓰기 위한 래퍼"""

    def __init__(self, url: str, key: str, client_factory=acreate_client, timeout: float = 10.0):
        """
        Args:
            url: Supabase 프로젝트 URL
            key: Supabase anon/service key
            client_factory: 비동기 클라이언트 생성 코루틴 함수 (테스트 주입용)
            timeout: 구독/해제 대기 시간 (초)
        """
        self.url = url
        self.key = key
        self.client_factory = client_factory
        self.timeout = timeout

        self._client = None
        self._loop = None
        self._thread = None
        self._lock = threading.Lock()

    def _ensure_loop(self):
        with self._lock:
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._loop.run_forever,
                    name="supabase-realtime",
                    daemon=True,
                )
                self._thread.start()
        return self._loop

    def _run(self, coro, action: str):
        """이벤트 루프 스레드에서 코루틴 실행 후 결과 대기"""
        future = asyncio.run_coroutine_threadsafe(coro, self._ensure_loop())
        try:
            return future.result(self.timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise NetworkError(f"Supabase realtime {action} 시간 초과 ({self.timeout}s)", cause=e) from e
        except OSError as e:
            raise NetworkError(f"Supabase realtime {action} 실패: {e}", cause=e) from e

    async def _get_client(self):
        if self._client is None:
            self._client = await self.client_factory(self.url, self.key)
        return self._client

    async def _subscribe(self, topic: str, table: str, row_filter: str, handler: PayloadHandler):
        client = await self._get_client()
        channel = client.channel(topic)
        channel.on_postgres_changes(
            "INSERT",
            schema="public",
            table=table,
            filter=row_filter,
            callback=handler,
        )
        await channel.subscribe()
        return channel

    async def _remove(self, channel):
        await self._client.remove_channel(channel)

    def subscribe(self, topic: str, table: str, row_filter: str, handler: PayloadHandler):
        """INSERT 이벤트 구독

        handler 는 이벤트 루프 스레드에서 호출된다.

        Raises:
            NetworkError: 연결 실패 또는 시간 초과
        """
        channel = self._run(self._subscribe(topic, table, row_filter, handler), "구독")
        logger.debug(f"realtime 채널 구독: {topic}")
        return channel

    def unsubscribe(self, channel):
        self._run(self._remove(channel), "구독 해제")

    def close(self):
        """이벤트 루프 스레드 종료"""
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
            self._client = None

        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join(self.timeout)
        loop.close()
