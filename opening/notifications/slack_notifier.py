"""
slack_notifier.py - 슬랙 알림

운영자용 알림 (단계 변경, 프로젝트 취소, PM 미배정)

사용법:
1. 슬랙 워크스페이스에서 앱 생성
2. Incoming Webhook URL 발급
3. SLACK_WEBHOOK_URL 환경변수 설정
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, List

import requests

from .events import Event, EventEmitter, EventType


logger = logging.getLogger(__name__)


@dataclass
class SlackNotifierConfig:
    """슬랙 알림 설정"""
    webhook_url: str = ""
    channel: str = "#opening-ops"
    username: str = "오프닝 알림봇"
    icon_emoji: str = ":store:"
    use_mock: bool = False


class SlackNotifier:
    """슬랙 알림 전송"""

    def __init__(self, config: SlackNotifierConfig = None):
        self.config = config or SlackNotifierConfig(
            webhook_url=os.getenv("SLACK_WEBHOOK_URL", "")
        )

        if not self.config.webhook_url:
            self.config.use_mock = True
            logger.info("[SlackNotifier] SLACK_WEBHOOK_URL 없음. Mock 모드 활성화")

        self.sent_blocks: List[List[Dict]] = []

    def subscribe(self, emitter: EventEmitter):
        """운영 알림 대상 이벤트 구독"""
        emitter.on(EventType.STAGE_CHANGED, self.on_stage_changed)
        emitter.on(EventType.PROJECT_CANCELLED, self.on_project_cancelled)
        emitter.on(EventType.PM_UNASSIGNED, self.on_pm_unassigned)

    # ========== 이벤트 핸들러 ==========

    def on_stage_changed(self, event: Event) -> bool:
        data = event.data
        return self.send_stage_changed(
            project_id=data.get("project_id", ""),
            from_step=data.get("from_step"),
            to_step=data.get("to_step"),
            label=data.get("label", ""),
        )

    def on_project_cancelled(self, event: Event) -> bool:
        data = event.data
        return self.send_project_cancelled(data.get("project_id", ""), data.get("reason", ""))

    def on_pm_unassigned(self, event: Event) -> bool:
        data = event.data
        return self.send_pm_unassigned(
            business_category=data.get("business_category", ""),
            location_dong=data.get("location_dong", ""),
        )

    # ========== 알림 ==========

    def send_stage_changed(self, project_id: str, from_step: int, to_step: int, label: str) -> bool:
        """단계 변경 알림

        Returns:
            bool: 전송 성공 여부
        """
        blocks = [
            self._header("창업 단계 변경"),
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*프로젝트:*\n`{project_id}`"},
                    {"type": "mrkdwn", "text": f"*단계:*\n{from_step} → {to_step} ({label})"},
                ]
            },
        ]
        return self._send_message(blocks)

    def send_project_cancelled(self, project_id: str, reason: str = "") -> bool:
        """프로젝트 취소 알림"""
        blocks = [
            self._header("프로젝트 취소"),
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"*프로젝트:* `{project_id}`"}
            },
        ]
        if reason:
            blocks.append({
                "type": "context",
                "elements": [{"type": "mrkdwn", "text": f"사유: {reason}"}]
            })
        return self._send_message(blocks)

    def send_pm_unassigned(self, business_category: str, location_dong: str) -> bool:
        """PM 미배정 알림 (배정 가능한 PM 없음)"""
        blocks = [
            self._header("PM 배정 실패"),
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        f"강남구 {location_dong} *{business_category}* 창업 요청을 받았지만 "
                        "배정 가능한 PM이 없습니다.\nPM 가용 상태를 확인해주세요."
                    )
                }
            },
        ]
        return self._send_message(blocks)

    def _header(self, text: str) -> Dict:
        return {
            "type": "header",
            "text": {"type": "plain_text", "text": text, "emoji": True}
        }

    def _send_message(self, blocks: List[Dict]) -> bool:
        """슬랙 메시지 전송

        Args:
            blocks: 메시지 블록 리스트

        Returns:
            bool: 전송 성공 여부
        """
        if self.config.use_mock:
            logger.info("[SlackNotifier] Mock 모드 - 메시지:\n" + json.dumps(blocks, indent=2, ensure_ascii=False))
            self.sent_blocks.append(blocks)
            return True

        payload = {
            "channel": self.config.channel,
            "username": self.config.username,
            "icon_emoji": self.config.icon_emoji,
            "blocks": blocks
        }

        try:
            response = requests.post(
                self.config.webhook_url,
                json=payload,
                timeout=10
            )
        except requests.RequestException as e:
            logger.error(f"[SlackNotifier] 오류: {e}")
            return False

        if response.status_code == 200:
            logger.info("[SlackNotifier] 메시지 전송 성공")
            self.sent_blocks.append(blocks)
            return True

        logger.warning(f"[SlackNotifier] 전송 실패: {response.status_code}")
        return False
