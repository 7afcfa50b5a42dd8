"""slack_notifier.py 테스트"""

import sys
from pathlib import Path
from unittest.mock import Mock, patch

import requests

sys.path.insert(0, str(Path(__file__).parent.parent))

from opening.notifications.events import EventEmitter, EventType
from opening.notifications.slack_notifier import SlackNotifier, SlackNotifierConfig


class TestSlackNotifier:
    """SlackNotifier 테스트"""

    def test_mock_mode_without_url(self):
        """웹훅 URL 없으면 Mock 모드"""
        notifier = SlackNotifier(SlackNotifierConfig(webhook_url=""))

        assert notifier.config.use_mock
        assert notifier.send_project_cancelled("p1", "자금 문제")
        assert "자금 문제" in str(notifier.sent_blocks[0])

    @patch("opening.notifications.slack_notifier.requests.post")
    def test_send_via_webhook(self, post):
        post.return_value = Mock(status_code=200)
        notifier = SlackNotifier(SlackNotifierConfig(webhook_url="https://hooks.slack.com/x"))

        assert notifier.send_stage_changed("p1", 7, 8, "비용 컨설팅")

        url = post.call_args[0][0]
        payload = post.call_args.kwargs["json"]
        assert url == "https://hooks.slack.com/x"
        assert payload["channel"] == "#opening-ops"
        assert "7 → 8" in str(payload["blocks"])
        assert post.call_args.kwargs["timeout"] == 10

    @patch("opening.notifications.slack_notifier.requests.post")
    def test_http_failure(self, post):
        post.return_value = Mock(status_code=500)
        notifier = SlackNotifier(SlackNotifierConfig(webhook_url="https://hooks.slack.com/x"))

        assert notifier.send_pm_unassigned("카페", "역삼동") is False

    @patch("opening.notifications.slack_notifier.requests.post")
    def test_connection_error(self, post):
        post.side_effect = requests.ConnectionError("down")
        notifier = SlackNotifier(SlackNotifierConfig(webhook_url="https://hooks.slack.com/x"))

        assert notifier.send_pm_unassigned("카페", "역삼동") is False

    def test_subscribe_to_events(self):
        """이벤트 발행 시 알림 전송"""
        emitter = EventEmitter()
        notifier = SlackNotifier(SlackNotifierConfig(webhook_url=""))
        notifier.subscribe(emitter)

        emitter.emit(EventType.STAGE_CHANGED, {"project_id": "p1", "from_step": 8, "to_step": 9, "label": "계약/착공"})
        emitter.emit(EventType.PM_UNASSIGNED, {"business_category": "cafe", "location_dong": "논현동"})
        emitter.emit(EventType.MESSAGE_SENT, {"project_id": "p1"})

        assert len(notifier.sent_blocks) == 2
        assert "계약/착공" in str(notifier.sent_blocks[0])
        assert "논현동" in str(notifier.sent_blocks[1])
