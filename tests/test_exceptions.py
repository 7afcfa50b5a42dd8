"""exceptions.py / error_handler.py 테스트"""

import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent))

from opening.core.error_handler import ErrorHandler, RecoveryAction, RetryContext
from opening.core.exceptions import (
    OpeningError,
    ValidationError,
    ConfigurationError,
    EstimateUnavailableError,
    PMUnassignedError,
    StageTransitionError,
    StaleProjectError,
    SupabaseError,
    NetworkError,
    ErrorCodes,
)


class TestOpeningError:
    """OpeningError 테스트"""

    def test_basic_error(self):
        """기본 에러"""
        error = OpeningError("테스트 에러")
        assert error.message == "테스트 에러"
        assert error.error_code == ErrorCodes.UNKNOWN
        assert str(error) == "[OPN_UNKNOWN] 테스트 에러"

    def test_to_dict(self):
        """딕셔너리 변환"""
        error = OpeningError("테스트", error_code="TEST_CODE", details={"field": "test"})
        d = error.to_dict()

        assert d["error_code"] == "TEST_CODE"
        assert d["details"]["field"] == "test"
        assert d["type"] == "OpeningError"
        assert d["retryable"] is False

    def test_validation_error_truncates_value(self):
        error = ValidationError("너무 김", field="message", value="가" * 500)

        assert error.error_code == ErrorCodes.VALIDATION
        assert len(error.details["value"]) == 100

    def test_domain_error_codes(self):
        assert EstimateUnavailableError("x", business_category="카페").error_code == ErrorCodes.ESTIMATE_UNAVAILABLE
        assert PMUnassignedError("x", policy="random").details["policy"] == "random"
        assert StageTransitionError("x", current_step=12).details["current_step"] == 12
        assert StaleProjectError("x", project_id="p1", expected_version=2).details["expected_version"] == 2
        assert ConfigurationError("x", config_key="SUPABASE_URL").error_code == ErrorCodes.CONFIG

    def test_retryable(self):
        """저장소/네트워크 오류만 재시도 가능"""
        assert SupabaseError("x", table="t").retryable
        assert not SupabaseError("x", table="t", retryable=False).retryable
        assert NetworkError("x").retryable
        assert not StaleProjectError("x").retryable

    def test_cause_kept(self):
        cause = RuntimeError("원인")
        error = SupabaseError("실패", cause=cause)
        assert error.cause is cause


class TestErrorHandler:
    """ErrorHandler 테스트"""

    def setup_method(self):
        """테스트 설정"""
        self.handler = ErrorHandler(max_retries=2)

    def test_stale_aborts(self):
        assert self.handler.handle(StaleProjectError("충돌", project_id="p1")) == RecoveryAction.ABORT

    def test_retryable_until_limit(self):
        error = SupabaseError("일시 오류", table="t")
        assert self.handler.handle(error, {"retry_count": 0}) == RecoveryAction.RETRY
        assert self.handler.handle(error, {"retry_count": 2}) == RecoveryAction.ABORT

    def test_unassigned_fallback(self):
        assert self.handler.handle(PMUnassignedError("없음")) == RecoveryAction.FALLBACK

    def test_rejected_skip(self):
        assert self.handler.handle(StageTransitionError("불가")) == RecoveryAction.SKIP
        assert self.handler.handle(ValidationError("잘못")) == RecoveryAction.SKIP

    def test_unknown_error_aborts(self):
        assert self.handler.handle(RuntimeError("boom")) == RecoveryAction.ABORT

    def test_summary(self):
        self.handler.handle(ValidationError("a"))
        self.handler.handle(ValidationError("b"))
        self.handler.handle(NetworkError("c"))

        summary = self.handler.get_error_summary()
        assert summary["total_errors"] == 3
        assert summary["by_code"][ErrorCodes.VALIDATION] == 2

        self.handler.clear_history()
        assert self.handler.get_error_summary()["total_errors"] == 0


class TestRetryContext:
    """RetryContext 테스트"""

    @patch("opening.core.error_handler.time.sleep")
    def test_backoff(self, sleep):
        """지수 백오프"""
        retry = RetryContext(max_retries=3, exceptions=(NetworkError,), initial_delay=1.0, backoff_factor=2.0)
        error = NetworkError("x")

        assert retry.should_retry(error)
        assert retry.should_retry(error)
        assert retry.should_retry(error)
        assert not retry.should_retry(error)

        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0, 4.0]

    def test_non_retryable_not_retried(self):
        retry = RetryContext(exceptions=(SupabaseError,), initial_delay=0)
        assert not retry.should_retry(SupabaseError("x", retryable=False))

    def test_other_exception_not_retried(self):
        retry = RetryContext(exceptions=(NetworkError,), initial_delay=0)
        assert not retry.should_retry(ValueError("x"))
