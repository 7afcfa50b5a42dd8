"""
에러 핸들러

중앙 집중식 에러 처리 및 복구 로직
"""

import logging
import traceback
import time
from typing import Optional, Type, Tuple, Any, Dict, List
from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime

from .exceptions import (
    OpeningError,
    ValidationError,
    EstimateUnavailableError,
    PMUnassignedError,
    StageTransitionError,
    StaleProjectError,
    SupabaseError,
    NetworkError,
)


class RecoveryAction(Enum):
    """복구 액션"""
    RETRY = "retry"
    SKIP = "skip"
    FALLBACK = "fallback"
    ABORT = "abort"
    LOG_AND_CONTINUE = "log_and_continue"


@dataclass
class ErrorRecord:
    """에러 기록"""
    error_code: str
    message: str
    timestamp: str
    traceback: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    recovery_action: Optional[RecoveryAction] = None


class ErrorHandler:
    """에러 핸들러

    예외를 기록하고 호출자가 취할 복구 액션을 결정한다.
    실제 재시도는 호출자(또는 RetryContext) 몫이다.
    """

    def __init__(self, logger: logging.Logger = None, max_retries: int = 3):
        self.logger = logger or logging.getLogger(__name__)
        self.max_retries = max_retries
        self.error_history: List[ErrorRecord] = []

        # 에러별 복구 전략 매핑 (먼저 매칭되는 항목 우선)
        self._recovery_strategies = {
            StaleProjectError: self._handle_conflict,
            NetworkError: self._handle_retryable,
            SupabaseError: self._handle_retryable,
            PMUnassignedError: self._handle_unassigned,
            EstimateUnavailableError: self._handle_unassigned,
            StageTransitionError: self._handle_rejected,
            ValidationError: self._handle_rejected,
        }

    def handle(
        self,
        error: Exception,
        context: Dict[str, Any] = None
    ) -> RecoveryAction:
        """
        에러 처리

        Args:
            error: 발생한 예외
            context: 에러 컨텍스트 (retry_count 등)

        Returns:
            복구 액션
        """
        context = context or {}

        record = self._create_record(error, context)
        self.error_history.append(record)

        self._log_error(error, context)

        recovery = self._determine_recovery(error, context)
        record.recovery_action = recovery

        return recovery

    def _create_record(
        self,
        error: Exception,
        context: Dict[str, Any]
    ) -> ErrorRecord:
        """에러 기록 생성"""
        error_code = "UNKNOWN"
        details = {}

        if isinstance(error, OpeningError):
            error_code = error.error_code
            details = error.details

        return ErrorRecord(
            error_code=error_code,
            message=str(error),
            timestamp=datetime.now().isoformat(),
            traceback=traceback.format_exc(),
            details={**details, **context}
        )

    def _log_error(self, error: Exception, context: Dict[str, Any]):
        """에러 로깅"""
        if isinstance(error, OpeningError):
            self.logger.error(
                f"[{error.error_code}] {error.message}",
                extra={"context": {**error.details, **context}},
            )
        else:
            self.logger.error(
                f"Unhandled error: {str(error)}",
                extra={"context": context},
                exc_info=True
            )

    def _determine_recovery(
        self,
        error: Exception,
        context: Dict[str, Any]
    ) -> RecoveryAction:
        """복구 전략 결정"""
        for error_type, handler in self._recovery_strategies.items():
            if isinstance(error, error_type):
                return handler(error, context)

        if isinstance(error, OpeningError):
            return RecoveryAction.LOG_AND_CONTINUE
        return RecoveryAction.ABORT

    def _handle_conflict(self, error: StaleProjectError, context: Dict[str, Any]) -> RecoveryAction:
        """버전 충돌: 최신 상태를 다시 읽어야 하므로 중단"""
        self.logger.warning(f"Project {error.project_id} changed concurrently. Reload required.")
        return RecoveryAction.ABORT

    def _handle_retryable(self, error: OpeningError, context: Dict[str, Any]) -> RecoveryAction:
        """네트워크/저장소 에러 처리"""
        if not error.retryable:
            return RecoveryAction.ABORT
        retry_count = context.get("retry_count", 0)
        if retry_count < self.max_retries:
            return RecoveryAction.RETRY
        return RecoveryAction.ABORT

    def _handle_unassigned(self, error: OpeningError, context: Dict[str, Any]) -> RecoveryAction:
        """PM/견적 부재: 운영자 확인 후 다시 진행"""
        return RecoveryAction.FALLBACK

    def _handle_rejected(self, error: OpeningError, context: Dict[str, Any]) -> RecoveryAction:
        """입력/전환 거부"""
        return RecoveryAction.SKIP

    def get_error_summary(self) -> Dict[str, Any]:
        """에러 요약 반환"""
        if not self.error_history:
            return {"total_errors": 0, "by_code": {}}

        by_code = {}
        for record in self.error_history:
            code = record.error_code
            by_code[code] = by_code.get(code, 0) + 1

        return {
            "total_errors": len(self.error_history),
            "by_code": by_code,
            "recent_errors": [
                {"code": r.error_code, "message": r.message, "time": r.timestamp}
                for r in self.error_history[-5:]
            ]
        }

    def clear_history(self):
        """에러 히스토리 초기화"""
        self.error_history.clear()


class RetryContext:
    """재시도 컨텍스트 매니저

    사용법:
        with RetryContext(exceptions=(SupabaseError,)) as retry:
            while True:
                try:
                    return do_write()
                except SupabaseError as e:
                    if not retry.should_retry(e):
                        raise
    """

    def __init__(
        self,
        max_retries: int = 3,
        exceptions: Tuple[Type[Exception], ...] = (Exception,),
        backoff_factor: float = 2.0,
        initial_delay: float = 1.0,
        max_delay: float = 60.0,
        logger: logging.Logger = None
    ):
        self.max_retries = max_retries
        self.exceptions = exceptions
        self.backoff_factor = backoff_factor
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.logger = logger or logging.getLogger(__name__)
        self.attempt = 0

    def __enter__(self):
        self.attempt = 0
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def should_retry(self, exception: Exception) -> bool:
        """재시도 여부 결정"""
        if not isinstance(exception, self.exceptions):
            return False
        if isinstance(exception, OpeningError) and not exception.retryable:
            return False

        self.attempt += 1
        if self.attempt > self.max_retries:
            return False

        delay = min(
            self.initial_delay * (self.backoff_factor ** (self.attempt - 1)),
            self.max_delay
        )

        self.logger.warning(
            f"Retry attempt {self.attempt}/{self.max_retries} in {delay:.1f}s"
        )
        if delay > 0:
            time.sleep(delay)
        return True
