"""
커스텀 예외 클래스

오프닝 창업 여정 코어에서 사용하는 모든 커스텀 예외를 정의
"""

from typing import Optional, Dict, Any


class OpeningError(Exception):
    """기본 예외 클래스"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        cause: Exception = None
    ):
        """
        Args:
            message: 에러 메시지
            error_code: 에러 코드
            details: 추가 상세 정보
            cause: 원인 예외
        """
        self.message = message
        self.error_code = error_code or self._default_code()
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def _default_code(self) -> str:
        return "OPN_UNKNOWN"

    @property
    def retryable(self) -> bool:
        """호출자가 같은 요청을 다시 시도해도 되는지 여부"""
        return False

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "type": self.__class__.__name__,
            "retryable": self.retryable,
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ValidationError(OpeningError):
    """입력값 검증 오류"""

    def __init__(
        self,
        message: str,
        field: str = None,
        value: Any = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        details = kwargs.pop("details", {})
        details["field"] = field
        details["value"] = str(value)[:100]  # 값 길이 제한
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "OPN_VALIDATION"


class ConfigurationError(OpeningError):
    """설정 오류"""

    def __init__(
        self,
        message: str,
        config_key: str = None,
        **kwargs
    ):
        self.config_key = config_key
        details = kwargs.pop("details", {})
        details["config_key"] = config_key
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "OPN_CONFIG"


class EstimateUnavailableError(OpeningError):
    """비용 기준 데이터가 없어 견적을 낼 수 없음

    "0원 창업"과 구분하기 위해 빈 견적 대신 발생시킨다.
    """

    def __init__(
        self,
        message: str,
        business_category: str = None,
        location_district: str = None,
        **kwargs
    ):
        self.business_category = business_category
        self.location_district = location_district
        details = kwargs.pop("details", {})
        details["business_category"] = business_category
        details["location_district"] = location_district
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "OPN_ESTIMATE_UNAVAILABLE"


class PMUnassignedError(OpeningError):
    """배정 가능한 PM이 없음"""

    def __init__(self, message: str, policy: str = None, **kwargs):
        self.policy = policy
        details = kwargs.pop("details", {})
        details["policy"] = policy
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "OPN_PM_UNASSIGNED"


class StageTransitionError(OpeningError):
    """허용되지 않는 단계 전환"""

    def __init__(
        self,
        message: str,
        current_step: int = None,
        transition: str = None,
        **kwargs
    ):
        self.current_step = current_step
        self.transition = transition
        details = kwargs.pop("details", {})
        details["current_step"] = current_step
        details["transition"] = transition
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "OPN_STAGE_TRANSITION"


class ProjectNotFoundError(OpeningError):
    """프로젝트 없음"""

    def __init__(self, message: str, project_id: str = None, **kwargs):
        self.project_id = project_id
        details = kwargs.pop("details", {})
        details["project_id"] = project_id
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "OPN_PROJECT_NOT_FOUND"


class StaleProjectError(OpeningError):
    """다른 사용자가 먼저 프로젝트를 수정함 (버전 충돌)

    최신 상태를 다시 읽은 뒤 사용자가 판단해야 하므로 자동 재시도 대상이 아니다.
    """

    def __init__(
        self,
        message: str,
        project_id: str = None,
        expected_version: int = None,
        **kwargs
    ):
        self.project_id = project_id
        self.expected_version = expected_version
        details = kwargs.pop("details", {})
        details["project_id"] = project_id
        details["expected_version"] = expected_version
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "OPN_STALE_PROJECT"


class APIError(OpeningError):
    """외부 API 호출 오류 (기본)"""

    def __init__(
        self,
        message: str,
        status_code: int = None,
        endpoint: str = None,
        **kwargs
    ):
        self.status_code = status_code
        self.endpoint = endpoint
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        details["endpoint"] = endpoint
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "OPN_API"


class SupabaseError(APIError):
    """Supabase 읽기/쓰기 오류"""

    def __init__(
        self,
        message: str,
        table: str = None,
        operation: str = None,
        retryable: bool = True,
        **kwargs
    ):
        self.table = table
        self.operation = operation
        self._retryable = retryable
        details = kwargs.pop("details", {})
        details["table"] = table
        details["operation"] = operation
        super().__init__(message, details=details, **kwargs)

    @property
    def retryable(self) -> bool:
        return self._retryable

    def _default_code(self) -> str:
        return "OPN_SUPABASE"


class NetworkError(OpeningError):
    """네트워크 오류"""

    @property
    def retryable(self) -> bool:
        return True

    def _default_code(self) -> str:
        return "OPN_NETWORK"


# 에러 코드 상수
class ErrorCodes:
    """에러 코드 상수"""

    # 일반
    UNKNOWN = "OPN_UNKNOWN"
    VALIDATION = "OPN_VALIDATION"
    CONFIG = "OPN_CONFIG"

    # 견적
    ESTIMATE_UNAVAILABLE = "OPN_ESTIMATE_UNAVAILABLE"

    # 프로젝트
    PM_UNASSIGNED = "OPN_PM_UNASSIGNED"
    STAGE_TRANSITION = "OPN_STAGE_TRANSITION"
    PROJECT_NOT_FOUND = "OPN_PROJECT_NOT_FOUND"
    STALE_PROJECT = "OPN_STALE_PROJECT"

    # 외부 연동
    API_ERROR = "OPN_API"
    SUPABASE_ERROR = "OPN_SUPABASE"
    NETWORK_ERROR = "OPN_NETWORK"
