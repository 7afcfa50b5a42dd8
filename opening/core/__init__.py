"""코어 모듈"""
from .exceptions import (
    OpeningError,
    ValidationError,
    ConfigurationError,
    EstimateUnavailableError,
    PMUnassignedError,
    StageTransitionError,
    ProjectNotFoundError,
    StaleProjectError,
    APIError,
    SupabaseError,
    NetworkError,
)
from .error_handler import ErrorHandler, RecoveryAction, RetryContext
from .config import EstimatorConfig, DEFAULT_CONFIG, BUSINESS_CATEGORIES
from .logging import setup_logger, PerformanceLogger

__all__ = [
    # 예외
    "OpeningError",
    "ValidationError",
    "ConfigurationError",
    "EstimateUnavailableError",
    "PMUnassignedError",
    "StageTransitionError",
    "ProjectNotFoundError",
    "StaleProjectError",
    "APIError",
    "SupabaseError",
    "NetworkError",
    # 에러 처리
    "ErrorHandler",
    "RecoveryAction",
    "RetryContext",
    # 설정
    "EstimatorConfig",
    "DEFAULT_CONFIG",
    "BUSINESS_CATEGORIES",
    "setup_logger",
    "PerformanceLogger",
]
