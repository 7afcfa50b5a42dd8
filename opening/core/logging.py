"""
logging.py - 로깅 설정

기능:
- Rich 콘솔 로깅
- 선택적 파일 로깅 (로테이션, JSON 형식)
- 성능 추적 (실행 시간 측정)
"""

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from rich.logging import RichHandler


class JSONFormatter(logging.Formatter):
    """JSON 형식 로그 포맷터"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # 추가 컨텍스트
        if hasattr(record, "context"):
            log_data["context"] = record.context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logger(
    name: str = "opening",
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Rich 포맷 로거 설정

    Args:
        name: 로거 이름
        level: 로그 레벨 (정수 또는 "INFO" 같은 이름)
        log_file: 지정 시 로테이션 파일 핸들러 추가
        json_format: 파일 로그를 JSON 한 줄 형식으로 기록
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8"
            )
            if json_format:
                file_handler.setFormatter(JSONFormatter())
            else:
                file_handler.setFormatter(logging.Formatter(
                    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(lineno)d | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S"
                ))
            logger.addHandler(file_handler)

    return logger


class PerformanceLogger:
    """성능 추적 로거"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @contextmanager
    def track(self, operation: str, **context):
        """
        작업 실행 시간 추적

        사용법:
            with perf_logger.track("프로젝트 생성", dong="역삼동"):
                create_project()
        """
        start_time = time.perf_counter()
        self.logger.debug(f"시작: {operation}", extra={"context": context})

        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start_time
            self.logger.error(
                f"실패: {operation} ({elapsed:.3f}s) - {str(e)}",
                extra={"context": {**context, "error": str(e), "duration_ms": elapsed * 1000}},
            )
            raise
        else:
            elapsed = time.perf_counter() - start_time
            self.logger.info(
                f"완료: {operation} ({elapsed:.3f}s)",
                extra={"context": {**context, "duration_ms": elapsed * 1000}}
            )
