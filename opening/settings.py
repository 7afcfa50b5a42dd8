"""
settings.py - 애플리케이션 설정

환경변수(.env) 기반 설정 관리
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# 프로젝트 루트 디렉토리
ROOT_DIR = Path(__file__).parent.parent
DATA_DIR = ROOT_DIR / "data"
LOGS_DIR = ROOT_DIR / "logs"

# PM 배정 정책 이름
ASSIGNMENT_POLICIES = ("random", "round_robin", "least_loaded")


@dataclass
class AppSettings:
    """애플리케이션 설정"""

    # --- Supabase ---
    supabase_url: str = ""
    supabase_key: str = ""

    # --- 알림 ---
    slack_webhook_url: str = ""

    # --- 저장소 / 배정 ---
    data_dir: str = str(DATA_DIR)
    assignment_policy: str = "random"

    # --- 기타 ---
    debug_mode: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppSettings":
        """환경변수에서 설정 로드"""
        return cls(
            supabase_url=os.getenv("SUPABASE_URL", ""),
            supabase_key=os.getenv("SUPABASE_KEY", ""),
            slack_webhook_url=os.getenv("SLACK_WEBHOOK_URL", ""),
            data_dir=os.getenv("OPENING_DATA_DIR", str(DATA_DIR)),
            assignment_policy=os.getenv("OPENING_ASSIGNMENT_POLICY", "random"),
            debug_mode=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def validate(self) -> list:
        """설정 유효성 검사"""
        errors = []

        if bool(self.supabase_url) != bool(self.supabase_key):
            errors.append("SUPABASE_URL과 SUPABASE_KEY는 함께 설정해야 합니다.")

        if self.assignment_policy not in ASSIGNMENT_POLICIES:
            errors.append(f"알 수 없는 PM 배정 정책: {self.assignment_policy}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"알 수 없는 로그 레벨: {self.log_level}")

        return errors


def get_settings() -> AppSettings:
    """환경변수 기준 설정 인스턴스 반환"""
    return AppSettings.from_env()
