"""
repository - 창업 여정 저장소

로컬 JSON(LocalRepository) / Supabase(SupabaseRepository) 두 구현이
같은 인터페이스를 제공한다.
"""

import logging

from .local import LocalRepository
from ..settings import AppSettings, get_settings


logger = logging.getLogger(__name__)


def get_repository(settings: AppSettings = None):
    """설정에 따라 적절한 Repository 반환

    SUPABASE_URL과 SUPABASE_KEY가 있으면 SupabaseRepository,
    없으면 LocalRepository (로컬 JSON) 사용
    """
    settings = settings or get_settings()

    if settings.use_supabase:
        logger.info("[Repository] Supabase 모드 활성화")
        from .supabase_repository import SupabaseRepository
        return SupabaseRepository(url=settings.supabase_url, key=settings.supabase_key)

    logger.info("[Repository] 로컬 JSON 모드 (SUPABASE_URL/KEY 미설정)")
    return LocalRepository(data_dir=settings.data_dir)


__all__ = [
    "LocalRepository",
    "get_repository",
]
