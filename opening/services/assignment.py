"""
assignment.py - PM 배정

배정 정책:
- random: 가용 PM 중 무작위 (기본값)
- round_robin: 순서대로 돌아가며
- least_loaded: 진행 중인 프로젝트가 가장 적은 PM

PM 프로필 수정과 배정 가능 여부(is_available) 관리도 여기서 한다.
"""

import logging
import random
from typing import Dict, List, Optional

from ..core.exceptions import ConfigurationError, PMUnassignedError, ValidationError
from ..domain.models import ProjectManager
from ..notifications.events import EventEmitter, EventType


logger = logging.getLogger(__name__)


class RandomPolicy:
    """무작위 배정"""
    name = "random"

    def __init__(self, rng: random.Random = None):
        self.rng = rng or random.Random()

    def choose(self, pool: List[ProjectManager], active_counts: Dict[str, int]) -> ProjectManager:
        return self.rng.choice(pool)


class RoundRobinPolicy:
    """순환 배정 (프로세스 내 순번 유지)"""
    name = "round_robin"

    def __init__(self):
        self._next = 0

    def choose(self, pool: List[ProjectManager], active_counts: Dict[str, int]) -> ProjectManager:
        ordered = sorted(pool, key=lambda pm: pm.id)
        chosen = ordered[self._next % len(ordered)]
        self._next += 1
        return chosen


class LeastLoadedPolicy:
    """진행 중 프로젝트가 가장 적은 PM (동률이면 평점 높은 순)"""
    name = "least_loaded"

    def choose(self, pool: List[ProjectManager], active_counts: Dict[str, int]) -> ProjectManager:
        return min(pool, key=lambda pm: (active_counts.get(pm.id, 0), -pm.rating, pm.id))


def policy_from_name(name: str, rng: random.Random = None):
    """정책 이름 → 정책 객체"""
    if name == RandomPolicy.name:
        return RandomPolicy(rng)
    if name == RoundRobinPolicy.name:
        return RoundRobinPolicy()
    if name == LeastLoadedPolicy.name:
        return LeastLoadedPolicy()
    raise ConfigurationError(f"알 수 없는 PM 배정 정책: {name}", config_key="OPENING_ASSIGNMENT_POLICY")


class PMAssignmentService:
    """PM 배정 서비스"""

    # PM 본인이 수정할 수 있는 프로필 항목
    PROFILE_FIELDS = ("name", "phone", "introduction", "specialties")

    def __init__(self, repository, policy=None, emitter: Optional[EventEmitter] = None):
        """
        Args:
            repository: LocalRepository 또는 SupabaseRepository
            policy: 배정 정책 (기본: RandomPolicy)
            emitter: 이벤트 이미터
        """
        self.repository = repository
        self.policy = policy or RandomPolicy()
        self.emitter = emitter

    def assign(self, business_category: str = "", location_dong: str = "") -> ProjectManager:
        """가용 PM 한 명 선택

        Raises:
            PMUnassignedError: 가용 PM 없음
        """
        pool = self.repository.get_available_pms()
        if not pool:
            logger.warning(f"배정 가능한 PM 없음 (정책: {self.policy.name})")
            if self.emitter:
                self.emitter.emit(
                    EventType.PM_UNASSIGNED,
                    {"business_category": business_category, "location_dong": location_dong},
                    source="assignment",
                )
            raise PMUnassignedError("현재 배정 가능한 PM이 없습니다.", policy=self.policy.name)

        active_counts = self.repository.count_active_projects_by_pm() if isinstance(self.policy, LeastLoadedPolicy) else {}
        pm = self.policy.choose(pool, active_counts)
        logger.info(f"PM 배정: {pm.name} (정책: {self.policy.name})")
        return pm

    # ========== PM 프로필 ==========

    def update_profile(self, pm_id: str, **changes) -> ProjectManager:
        """PM 프로필 수정 (name, phone, introduction, specialties)

        Raises:
            ValidationError: 없는 PM 또는 수정할 수 없는 항목
        """
        unknown = set(changes) - set(self.PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"수정할 수 없는 항목: {', '.join(sorted(unknown))}", field="profile")

        pm = self._get_pm(pm_id)
        for name, value in changes.items():
            setattr(pm, name, value)
        if not pm.name.strip():
            raise ValidationError("PM 이름은 비워둘 수 없습니다.", field="name")

        logger.info(f"PM 프로필 수정: {pm.id} ({', '.join(sorted(changes))})")
        return self.repository.update_pm(pm)

    def set_availability(self, pm_id: str, is_available: bool) -> ProjectManager:
        """배정 가능 여부 변경 (False 면 배정 대상에서 빠짐)"""
        self._get_pm(pm_id)
        pm = self.repository.set_pm_availability(pm_id, is_available)
        logger.info(f"PM 배정 {'가능' if is_available else '중지'}: {pm_id}")
        return pm

    def _get_pm(self, pm_id: str) -> ProjectManager:
        pm = self.repository.get_pm(pm_id)
        if pm is None:
            raise ValidationError("PM을 찾을 수 없습니다.", field="pm_id", value=pm_id)
        return pm
