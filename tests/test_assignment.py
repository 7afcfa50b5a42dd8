"""assignment.py 테스트"""

import random
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from opening.core.exceptions import ConfigurationError, PMUnassignedError, ValidationError
from opening.domain.models import Project, ProjectManager, ProjectStatus
from opening.services.assignment import (
    LeastLoadedPolicy,
    PMAssignmentService,
    RandomPolicy,
    RoundRobinPolicy,
    policy_from_name,
)


class TestPolicies:
    """배정 정책 테스트"""

    def setup_method(self):
        """테스트 설정"""
        self.pool = [
            ProjectManager(id="a", name="A", rating=4.5),
            ProjectManager(id="b", name="B", rating=4.9),
            ProjectManager(id="c", name="C", rating=4.7),
        ]

    def test_random_with_seed(self):
        """같은 시드면 같은 순서"""
        first_policy = RandomPolicy(random.Random(1))
        second_policy = RandomPolicy(random.Random(1))

        first = [first_policy.choose(self.pool, {}).id for _ in range(5)]
        second = [second_policy.choose(self.pool, {}).id for _ in range(5)]

        assert first == second

    def test_random_picks_from_pool(self):
        policy = RandomPolicy(random.Random(3))
        for _ in range(20):
            assert policy.choose(self.pool, {}) in self.pool

    def test_round_robin(self):
        policy = RoundRobinPolicy()
        picks = [policy.choose(self.pool, {}).id for _ in range(4)]
        assert picks == ["a", "b", "c", "a"]

    def test_least_loaded(self):
        """진행 중 프로젝트가 가장 적은 PM"""
        policy = LeastLoadedPolicy()
        assert policy.choose(self.pool, {"a": 2, "b": 1, "c": 0}).id == "c"

    def test_least_loaded_tie_uses_rating(self):
        policy = LeastLoadedPolicy()
        assert policy.choose(self.pool, {}).id == "b"

    def test_policy_from_name(self):
        assert isinstance(policy_from_name("random"), RandomPolicy)
        assert isinstance(policy_from_name("round_robin"), RoundRobinPolicy)
        assert isinstance(policy_from_name("least_loaded"), LeastLoadedPolicy)

    def test_unknown_policy(self):
        with pytest.raises(ConfigurationError):
            policy_from_name("fastest")


class TestPMAssignmentService:
    """PMAssignmentService 테스트"""

    def test_empty_pool(self, repository):
        service = PMAssignmentService(repository)

        with pytest.raises(PMUnassignedError) as exc_info:
            service.assign()

        assert exc_info.value.details["policy"] == "random"

    def test_unavailable_pm_skipped(self, repository):
        repository.add_pm(ProjectManager(id="busy", name="휴가중", is_available=False))
        repository.add_pm(ProjectManager(id="free", name="가능"))

        pm = PMAssignmentService(repository, RandomPolicy(random.Random(0))).assign()

        assert pm.id == "free"

    def test_least_loaded_counts_active_projects(self, repository):
        repository.add_pm(ProjectManager(id="a", name="A"))
        repository.add_pm(ProjectManager(id="b", name="B"))
        repository.insert_project(Project(pm_id="a"))
        repository.insert_project(Project(pm_id="b", status=ProjectStatus.CANCELLED))

        pm = PMAssignmentService(repository, LeastLoadedPolicy()).assign()

        assert pm.id == "b"


class TestPMProfile:
    """PM 프로필 / 배정 가능 여부 테스트"""

    def setup_method(self):
        """테스트 설정"""
        self.pm = ProjectManager(id="pm-a", name="김오픈", phone="010-0000-0000")

    def test_update_profile(self, repository):
        repository.add_pm(self.pm)
        service = PMAssignmentService(repository)

        updated = service.update_profile("pm-a", introduction="카페 창업 10년", specialties=["카페", "디저트"])

        assert updated.introduction == "카페 창업 10년"
        stored = repository.get_pm("pm-a")
        assert stored.specialties == ["카페", "디저트"]
        assert stored.phone == "010-0000-0000"

    def test_update_profile_rejects_other_fields(self, repository):
        """평점/가용 여부는 프로필 수정으로 바꿀 수 없음"""
        repository.add_pm(self.pm)

        with pytest.raises(ValidationError):
            PMAssignmentService(repository).update_profile("pm-a", rating=5.0)

    def test_update_profile_blank_name(self, repository):
        repository.add_pm(self.pm)

        with pytest.raises(ValidationError):
            PMAssignmentService(repository).update_profile("pm-a", name="  ")

        assert repository.get_pm("pm-a").name == "김오픈"

    def test_unavailable_pm_leaves_pool(self, repository):
        """배정 중지된 PM은 가용 목록과 배정에서 빠짐"""
        repository.add_pm(self.pm)
        repository.add_pm(ProjectManager(id="pm-b", name="이창업"))
        service = PMAssignmentService(repository, RandomPolicy(random.Random(0)))

        service.set_availability("pm-a", False)

        assert [pm.id for pm in repository.get_available_pms()] == ["pm-b"]
        assert all(service.assign().id == "pm-b" for _ in range(5))

        service.set_availability("pm-b", False)
        with pytest.raises(PMUnassignedError):
            service.assign()

        service.set_availability("pm-a", True)
        assert service.assign().id == "pm-a"

    def test_unknown_pm(self, repository):
        service = PMAssignmentService(repository)

        with pytest.raises(ValidationError):
            service.set_availability("missing", False)
        with pytest.raises(ValidationError):
            service.update_profile("missing", name="누구")
