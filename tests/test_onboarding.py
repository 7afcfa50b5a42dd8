"""onboarding.py / checklist.py 테스트"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from opening.core.exceptions import ValidationError
from opening.domain import checklist as checklist_ops
from opening.domain.models import ChecklistStatus
from opening.domain.onboarding import OnboardingAnswers, OnboardingSession


class TestOnboardingSession:
    """온보딩 위저드 테스트"""

    def setup_method(self):
        """테스트 설정"""
        self.session = OnboardingSession()

    def test_starts_at_step_one(self):
        assert self.session.step == 1
        assert not self.session.can_proceed()

    def test_category_required(self):
        """1단계: 업종 필수"""
        with pytest.raises(ValidationError):
            self.session.next()

        self.session.answers.business_category = "cafe"
        assert self.session.next() == 2

    def test_dong_required(self):
        """2단계: 동 필수"""
        self.session.answers.business_category = "cafe"
        self.session.next()

        assert not self.session.can_proceed()
        self.session.answers.location_dong = "역삼동"
        assert self.session.next() == 3

    def test_size_required(self):
        """4단계: 평수 > 0"""
        self.session.answers.business_category = "cafe"
        self.session.answers.location_dong = "역삼동"
        self.session.next()
        self.session.next()
        assert self.session.next() == 4

        assert not self.session.can_proceed()
        self.session.answers.store_size = 15
        assert self.session.next() == 5

    def test_cannot_go_past_six(self):
        """6단계 이후는 프로젝트 생성"""
        self.session.answers = OnboardingAnswers(business_category="cafe", location_dong="역삼동", store_size=15)
        for _ in range(5):
            self.session.next()

        assert self.session.ready_for_project
        with pytest.raises(ValidationError):
            self.session.next()
        assert self.session.step == 6

    def test_previous_stops_at_one(self):
        assert self.session.previous() == 1

    def test_set_checklist_status(self):
        self.session.set_checklist_status("interior", ChecklistStatus.WORRY)
        assert self.session.answers.checklist["interior"] == ChecklistStatus.WORRY


class TestOnboardingAnswers:
    """온보딩 답변 검증 테스트"""

    def test_valid(self):
        OnboardingAnswers(business_category="cafe", location_dong="역삼동", store_size=15).validate()

    def test_own_budget_exceeds_total(self):
        answers = OnboardingAnswers(
            business_category="cafe", location_dong="역삼동", store_size=15,
            budget_total=5000, budget_own=8000,
        )
        with pytest.raises(ValidationError) as exc_info:
            answers.validate()
        assert exc_info.value.field == "budget_own"

    def test_budget_in_won(self):
        """만원 → 원, 대출액 계산"""
        answers = OnboardingAnswers(budget_total=10000, budget_own=6000)

        assert answers.budget_in_won() == {
            "budget_total": 100_000_000,
            "budget_own": 60_000_000,
            "budget_loan": 40_000_000,
        }

    def test_budget_missing(self):
        assert OnboardingAnswers().budget_in_won()["budget_loan"] is None


class TestChecklist:
    """체크리스트 테스트"""

    def test_default_checklist(self):
        """기본 11개 항목, 온보딩 상태 반영"""
        items = checklist_ops.default_checklist({"interior": ChecklistStatus.DONE})

        assert len(items) == 11
        interior = next(i for i in items if i.id == "interior")
        assert interior.status == ChecklistStatus.DONE
        assert interior.estimated_cost == {"min": 150, "max": 400, "unit": "평당 만원"}
        assert all(not i.is_custom for i in items)

    def test_default_milestones(self):
        milestones = checklist_ops.default_milestones("p1")

        assert [m.step_order for m in milestones] == list(range(1, 10))
        assert milestones[0].step_name == "사업자등록"
        assert milestones[-1].step_name == "그랜드오픈"
        assert all(m.project_id == "p1" for m in milestones)

    def test_add_and_remove_custom_item(self):
        items = checklist_ops.default_checklist()

        items = checklist_ops.add_custom_item(items, "  방역 업체  ", "PM 추가")
        custom = items[-1]
        assert custom.title == "방역 업체"
        assert custom.is_custom

        items = checklist_ops.remove_custom_item(items, custom.id)
        assert len(items) == 11

    def test_cannot_remove_default_item(self):
        with pytest.raises(ValidationError):
            checklist_ops.remove_custom_item(checklist_ops.default_checklist(), "signage")

    def test_unknown_item(self):
        with pytest.raises(ValidationError):
            checklist_ops.set_item_status(checklist_ops.default_checklist(), "nope", ChecklistStatus.DONE)

    def test_set_status_keeps_comment(self):
        items = checklist_ops.set_item_status(checklist_ops.default_checklist(), "network", ChecklistStatus.WORRY, "CCTV 필요")
        items = checklist_ops.set_item_status(items, "network", ChecklistStatus.DONE)

        network = next(i for i in items if i.id == "network")
        assert network.status == ChecklistStatus.DONE
        assert network.comment == "CCTV 필요"
