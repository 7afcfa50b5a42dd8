"""
onboarding.py - 고객 온보딩 (1~6단계)

저장되지 않는 위저드 상태. 6단계에서 다음으로 넘어가는 것은
ProjectService.create_project 가 담당한다.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from .models import ChecklistStatus, StoreFloor
from .stages import FIRST_STEP, LAST_ONBOARDING_STEP
from ..core.config import DEFAULT_CONFIG
from ..core.exceptions import ValidationError


@dataclass
class OnboardingAnswers:
    """온보딩 위저드 입력값"""
    business_category: str = ""                     # 업종 ID (cafe, korean ...)
    location_dong: str = ""
    store_size: float = 0                           # 평
    store_floor: StoreFloor = StoreFloor.GROUND
    location_city: str = DEFAULT_CONFIG.default_city
    location_district: str = DEFAULT_CONFIG.default_district
    business_detail: str = ""
    budget_total: Optional[int] = None              # 만원
    budget_own: Optional[int] = None                # 만원
    checklist: Dict[str, ChecklistStatus] = field(default_factory=dict)
    note_to_pm: str = ""
    user_id: Optional[str] = None

    def validate(self):
        """필수 입력 검사

        Raises:
            ValidationError: 업종/동/평수 누락
        """
        if not self.business_category:
            raise ValidationError("업종을 선택해주세요.", field="business_category", value=self.business_category)
        if not self.location_dong:
            raise ValidationError("창업 지역을 선택해주세요.", field="location_dong", value=self.location_dong)
        if self.store_size is None or self.store_size <= 0:
            raise ValidationError("매장 평수는 0보다 커야 합니다.", field="store_size", value=self.store_size)
        if self.budget_total is not None and self.budget_own is not None and self.budget_own > self.budget_total:
            raise ValidationError("자기자본이 총 예산보다 클 수 없습니다.", field="budget_own", value=self.budget_own)

    def budget_in_won(self) -> Dict[str, Optional[int]]:
        """예산(만원) → 원 단위, 대출액 포함"""
        total = self.budget_total * 10000 if self.budget_total is not None else None
        own = self.budget_own * 10000 if self.budget_own is not None else None
        loan = total - own if total is not None and own is not None else None
        return {"budget_total": total, "budget_own": own, "budget_loan": loan}


class OnboardingSession:
    """온보딩 진행 상태"""

    def __init__(self, answers: OnboardingAnswers = None):
        self.answers = answers or OnboardingAnswers()
        self.step = FIRST_STEP

    def can_proceed(self) -> bool:
        """현재 단계 필수 입력 확인 (3, 5, 6단계는 조건 없음)"""
        if self.step == 1:
            return bool(self.answers.business_category)
        if self.step == 2:
            return bool(self.answers.location_district and self.answers.location_dong)
        if self.step == 4:
            return self.answers.store_size is not None and self.answers.store_size > 0
        return True

    @property
    def ready_for_project(self) -> bool:
        """마지막 온보딩 단계까지 왔는지"""
        return self.step == LAST_ONBOARDING_STEP

    def next(self) -> int:
        """다음 단계

        Raises:
            ValidationError: 필수 입력 누락 또는 6단계 (프로젝트 생성 필요)
        """
        if not self.can_proceed():
            raise ValidationError(f"{self.step}단계 입력이 완료되지 않았습니다.", field="step", value=self.step)
        if self.step >= LAST_ONBOARDING_STEP:
            raise ValidationError(
                "6단계 이후는 프로젝트 생성으로 진행됩니다.", field="step", value=self.step
            )
        self.step += 1
        return self.step

    def previous(self) -> int:
        self.step = max(self.step - 1, FIRST_STEP)
        return self.step

    def set_checklist_status(self, item_id: str, status: ChecklistStatus):
        self.answers.checklist[item_id] = status
