"""도메인 모듈 (외부 의존성 없음)"""
from .models import (
    CostUnit,
    StoreFloor,
    ProjectStatus,
    ChecklistStatus,
    MilestoneStatus,
    SenderType,
    CostStandard,
    CostRange,
    CostEstimate,
    CostEstimateGroup,
    CostEstimateLine,
    ChecklistItem,
    Milestone,
    ProjectManager,
    Partner,
    Message,
    Project,
)
from .estimator import CostEstimator, format_price
from .stages import (
    STAGES,
    Advance,
    JumpTo,
    Cancel,
    apply_transition,
    stage_label,
    stage_description,
    status_for_step,
)
from .onboarding import OnboardingAnswers, OnboardingSession

__all__ = [
    # 모델
    "CostUnit",
    "StoreFloor",
    "ProjectStatus",
    "ChecklistStatus",
    "MilestoneStatus",
    "SenderType",
    "CostStandard",
    "CostRange",
    "CostEstimate",
    "CostEstimateGroup",
    "CostEstimateLine",
    "ChecklistItem",
    "Milestone",
    "ProjectManager",
    "Partner",
    "Message",
    "Project",
    # 비용 산출
    "CostEstimator",
    "format_price",
    # 단계
    "STAGES",
    "Advance",
    "JumpTo",
    "Cancel",
    "apply_transition",
    "stage_label",
    "stage_description",
    "status_for_step",
    # 온보딩
    "OnboardingAnswers",
    "OnboardingSession",
]
