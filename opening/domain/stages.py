"""
stages.py - 창업 여정 단계 정의와 전환 규칙

1~6단계는 고객이 직접 진행하는 온보딩, 7~12단계는 PM이 진행하는 실행 단계.
전환은 Advance / JumpTo / Cancel 세 가지이며 apply_transition 이 검증한다.
저장소 접근이 없는 순수 함수만 둔다.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Optional, Union

from .models import Project, ProjectStatus
from ..core.exceptions import StageTransitionError


FIRST_STEP = 1
LAST_ONBOARDING_STEP = 6
FIRST_DELIVERY_STEP = 7
LAST_STEP = 12
COMPLETED_FROM_STEP = 11


@dataclass(frozen=True)
class StageInfo:
    """단계 표시 정보"""
    step: int
    label: str
    description: str

    @property
    def is_onboarding(self) -> bool:
        return self.step <= LAST_ONBOARDING_STEP


STAGES: Dict[int, StageInfo] = {
    1: StageInfo(1, "업종 선택", "어떤 창업을 준비하시나요?"),
    2: StageInfo(2, "위치 선택", "창업 예정 지역을 선택하세요"),
    3: StageInfo(3, "상권 분석", "선택한 지역의 상권 정보를 확인하세요"),
    4: StageInfo(4, "매장 규모", "예상 평수를 입력하세요"),
    5: StageInfo(5, "준비 체크리스트", "현재 준비 상황을 체크해주세요"),
    6: StageInfo(6, "예상 비용", "창업 비용을 확인하세요"),
    7: StageInfo(7, "상담 시작", "전담 PM이 배정되어 1:1 상담을 시작합니다"),
    8: StageInfo(8, "비용 컨설팅", "예상 비용을 바탕으로 세부 예산과 업체를 조율합니다"),
    9: StageInfo(9, "계약/착공", "점포 계약과 인테리어 착공을 진행합니다"),
    10: StageInfo(10, "창업 진행중", "시공, 장비 설치, 인허가를 PM이 관리합니다"),
    11: StageInfo(11, "그랜드 오픈", "매장을 정식 오픈합니다"),
    12: StageInfo(12, "사후 관리", "오픈 이후 운영 안정화를 지원합니다"),
}


def stage_info(step: int) -> StageInfo:
    if step not in STAGES:
        raise StageTransitionError(f"존재하지 않는 단계입니다: {step}", current_step=step)
    return STAGES[step]


def stage_label(step: int) -> str:
    """단계 이름"""
    return stage_info(step).label


def stage_description(step: int) -> str:
    """단계 설명"""
    return stage_info(step).description


def status_for_step(step: int) -> ProjectStatus:
    """단계에 따른 프로젝트 상태"""
    if step >= COMPLETED_FROM_STEP:
        return ProjectStatus.COMPLETED
    if step >= FIRST_DELIVERY_STEP:
        return ProjectStatus.IN_PROGRESS
    return ProjectStatus.PM_ASSIGNED


def stage_change_message(step: int) -> str:
    """단계 변경 시 채팅에 남기는 시스템 메시지"""
    info = stage_info(step)
    return f"✅ PM이 다음 단계로 진행을 승인했습니다: {info.label}\n{info.description}"


# ============================================================
# 전환 타입
# ============================================================

@dataclass(frozen=True)
class Advance:
    """다음 단계로 (+1)"""
    name = "advance"


@dataclass(frozen=True)
class JumpTo:
    """지정 단계로 바로 이동 (되돌리기 허용)"""
    stage: int
    name = "jump_to"


@dataclass(frozen=True)
class Cancel:
    """프로젝트 취소"""
    reason: str = ""
    name = "cancel"


Transition = Union[Advance, JumpTo, Cancel]


@dataclass(frozen=True)
class TransitionOutcome:
    """전환 결과

    changed=False 이면 저장/메시지 없이 그대로 둔다 (12단계에서 Advance 등).
    """
    project: Project
    previous_step: int
    previous_status: ProjectStatus
    changed: bool

    @property
    def step_changed(self) -> bool:
        return self.changed and self.project.current_step != self.previous_step


def apply_transition(
    project: Project,
    transition: Transition,
    now: Optional[datetime] = None,
) -> TransitionOutcome:
    """전환 검증 및 적용

    원본 project 는 수정하지 않고 새 Project 를 담아 반환한다.

    Raises:
        StageTransitionError: 취소된 프로젝트, 범위 밖 단계, 온보딩 단계 조작
    """
    now = now or datetime.now()
    step = project.current_step
    status = project.status

    if project.is_cancelled:
        raise StageTransitionError(
            "취소된 프로젝트는 더 이상 진행할 수 없습니다.",
            current_step=step,
            transition=transition.name,
        )

    if isinstance(transition, Cancel):
        updated = replace(project, status=ProjectStatus.CANCELLED, updated_at=now)
        return TransitionOutcome(updated, step, status, changed=True)

    if step < FIRST_DELIVERY_STEP:
        raise StageTransitionError(
            "PM 배정 전 단계는 고객 온보딩에서만 진행됩니다.",
            current_step=step,
            transition=transition.name,
        )

    if isinstance(transition, Advance):
        if step >= LAST_STEP:
            return TransitionOutcome(project, step, status, changed=False)
        target = step + 1
    elif isinstance(transition, JumpTo):
        target = transition.stage
        if not FIRST_DELIVERY_STEP <= target <= LAST_STEP:
            raise StageTransitionError(
                f"PM은 {FIRST_DELIVERY_STEP}~{LAST_STEP}단계로만 이동할 수 있습니다: {target}",
                current_step=step,
                transition=transition.name,
            )
    else:
        raise StageTransitionError(
            f"알 수 없는 전환입니다: {transition!r}",
            current_step=step,
        )

    updated = replace(
        project,
        current_step=target,
        pm_approved_step=target,
        status=status_for_step(target),
        updated_at=now,
    )
    return TransitionOutcome(updated, step, status, changed=True)
