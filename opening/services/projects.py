"""
projects.py - 창업 프로젝트 서비스

온보딩 완료(6→7) 시 프로젝트 생성, PM 단계 진행(7~12), 체크리스트와
마일스톤 관리를 담당한다. 프로젝트 저장은 모두 version 비교 후 쓰기.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.config import DEFAULT_CONFIG, EstimatorConfig, category_label, resolve_category
from ..core.exceptions import (
    EstimateUnavailableError,
    NetworkError,
    OpeningError,
    ProjectNotFoundError,
    SupabaseError,
    ValidationError,
)
from ..core.logging import PerformanceLogger
from ..domain import checklist as checklist_ops
from ..domain.estimator import CostEstimator, format_price, round_won
from ..domain.models import (
    ChecklistStatus,
    CostEstimate,
    Milestone,
    MilestoneStatus,
    Project,
    ProjectManager,
    ProjectStatus,
    SenderType,
    StoreFloor,
)
from ..domain.onboarding import OnboardingAnswers
from ..domain.stages import (
    FIRST_DELIVERY_STEP,
    Advance,
    Cancel,
    JumpTo,
    Transition,
    apply_transition,
    stage_change_message,
    stage_label,
    status_for_step,
)
from ..notifications.events import EventEmitter, EventType
from .assignment import PMAssignmentService
from .messaging import MessageService


logger = logging.getLogger(__name__)


class ProjectService:
    """창업 프로젝트 서비스"""

    def __init__(
        self,
        repository,
        estimator: CostEstimator = None,
        assigner: PMAssignmentService = None,
        messages: MessageService = None,
        emitter: EventEmitter = None,
        config: EstimatorConfig = None,
    ):
        """
        Args:
            repository: LocalRepository 또는 SupabaseRepository
            estimator: 비용 산출기
            assigner: PM 배정 서비스 (기본: 무작위 배정)
            messages: 채팅 서비스 (시스템/PM 메시지 기록용)
            emitter: 이벤트 이미터
            config: 산출 설정
        """
        self.repository = repository
        self.config = config or DEFAULT_CONFIG
        self.estimator = estimator or CostEstimator(self.config)
        self.emitter = emitter or EventEmitter()
        self.assigner = assigner or PMAssignmentService(repository, emitter=self.emitter)
        self.messages = messages or MessageService(repository, emitter=self.emitter)
        self.perf = PerformanceLogger(logger)

    # ========== 견적 ==========

    def estimate(
        self,
        business_category: str,
        store_size: float,
        store_floor: StoreFloor = StoreFloor.GROUND,
        location_district: str = None,
    ) -> CostEstimate:
        """예상 창업 비용

        기준 데이터가 없거나 조회에 실패하면 available=False 견적을 반환한다.

        Raises:
            ValidationError: 평수 <= 0
        """
        district = location_district or self.config.default_district
        category = resolve_category(business_category)

        if store_size is None or store_size <= 0:
            raise ValidationError("매장 평수는 0보다 커야 합니다.", field="store_size", value=store_size)

        try:
            standards = self.repository.get_cost_standards(category, district, self.config.common_category)
        except (SupabaseError, NetworkError) as e:
            logger.error(f"비용 기준 조회 실패: {e}")
            result = CostEstimate.unavailable(f"비용 기준 조회 실패: {e.message}")
        else:
            result = self.estimator.estimate(standards, category, district, store_size, store_floor)

        if not result.available:
            self.emitter.emit(
                EventType.ESTIMATE_UNAVAILABLE,
                {"business_category": category, "location_district": district, "reason": result.reason},
                source="projects",
            )
        return result

    # ========== 프로젝트 생성 (6 → 7) ==========

    def create_project(self, answers: OnboardingAnswers) -> Project:
        """온보딩 답변으로 프로젝트 생성

        견적 고정 → PM 배정 → 프로젝트 저장 → 마일스톤/초기 메시지 순서.
        PM 배정 실패 시 아무것도 저장하지 않는다.

        Raises:
            ValidationError: 필수 입력 누락
            EstimateUnavailableError: 비용 기준 없음
            PMUnassignedError: 가용 PM 없음
            SupabaseError, NetworkError: 저장 실패 (저장된 프로젝트는 삭제 후 전달)
        """
        answers.validate()

        with self.perf.track("프로젝트 생성", category=answers.business_category, dong=answers.location_dong):
            estimate = self.estimate(
                answers.business_category,
                answers.store_size,
                answers.store_floor,
                answers.location_district,
            )
            if not estimate.available:
                raise EstimateUnavailableError(
                    estimate.reason or "비용 기준 데이터가 없어 견적을 낼 수 없습니다.",
                    business_category=answers.business_category,
                    location_district=answers.location_district,
                )

            pm = self.assigner.assign(answers.business_category, answers.location_dong)

            project = Project(
                user_id=answers.user_id,
                business_category=answers.business_category,
                business_detail=answers.business_detail,
                location_city=answers.location_city,
                location_district=answers.location_district,
                location_dong=answers.location_dong,
                store_size=answers.store_size,
                store_floor=answers.store_floor,
                estimated_costs=list(estimate.groups),
                estimated_total=estimate.grand_total,
                current_step=FIRST_DELIVERY_STEP,
                pm_approved_step=FIRST_DELIVERY_STEP,
                status=status_for_step(FIRST_DELIVERY_STEP),
                pm_id=pm.id,
                checklist_data=checklist_ops.default_checklist(answers.checklist),
                **answers.budget_in_won(),
            )
            project = self.repository.insert_project(project)
            try:
                self.repository.add_milestones(checklist_ops.default_milestones(project.id))
                self._post_initial_messages(project, pm, estimate, answers.note_to_pm)
            except OpeningError:
                # 실패 시 프로젝트/마일스톤/메시지를 남기지 않는다
                self._discard_project(project.id)
                raise

        logger.info(f"프로젝트 생성: {project.id} (PM: {pm.name})")
        self.emitter.emit(
            EventType.PROJECT_CREATED,
            {"project_id": project.id, "pm_id": pm.id, "estimated_total": project.estimated_total},
            source="projects",
        )
        return project

    def _discard_project(self, project_id: str):
        """생성 도중 실패한 프로젝트 정리 (마일스톤/메시지 포함)"""
        try:
            self.repository.delete_project(project_id)
        except OpeningError as e:
            logger.error(f"실패한 프로젝트 정리 실패: {project_id} ({e})")
        else:
            logger.warning(f"프로젝트 생성 실패로 삭제: {project_id}")

    def _post_initial_messages(self, project: Project, pm: ProjectManager, estimate: CostEstimate, note: str):
        """요약 → 고객 메모 → PM 인사 순서로 기록"""
        self.messages.send(project.id, self.summary_message(project, estimate), SenderType.SYSTEM)

        if note and note.strip():
            self.messages.send(project.id, note, SenderType.USER, sender_id=project.user_id)

        self.messages.send(project.id, self.greeting_message(project, pm), SenderType.PM, sender_id=pm.id)

    @staticmethod
    def summary_message(project: Project, estimate: CostEstimate) -> str:
        """프로젝트 요약 시스템 메시지"""
        done = [item.title for item in project.checklist_data if item.status == ChecklistStatus.DONE]
        worry = [item.title for item in project.checklist_data if item.status == ChecklistStatus.WORRY]

        lines = [
            "📋 프로젝트 요약",
            f"• 업종: {category_label(project.business_category)}",
            f"• 위치: {project.location_district} {project.location_dong}",
            f"• 규모: {project.store_size:g}평",
            f"• 예상 비용: {format_price(estimate.total.min)} ~ {format_price(estimate.total.max)}"
            f" (평균 {format_price(estimate.total.avg)})",
        ]
        if done:
            lines.append(f"✅ 이미 준비됨: {', '.join(done)}")
        if worry:
            lines.append(f"⚠️ 도움 필요: {', '.join(worry)}")
        return "\n".join(lines)

    @staticmethod
    def greeting_message(project: Project, pm: ProjectManager) -> str:
        """PM 첫 인사"""
        return (
            f"안녕하세요! 담당 PM {pm.name}입니다 😊\n\n"
            f"{project.location_district} {project.location_dong} {category_label(project.business_category)} "
            "창업을 함께 하게 되어 반갑습니다.\n\n"
            "산출된 예상 비용을 바탕으로 세부 계획을 세워보겠습니다. 곧 전화드리겠습니다!"
        )

    # ========== 조회 ==========

    def get_project(self, project_id: str) -> Project:
        """
        Raises:
            ProjectNotFoundError: 프로젝트 없음
        """
        project = self.repository.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(f"프로젝트를 찾을 수 없습니다: {project_id}", project_id=project_id)
        return project

    def list_pm_projects(self, pm_id: str, status: ProjectStatus = None) -> List[Project]:
        """PM 담당 프로젝트 (최신순)"""
        return self.repository.list_projects(status=status, pm_id=pm_id)

    def update_pm_notes(self, project_id: str, notes: str, expected_version: int = None) -> Project:
        """PM 메모 저장 (고객에게 노출되지 않음)"""
        project = self.get_project(project_id)
        version = project.version if expected_version is None else expected_version

        project.pm_notes = (notes or "").strip()
        project.updated_at = datetime.now()
        return self.repository.update_project(project, version)

    # ========== 단계 전환 (7 ~ 12) ==========

    def advance_stage(self, project_id: str, expected_version: int = None, notify: bool = True) -> Project:
        """다음 단계로 진행 (12단계에서는 변화 없음)"""
        return self._transition(project_id, Advance(), expected_version, notify)

    def set_stage(self, project_id: str, stage: int, expected_version: int = None, notify: bool = True) -> Project:
        """지정 단계로 이동 (7~12, 되돌리기 가능)"""
        return self._transition(project_id, JumpTo(stage), expected_version, notify)

    def cancel_project(self, project_id: str, reason: str = "", expected_version: int = None) -> Project:
        """프로젝트 취소"""
        return self._transition(project_id, Cancel(reason), expected_version, notify=False)

    def _transition(
        self,
        project_id: str,
        transition: Transition,
        expected_version: Optional[int],
        notify: bool,
    ) -> Project:
        project = self.get_project(project_id)
        version = project.version if expected_version is None else expected_version

        outcome = apply_transition(project, transition)
        if not outcome.changed:
            logger.debug(f"단계 변화 없음: {project_id} ({transition.name})")
            return project

        saved = self.repository.update_project(outcome.project, version)

        if isinstance(transition, Cancel):
            logger.info(f"프로젝트 취소: {project_id}")
            self.emitter.emit(
                EventType.PROJECT_CANCELLED,
                {"project_id": project_id, "reason": transition.reason, "step": saved.current_step},
                source="projects",
            )
            return saved

        logger.info(f"단계 변경: {project_id} {outcome.previous_step} → {saved.current_step}")
        if notify:
            self.messages.send(project_id, stage_change_message(saved.current_step), SenderType.SYSTEM)
        self.emitter.emit(
            EventType.STAGE_CHANGED,
            {
                "project_id": project_id,
                "from_step": outcome.previous_step,
                "to_step": saved.current_step,
                "label": stage_label(saved.current_step),
                "status": saved.status.value,
            },
            source="projects",
        )
        return saved

    # ========== 체크리스트 ==========

    def update_checklist_item(
        self,
        project_id: str,
        item_id: str,
        status: ChecklistStatus,
        comment: str = None,
        expected_version: int = None,
    ) -> Project:
        """체크리스트 항목 상태/코멘트 변경"""
        return self._update_checklist(
            project_id,
            lambda items: checklist_ops.set_item_status(items, item_id, status, comment),
            expected_version,
        )

    def add_checklist_item(
        self,
        project_id: str,
        title: str,
        category: str = "PM 추가",
        comment: str = None,
        estimated_cost: Dict[str, Any] = None,
        expected_version: int = None,
    ) -> Project:
        """PM 커스텀 항목 추가"""
        return self._update_checklist(
            project_id,
            lambda items: checklist_ops.add_custom_item(items, title, category, comment, estimated_cost),
            expected_version,
        )

    def remove_checklist_item(self, project_id: str, item_id: str, expected_version: int = None) -> Project:
        """PM 커스텀 항목 삭제 (기본 항목은 불가)"""
        return self._update_checklist(
            project_id,
            lambda items: checklist_ops.remove_custom_item(items, item_id),
            expected_version,
        )

    def assign_vendor(
        self,
        project_id: str,
        item_id: str,
        partner_id: Optional[str],
        expected_version: int = None,
    ) -> Project:
        """체크리스트 항목에 협력업체 배정 (partner_id=None 이면 해제)

        Raises:
            ValidationError: 없는 업체 또는 비활성 업체
        """
        if partner_id is not None:
            partner = self.repository.get_partner(partner_id)
            if partner is None or not partner.is_active:
                raise ValidationError("배정할 수 없는 협력업체입니다.", field="partner_id", value=partner_id)

        return self._update_checklist(
            project_id,
            lambda items: checklist_ops.assign_item_vendor(items, item_id, partner_id),
            expected_version,
        )

    def _update_checklist(self, project_id: str, change, expected_version: Optional[int]) -> Project:
        project = self.get_project(project_id)
        version = project.version if expected_version is None else expected_version

        project.checklist_data = change(project.checklist_data)
        project.updated_at = datetime.now()
        return self.repository.update_project(project, version)

    # ========== 마일스톤 ==========

    def list_milestones(self, project_id: str) -> List[Milestone]:
        return self.repository.get_milestones(project_id)

    def update_milestone_status(self, project_id: str, milestone_id: str, status: MilestoneStatus) -> Milestone:
        """마일스톤 상태 변경 (완료 시 완료 시각 기록)"""
        for milestone in self.repository.get_milestones(project_id):
            if milestone.id == milestone_id:
                milestone.status = status
                milestone.completed_at = datetime.now() if status == MilestoneStatus.COMPLETED else None
                return self.repository.update_milestone(milestone)

        raise ValidationError("마일스톤을 찾을 수 없습니다.", field="milestone_id", value=milestone_id)

    def milestone_progress(self, project_id: str) -> int:
        """완료 마일스톤 비율 (0~100, 반올림)"""
        milestones = self.repository.get_milestones(project_id)
        if not milestones:
            return 0
        completed = sum(1 for m in milestones if m.status == MilestoneStatus.COMPLETED)
        return round_won(completed / len(milestones) * 100)
