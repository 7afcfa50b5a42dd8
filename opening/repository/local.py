"""
local.py - 로컬 JSON 저장소

Supabase 미설정 시 로컬 JSON 파일로 데이터 저장.
SupabaseRepository 와 동일한 인터페이스 제공.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..domain.models import (
    CostStandard,
    Message,
    Milestone,
    Partner,
    Project,
    ProjectManager,
    ProjectStatus,
)
from ..core.exceptions import ProjectNotFoundError, StaleProjectError
from .sample_data import sample_cost_standards, sample_partners, sample_project_managers


logger = logging.getLogger(__name__)

MessageCallback = Callable[[Message], None]


class LocalRepository:
    """창업 여정 저장소 (로컬 JSON)"""

    def __init__(self, data_dir: str = None):
        """
        Args:
            data_dir: 데이터 저장 디렉토리 (기본: project_root/data/opening)
        """
        if data_dir is None:
            project_root = Path(__file__).parent.parent.parent
            data_dir = project_root / "data" / "opening"

        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # 파일 경로
        self.standards_file = self.data_dir / "cost_standards.json"
        self.projects_file = self.data_dir / "startup_projects.json"
        self.milestones_file = self.data_dir / "project_milestones.json"
        self.messages_file = self.data_dir / "project_messages.json"
        self.managers_file = self.data_dir / "project_managers.json"
        self.partners_file = self.data_dir / "partners.json"

        # 읽기-수정-쓰기 구간 보호 (버전 비교 포함)
        self._lock = threading.Lock()
        self._subscribers: Dict[str, List[MessageCallback]] = {}

        self._init_files()

    def _init_files(self):
        """초기 파일 생성"""
        for file_path in [
            self.standards_file,
            self.projects_file,
            self.milestones_file,
            self.messages_file,
            self.managers_file,
            self.partners_file,
        ]:
            if not file_path.exists():
                self._save_json(file_path, [])

    def _load_json(self, file_path: Path) -> List[Dict]:
        """JSON 파일 로드"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return []
        except json.JSONDecodeError:
            logger.warning(f"손상된 JSON 파일을 빈 목록으로 읽음: {file_path}")
            return []

    def _save_json(self, file_path: Path, data: List[Dict]):
        """JSON 파일 저장"""
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    # ========== 비용 기준 ==========

    def get_cost_standards(self, business_category: str, location_district: str, common_category: str = "공통") -> List[CostStandard]:
        """업종(또는 공통) + 지역 비용 기준 조회"""
        data = self._load_json(self.standards_file)
        return [
            CostStandard.from_dict(d) for d in data
            if d.get("business_category") in (business_category, common_category)
            and d.get("location_district") == location_district
        ]

    def add_cost_standards(self, standards: List[CostStandard]) -> int:
        """비용 기준 추가"""
        with self._lock:
            data = self._load_json(self.standards_file)
            data.extend(s.to_dict() for s in standards)
            self._save_json(self.standards_file, data)
        return len(standards)

    # ========== 프로젝트 ==========

    def insert_project(self, project: Project) -> Project:
        """프로젝트 생성"""
        with self._lock:
            data = self._load_json(self.projects_file)
            data.append(project.to_dict())
            self._save_json(self.projects_file, data)
        return project

    def get_project(self, project_id: str) -> Optional[Project]:
        """ID로 프로젝트 조회"""
        for d in self._load_json(self.projects_file):
            if d.get("id") == project_id:
                return Project.from_dict(d)
        return None

    def list_projects(self, status: Optional[ProjectStatus] = None, pm_id: Optional[str] = None) -> List[Project]:
        """프로젝트 목록 (최신순)"""
        projects = [Project.from_dict(d) for d in self._load_json(self.projects_file)]
        if status:
            projects = [p for p in projects if p.status == status]
        if pm_id:
            projects = [p for p in projects if p.pm_id == pm_id]
        return sorted(projects, key=lambda p: p.created_at, reverse=True)

    def update_project(self, project: Project, expected_version: int) -> Project:
        """버전 비교 후 프로젝트 저장

        저장된 version 이 expected_version 과 같을 때만 쓰고 version 을 1 올린다.

        Raises:
            ProjectNotFoundError: 프로젝트 없음
            StaleProjectError: 다른 요청이 먼저 수정함
        """
        with self._lock:
            data = self._load_json(self.projects_file)
            for i, d in enumerate(data):
                if d.get("id") != project.id:
                    continue
                stored_version = int(d.get("version") or 1)
                if stored_version != expected_version:
                    raise StaleProjectError(
                        "프로젝트가 다른 요청에 의해 먼저 수정되었습니다.",
                        project_id=project.id,
                        expected_version=expected_version,
                    )
                project.version = expected_version + 1
                data[i] = project.to_dict()
                self._save_json(self.projects_file, data)
                return project

        raise ProjectNotFoundError(f"프로젝트를 찾을 수 없습니다: {project.id}", project_id=project.id)

    def delete_project(self, project_id: str) -> bool:
        """프로젝트와 딸린 마일스톤/메시지 삭제"""
        with self._lock:
            for file_path in [self.messages_file, self.milestones_file]:
                data = self._load_json(file_path)
                self._save_json(file_path, [d for d in data if d.get("project_id") != project_id])

            data = self._load_json(self.projects_file)
            remaining = [d for d in data if d.get("id") != project_id]
            self._save_json(self.projects_file, remaining)
        return len(remaining) < len(data)

    def count_active_projects_by_pm(self) -> Dict[str, int]:
        """PM별 진행 중(취소/완료 제외) 프로젝트 수"""
        counts: Dict[str, int] = {}
        for d in self._load_json(self.projects_file):
            pm_id = d.get("pm_id")
            if not pm_id or d.get("status") in (ProjectStatus.CANCELLED.value, ProjectStatus.COMPLETED.value):
                continue
            counts[pm_id] = counts.get(pm_id, 0) + 1
        return counts

    # ========== 마일스톤 ==========

    def add_milestones(self, milestones: List[Milestone]) -> List[Milestone]:
        """마일스톤 일괄 추가"""
        with self._lock:
            data = self._load_json(self.milestones_file)
            data.extend(m.to_dict() for m in milestones)
            self._save_json(self.milestones_file, data)
        return milestones

    def get_milestones(self, project_id: str) -> List[Milestone]:
        """프로젝트 마일스톤 (순서대로)"""
        milestones = [
            Milestone.from_dict(d) for d in self._load_json(self.milestones_file)
            if d.get("project_id") == project_id
        ]
        return sorted(milestones, key=lambda m: m.step_order)

    def update_milestone(self, milestone: Milestone) -> Milestone:
        """마일스톤 업데이트"""
        with self._lock:
            data = self._load_json(self.milestones_file)
            for i, d in enumerate(data):
                if d.get("id") == milestone.id:
                    data[i] = milestone.to_dict()
                    break
            self._save_json(self.milestones_file, data)
        return milestone

    # ========== 메시지 ==========

    def add_message(self, message: Message) -> Message:
        """메시지 추가 후 구독자에게 전달"""
        with self._lock:
            data = self._load_json(self.messages_file)
            data.append(message.to_dict())
            self._save_json(self.messages_file, data)
            callbacks = list(self._subscribers.get(message.project_id, []))

        for callback in callbacks:
            callback(message)
        return message

    def get_messages(self, project_id: str) -> List[Message]:
        """프로젝트 메시지 (오래된 순)"""
        messages = [
            Message.from_dict(d) for d in self._load_json(self.messages_file)
            if d.get("project_id") == project_id
        ]
        return sorted(messages, key=lambda m: m.created_at)

    def subscribe_messages(self, project_id: str, callback: MessageCallback) -> Callable[[], None]:
        """새 메시지 구독

        Returns:
            구독 해제 함수
        """
        with self._lock:
            self._subscribers.setdefault(project_id, []).append(callback)

        def unsubscribe():
            with self._lock:
                callbacks = self._subscribers.get(project_id, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    # ========== PM ==========

    def get_available_pms(self) -> List[ProjectManager]:
        """배정 가능한 PM 목록"""
        return [
            ProjectManager.from_dict(d) for d in self._load_json(self.managers_file)
            if d.get("is_available", True)
        ]

    def get_pm(self, pm_id: str) -> Optional[ProjectManager]:
        for d in self._load_json(self.managers_file):
            if d.get("id") == pm_id:
                return ProjectManager.from_dict(d)
        return None

    def add_pm(self, pm: ProjectManager) -> ProjectManager:
        """PM 등록"""
        with self._lock:
            data = self._load_json(self.managers_file)
            data.append(pm.to_dict())
            self._save_json(self.managers_file, data)
        return pm

    def update_pm(self, pm: ProjectManager) -> Optional[ProjectManager]:
        """PM 프로필 수정 (없으면 None)"""
        with self._lock:
            data = self._load_json(self.managers_file)
            for i, d in enumerate(data):
                if d.get("id") == pm.id:
                    data[i] = pm.to_dict()
                    self._save_json(self.managers_file, data)
                    return pm
        return None

    def set_pm_availability(self, pm_id: str, is_available: bool) -> Optional[ProjectManager]:
        """PM 배정 가능 여부 변경"""
        pm = self.get_pm(pm_id)
        if pm is None:
            return None
        pm.is_available = is_available
        return self.update_pm(pm)

    # ========== 협력업체 ==========

    def get_partners(self, active_only: bool = False) -> List[Partner]:
        """협력업체 목록 (분류순)"""
        partners = [Partner.from_dict(d) for d in self._load_json(self.partners_file)]
        if active_only:
            partners = [p for p in partners if p.is_active]
        return sorted(partners, key=lambda p: p.category)

    def get_partner(self, partner_id: str) -> Optional[Partner]:
        for d in self._load_json(self.partners_file):
            if d.get("id") == partner_id:
                return Partner.from_dict(d)
        return None

    def add_partner(self, partner: Partner) -> Partner:
        """협력업체 추가"""
        with self._lock:
            data = self._load_json(self.partners_file)
            data.append(partner.to_dict())
            self._save_json(self.partners_file, data)
        return partner

    def update_partner(self, partner: Partner) -> Partner:
        """협력업체 수정"""
        with self._lock:
            data = self._load_json(self.partners_file)
            for i, d in enumerate(data):
                if d.get("id") == partner.id:
                    data[i] = partner.to_dict()
                    break
            self._save_json(self.partners_file, data)
        return partner

    def delete_partner(self, partner_id: str) -> bool:
        """협력업체 삭제"""
        with self._lock:
            data = self._load_json(self.partners_file)
            original_len = len(data)
            data = [d for d in data if d.get("id") != partner_id]
            self._save_json(self.partners_file, data)
        return len(data) < original_len

    def toggle_partner(self, partner_id: str) -> Optional[Partner]:
        """협력업체 활성/비활성 전환"""
        partner = self.get_partner(partner_id)
        if partner is None:
            return None
        partner.is_active = not partner.is_active
        return self.update_partner(partner)

    # ========== 유틸리티 ==========

    def clear_all(self):
        """모든 데이터 삭제 (테스트용)"""
        with self._lock:
            for file_path in [
                self.standards_file,
                self.projects_file,
                self.milestones_file,
                self.messages_file,
                self.managers_file,
                self.partners_file,
            ]:
                self._save_json(file_path, [])

    def seed_sample_data(self) -> Dict[str, int]:
        """샘플 기준 데이터 추가 (비용 기준, PM, 협력업체)

        이미 데이터가 있는 테이블은 건너뛴다 (반복 실행 시 중복 방지).
        """
        counts = {"cost_standards": 0, "project_managers": 0, "partners": 0}

        if not self._load_json(self.standards_file):
            counts["cost_standards"] = self.add_cost_standards(sample_cost_standards())

        if not self._load_json(self.managers_file):
            managers = sample_project_managers()
            for pm in managers:
                self.add_pm(pm)
            counts["project_managers"] = len(managers)

        if not self._load_json(self.partners_file):
            partners = sample_partners()
            for partner in partners:
                self.add_partner(partner)
            counts["partners"] = len(partners)

        logger.info(
            f"샘플 데이터 추가: 기준 {counts['cost_standards']}건, "
            f"PM {counts['project_managers']}명, 협력업체 {counts['partners']}곳"
        )
        return counts
