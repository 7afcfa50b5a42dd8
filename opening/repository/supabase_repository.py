"""
supabase_repository.py - Supabase 기반 저장소

사용법:
    # 환경변수 설정 필요
    # SUPABASE_URL=https://xxx.supabase.co
    # SUPABASE_KEY=eyJxxx...

    repo = SupabaseRepository()
    project = repo.get_project(project_id)

테이블: cost_standards, startup_projects, project_milestones,
        project_messages, project_managers, partners
"""

import logging
import os
from typing import Any, Callable, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import create_client, Client

from ..domain.models import (
    CostStandard,
    Message,
    Milestone,
    Partner,
    Project,
    ProjectManager,
    ProjectStatus,
)
from ..core.exceptions import (
    ConfigurationError,
    NetworkError,
    ProjectNotFoundError,
    StaleProjectError,
    SupabaseError,
)
from .realtime import RealtimeBridge
from .sample_data import sample_cost_standards, sample_partners, sample_project_managers


logger = logging.getLogger(__name__)

MessageCallback = Callable[[Message], None]


class SupabaseRepository:
    """Supabase 기반 창업 여정 저장소

    LocalRepository와 동일한 인터페이스 제공
    환경변수 SUPABASE_URL, SUPABASE_KEY 필요
    """

    def __init__(self, url: str = None, key: str = None, client: Client = None, realtime: RealtimeBridge = None):
        """
        Args:
            url: Supabase 프로젝트 URL
            key: Supabase anon/service key
            client: 이미 생성된 클라이언트 (테스트 주입용)
            realtime: 실시간 구독 브리지 (기본: url/key 로 생성)
        """
        self.realtime = realtime
        if client is not None:
            self.client = client
            return

        self.url = url or os.getenv("SUPABASE_URL")
        self.key = key or os.getenv("SUPABASE_KEY")

        if not self.url or not self.key:
            raise ConfigurationError(
                "SUPABASE_URL과 SUPABASE_KEY 환경변수가 필요합니다.",
                config_key="SUPABASE_URL",
            )

        self.client: Client = create_client(self.url, self.key)
        if self.realtime is None:
            self.realtime = RealtimeBridge(self.url, self.key)

    def _execute(self, query, table: str, operation: str):
        """쿼리 실행 (클라이언트 예외 → SupabaseError / NetworkError)"""
        try:
            return query.execute()
        except PostgrestAPIError as e:
            raise SupabaseError(
                f"Supabase {table} {operation} 실패: {e.message}",
                table=table,
                operation=operation,
                details={"code": e.code},
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Supabase 연결 실패 ({table} {operation}): {e}", cause=e) from e

    # ========== 비용 기준 ==========

    def get_cost_standards(self, business_category: str, location_district: str, common_category: str = "공통") -> List[CostStandard]:
        """업종(또는 공통) + 지역 비용 기준 조회"""
        query = (
            self.client.table("cost_standards")
            .select("*")
            .or_(f"business_category.eq.{business_category},business_category.eq.{common_category}")
            .eq("location_district", location_district)
        )
        response = self._execute(query, "cost_standards", "select")
        return [CostStandard.from_dict(row) for row in response.data]

    def add_cost_standards(self, standards: List[CostStandard]) -> int:
        """비용 기준 추가"""
        rows = [s.to_dict() for s in standards]
        response = self._execute(self.client.table("cost_standards").insert(rows), "cost_standards", "insert")
        return len(response.data)

    # ========== 프로젝트 ==========

    def insert_project(self, project: Project) -> Project:
        """프로젝트 생성"""
        query = self.client.table("startup_projects").insert(project.to_dict())
        response = self._execute(query, "startup_projects", "insert")
        return Project.from_dict(response.data[0]) if response.data else project

    def get_project(self, project_id: str) -> Optional[Project]:
        """ID로 프로젝트 조회"""
        query = self.client.table("startup_projects").select("*").eq("id", project_id)
        response = self._execute(query, "startup_projects", "select")
        return Project.from_dict(response.data[0]) if response.data else None

    def list_projects(self, status: Optional[ProjectStatus] = None, pm_id: Optional[str] = None) -> List[Project]:
        """프로젝트 목록 (최신순)"""
        query = self.client.table("startup_projects").select("*")
        if status:
            query = query.eq("status", status.value)
        if pm_id:
            query = query.eq("pm_id", pm_id)
        response = self._execute(query.order("created_at", desc=True), "startup_projects", "select")
        return [Project.from_dict(row) for row in response.data]

    def update_project(self, project: Project, expected_version: int) -> Project:
        """버전 비교 후 프로젝트 저장

        (id, version) 조건부 UPDATE. 영향받은 행이 없으면 존재 여부로
        StaleProjectError / ProjectNotFoundError 를 구분한다.
        """
        row = project.to_dict()
        del row["id"]
        del row["created_at"]
        row["version"] = expected_version + 1

        query = (
            self.client.table("startup_projects")
            .update(row)
            .eq("id", project.id)
            .eq("version", expected_version)
        )
        response = self._execute(query, "startup_projects", "update")
        if response.data:
            return Project.from_dict(response.data[0])

        if self.get_project(project.id) is None:
            raise ProjectNotFoundError(f"프로젝트를 찾을 수 없습니다: {project.id}", project_id=project.id)
        raise StaleProjectError(
            "프로젝트가 다른 요청에 의해 먼저 수정되었습니다.",
            project_id=project.id,
            expected_version=expected_version,
        )

    def delete_project(self, project_id: str) -> bool:
        """프로젝트와 딸린 마일스톤/메시지 삭제 (자식 테이블 먼저)"""
        for table in ("project_messages", "project_milestones"):
            self._execute(self.client.table(table).delete().eq("project_id", project_id), table, "delete")

        query = self.client.table("startup_projects").delete().eq("id", project_id)
        response = self._execute(query, "startup_projects", "delete")
        return len(response.data) > 0

    def count_active_projects_by_pm(self) -> Dict[str, int]:
        """PM별 진행 중(취소/완료 제외) 프로젝트 수"""
        query = (
            self.client.table("startup_projects")
            .select("pm_id")
            .not_.in_("status", [ProjectStatus.CANCELLED.value, ProjectStatus.COMPLETED.value])
        )
        response = self._execute(query, "startup_projects", "select")

        counts: Dict[str, int] = {}
        for row in response.data:
            pm_id = row.get("pm_id")
            if pm_id:
                counts[pm_id] = counts.get(pm_id, 0) + 1
        return counts

    # ========== 마일스톤 ==========

    def add_milestones(self, milestones: List[Milestone]) -> List[Milestone]:
        """마일스톤 일괄 추가"""
        rows = [m.to_dict() for m in milestones]
        response = self._execute(self.client.table("project_milestones").insert(rows), "project_milestones", "insert")
        return [Milestone.from_dict(row) for row in response.data] if response.data else milestones

    def get_milestones(self, project_id: str) -> List[Milestone]:
        """프로젝트 마일스톤 (순서대로)"""
        query = self.client.table("project_milestones").select("*").eq("project_id", project_id).order("step_order")
        response = self._execute(query, "project_milestones", "select")
        return [Milestone.from_dict(row) for row in response.data]

    def update_milestone(self, milestone: Milestone) -> Milestone:
        """마일스톤 업데이트"""
        data = {
            "status": milestone.status.value,
            "completed_at": milestone.completed_at.isoformat() if milestone.completed_at else None,
        }
        query = self.client.table("project_milestones").update(data).eq("id", milestone.id)
        response = self._execute(query, "project_milestones", "update")
        return Milestone.from_dict(response.data[0]) if response.data else milestone

    # ========== 메시지 ==========

    def add_message(self, message: Message) -> Message:
        """메시지 추가"""
        query = self.client.table("project_messages").insert(message.to_dict())
        response = self._execute(query, "project_messages", "insert")
        return Message.from_dict(response.data[0]) if response.data else message

    def get_messages(self, project_id: str) -> List[Message]:
        """프로젝트 메시지 (오래된 순)"""
        query = self.client.table("project_messages").select("*").eq("project_id", project_id).order("created_at")
        response = self._execute(query, "project_messages", "select")
        return [Message.from_dict(row) for row in response.data]

    def subscribe_messages(self, project_id: str, callback: MessageCallback) -> Callable[[], None]:
        """새 메시지 실시간 구독 (project-{id} 채널)

        callback 은 realtime 이벤트 루프 스레드에서 호출된다.

        Returns:
            구독 해제 함수

        Raises:
            ConfigurationError: realtime 브리지 없음 (클라이언트만 주입한 경우)
            NetworkError: 구독 실패
        """
        if self.realtime is None:
            raise ConfigurationError("실시간 구독에는 Supabase URL/KEY 가 필요합니다.", config_key="SUPABASE_URL")

        def handle_insert(payload: Dict[str, Any]):
            record = self._record_from_payload(payload)
            if record:
                callback(Message.from_dict(record))

        channel = self.realtime.subscribe(
            f"project-{project_id}",
            "project_messages",
            f"project_id=eq.{project_id}",
            handle_insert,
        )

        def unsubscribe():
            self.realtime.unsubscribe(channel)

        return unsubscribe

    @staticmethod
    def _record_from_payload(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """realtime 페이로드에서 새 행 추출 (버전별 형식 차이 흡수)"""
        data = payload.get("data") or {}
        return data.get("record") or payload.get("new") or payload.get("record")

    # ========== PM ==========

    def get_available_pms(self) -> List[ProjectManager]:
        """배정 가능한 PM 목록"""
        query = self.client.table("project_managers").select("*").eq("is_available", True)
        response = self._execute(query, "project_managers", "select")
        return [ProjectManager.from_dict(row) for row in response.data]

    def get_pm(self, pm_id: str) -> Optional[ProjectManager]:
        query = self.client.table("project_managers").select("*").eq("id", pm_id)
        response = self._execute(query, "project_managers", "select")
        return ProjectManager.from_dict(response.data[0]) if response.data else None

    def add_pm(self, pm: ProjectManager) -> ProjectManager:
        """PM 등록"""
        response = self._execute(self.client.table("project_managers").insert(pm.to_dict()), "project_managers", "insert")
        return ProjectManager.from_dict(response.data[0]) if response.data else pm

    def update_pm(self, pm: ProjectManager) -> Optional[ProjectManager]:
        """PM 프로필 수정 (없으면 None)"""
        data = pm.to_dict()
        del data["id"]
        query = self.client.table("project_managers").update(data).eq("id", pm.id)
        response = self._execute(query, "project_managers", "update")
        return ProjectManager.from_dict(response.data[0]) if response.data else None

    def set_pm_availability(self, pm_id: str, is_available: bool) -> Optional[ProjectManager]:
        """PM 배정 가능 여부 변경"""
        query = self.client.table("project_managers").update({"is_available": is_available}).eq("id", pm_id)
        response = self._execute(query, "project_managers", "update")
        return ProjectManager.from_dict(response.data[0]) if response.data else None

    # ========== 협력업체 ==========

    def get_partners(self, active_only: bool = False) -> List[Partner]:
        """협력업체 목록 (분류순)"""
        query = self.client.table("partners").select("*")
        if active_only:
            query = query.eq("is_active", True)
        response = self._execute(query.order("category"), "partners", "select")
        return [Partner.from_dict(row) for row in response.data]

    def get_partner(self, partner_id: str) -> Optional[Partner]:
        query = self.client.table("partners").select("*").eq("id", partner_id)
        response = self._execute(query, "partners", "select")
        return Partner.from_dict(response.data[0]) if response.data else None

    def add_partner(self, partner: Partner) -> Partner:
        """협력업체 추가"""
        response = self._execute(self.client.table("partners").insert(partner.to_dict()), "partners", "insert")
        return Partner.from_dict(response.data[0]) if response.data else partner

    def update_partner(self, partner: Partner) -> Partner:
        """협력업체 수정"""
        data = partner.to_dict()
        del data["id"]
        query = self.client.table("partners").update(data).eq("id", partner.id)
        response = self._execute(query, "partners", "update")
        return Partner.from_dict(response.data[0]) if response.data else partner

    def delete_partner(self, partner_id: str) -> bool:
        """협력업체 삭제"""
        response = self._execute(self.client.table("partners").delete().eq("id", partner_id), "partners", "delete")
        return len(response.data) > 0

    def toggle_partner(self, partner_id: str) -> Optional[Partner]:
        """협력업체 활성/비활성 전환"""
        partner = self.get_partner(partner_id)
        if partner is None:
            return None
        query = self.client.table("partners").update({"is_active": not partner.is_active}).eq("id", partner_id)
        response = self._execute(query, "partners", "update")
        return Partner.from_dict(response.data[0]) if response.data else None

    # ========== 유틸리티 ==========

    def _is_empty(self, table: str) -> bool:
        response = self._execute(self.client.table(table).select("id").limit(1), table, "select")
        return not response.data

    def seed_sample_data(self) -> Dict[str, int]:
        """샘플 기준 데이터 추가 (비용 기준, PM, 협력업체)

        이미 데이터가 있는 테이블은 건너뛴다 (반복 실행 시 중복 방지).
        """
        counts = {"cost_standards": 0, "project_managers": 0, "partners": 0}

        if self._is_empty("cost_standards"):
            counts["cost_standards"] = self.add_cost_standards(sample_cost_standards())

        if self._is_empty("project_managers"):
            managers = sample_project_managers()
            self._execute(
                self.client.table("project_managers").insert([pm.to_dict() for pm in managers]),
                "project_managers",
                "insert",
            )
            counts["project_managers"] = len(managers)

        if self._is_empty("partners"):
            partners = sample_partners()
            self._execute(
                self.client.table("partners").insert([p.to_dict() for p in partners]),
                "partners",
                "insert",
            )
            counts["partners"] = len(partners)

        logger.info(
            f"샘플 데이터 추가: 기준 {counts['cost_standards']}건, "
            f"PM {counts['project_managers']}명, 협력업체 {counts['partners']}곳"
        )
        return counts
