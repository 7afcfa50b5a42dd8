"""local.py 테스트"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from opening.core.exceptions import ProjectNotFoundError, StaleProjectError
from opening.domain.models import Message, Milestone, Partner, Project, ProjectManager, ProjectStatus
from opening.repository.local import LocalRepository


class TestLocalRepository:
    """LocalRepository 테스트"""

    def test_files_created(self, tmp_path):
        repo = LocalRepository(data_dir=str(tmp_path))
        assert (tmp_path / "startup_projects.json").exists()
        assert (tmp_path / "cost_standards.json").exists()

    def test_corrupt_file_reads_empty(self, tmp_path):
        repo = LocalRepository(data_dir=str(tmp_path))
        (tmp_path / "startup_projects.json").write_text("{broken", encoding="utf-8")

        assert repo.list_projects() == []

    def test_cost_standards_filter(self, repository, cafe_standards):
        repository.add_cost_standards(cafe_standards)

        assert len(repository.get_cost_standards("카페", "강남구")) == 2
        # 공통 기준만 해당
        assert len(repository.get_cost_standards("치킨", "강남구")) == 1
        assert repository.get_cost_standards("카페", "서초구") == []

    def test_project_round_trip(self, repository):
        project = repository.insert_project(Project(business_category="cafe", location_dong="역삼동", store_size=15))

        loaded = repository.get_project(project.id)

        assert loaded.location_dong == "역삼동"
        assert loaded.version == 1
        assert repository.get_project("missing") is None

    def test_update_bumps_version(self, repository):
        project = repository.insert_project(Project())
        project.current_step = 8

        saved = repository.update_project(project, expected_version=1)

        assert saved.version == 2
        assert repository.get_project(project.id).current_step == 8

    def test_stale_update_rejected(self, repository):
        project = repository.insert_project(Project())
        repository.update_project(repository.get_project(project.id), expected_version=1)

        stale = repository.get_project(project.id)
        stale.current_step = 10
        with pytest.raises(StaleProjectError):
            repository.update_project(stale, expected_version=1)

        assert repository.get_project(project.id).current_step == 7

    def test_update_missing_project(self, repository):
        with pytest.raises(ProjectNotFoundError):
            repository.update_project(Project(id="ghost"), expected_version=1)

    def test_count_active_projects_by_pm(self, repository):
        repository.insert_project(Project(pm_id="a"))
        repository.insert_project(Project(pm_id="a"))
        repository.insert_project(Project(pm_id="b", status=ProjectStatus.CANCELLED))

        assert repository.count_active_projects_by_pm() == {"a": 2}

    def test_message_subscription(self, repository):
        received = []
        unsubscribe = repository.subscribe_messages("p1", received.append)

        repository.add_message(Message(project_id="p1", message="안녕"))
        repository.add_message(Message(project_id="p2", message="다른 방"))
        unsubscribe()
        repository.add_message(Message(project_id="p1", message="해제 후"))

        assert [m.message for m in received] == ["안녕"]
        assert len(repository.get_messages("p1")) == 2

    def test_partner_crud(self, repository):
        """협력업체 추가/수정/토글/삭제"""
        signage = repository.add_partner(Partner(name="빛나는간판", category="간판"))
        interior = repository.add_partner(Partner(name="강남인테리어", category="인테리어"))

        assert [p.category for p in repository.get_partners()] == ["간판", "인테리어"]

        signage.phone = "02-555-0202"
        repository.update_partner(signage)
        assert repository.get_partner(signage.id).phone == "02-555-0202"

        toggled = repository.toggle_partner(interior.id)
        assert toggled.is_active is False
        assert [p.id for p in repository.get_partners(active_only=True)] == [signage.id]

        assert repository.delete_partner(signage.id) is True
        assert repository.delete_partner(signage.id) is False
        assert repository.toggle_partner("missing") is None

    def test_seed_sample_data(self, repository):
        counts = repository.seed_sample_data()

        assert counts["project_managers"] == len(repository.get_available_pms())
        assert repository.get_cost_standards("카페", "강남구")

    def test_seed_twice_no_duplicates(self, repository):
        """두 번째 실행은 기존 데이터를 두고 건너뜀"""
        first = repository.seed_sample_data()
        standards = repository.get_cost_standards("카페", "강남구")

        second = repository.seed_sample_data()

        assert second == {"cost_standards": 0, "project_managers": 0, "partners": 0}
        assert len(repository.get_cost_standards("카페", "강남구")) == len(standards)
        assert len(repository.get_available_pms()) == first["project_managers"]
        assert len(repository.get_partners()) == first["partners"]

    def test_delete_project_cascades(self, repository):
        """프로젝트 삭제 시 마일스톤/메시지도 삭제"""
        keep = repository.insert_project(Project(id="keep"))
        gone = repository.insert_project(Project(id="gone"))
        repository.add_milestones([Milestone(project_id=gone.id, step_order=1), Milestone(project_id=keep.id, step_order=1)])
        repository.add_message(Message(project_id=gone.id, message="안녕"))

        assert repository.delete_project(gone.id) is True
        assert repository.delete_project(gone.id) is False

        assert [p.id for p in repository.list_projects()] == ["keep"]
        assert repository.get_milestones(gone.id) == []
        assert repository.get_messages(gone.id) == []
        assert len(repository.get_milestones(keep.id)) == 1

    def test_pm_availability(self, repository):
        repository.add_pm(ProjectManager(id="pm-a", name="김오픈"))

        updated = repository.set_pm_availability("pm-a", False)

        assert updated.is_available is False
        assert repository.get_available_pms() == []
        assert repository.get_pm("pm-a").is_available is False
        assert repository.set_pm_availability("missing", True) is None
        assert repository.update_pm(ProjectManager(id="missing")) is None

    def test_json_is_utf8(self, repository):
        repository.add_partner(Partner(name="강남인테리어"))

        raw = repository.partners_file.read_text(encoding="utf-8")
        assert "강남인테리어" in raw
        assert json.loads(raw)[0]["name"] == "강남인테리어"

    def test_clear_all(self, repository):
        repository.seed_sample_data()
        repository.clear_all()
        assert repository.get_available_pms() == []
