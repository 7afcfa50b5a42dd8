"""공용 테스트 픽스처"""

import random
import sys
from pathlib import Path

import pytest

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from opening.domain.models import CostStandard, CostUnit, ProjectManager
from opening.repository.local import LocalRepository
from opening.notifications.events import EventEmitter
from opening.services.assignment import PMAssignmentService, RandomPolicy
from opening.services.messaging import MessageService
from opening.services.projects import ProjectService


@pytest.fixture
def repository(tmp_path):
    """임시 디렉토리 로컬 저장소"""
    return LocalRepository(data_dir=str(tmp_path / "data"))


@pytest.fixture
def cafe_standards():
    """카페 강남구 기준 (보증금 평당 300~800, 인테리어 평당 150~400)"""
    return [
        CostStandard("공통", "강남구", "보증금", "점포 보증금", CostUnit.PER_AREA, 300, 800, 550),
        CostStandard("카페", "강남구", "인테리어", "카페 인테리어", CostUnit.PER_AREA, 150, 400, 275),
    ]


@pytest.fixture
def seeded_repository(repository, cafe_standards):
    """기준 데이터 + PM 2명"""
    repository.add_cost_standards(cafe_standards)
    repository.add_pm(ProjectManager(id="pm-a", name="김오픈", rating=4.9))
    repository.add_pm(ProjectManager(id="pm-b", name="이창업", rating=4.5))
    return repository


@pytest.fixture
def emitter():
    return EventEmitter()


@pytest.fixture
def service(seeded_repository, emitter):
    """결정적 PM 배정을 쓰는 프로젝트 서비스"""
    assigner = PMAssignmentService(seeded_repository, RandomPolicy(random.Random(42)), emitter)
    messages = MessageService(seeded_repository, emitter=emitter, retry_delay=0)
    return ProjectService(seeded_repository, assigner=assigner, messages=messages, emitter=emitter)
