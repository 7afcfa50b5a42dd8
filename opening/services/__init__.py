"""서비스 모듈"""
from .assignment import (
    RandomPolicy,
    RoundRobinPolicy,
    LeastLoadedPolicy,
    PMAssignmentService,
    policy_from_name,
)
from .messaging import MessageFeed, MessageService
from .projects import ProjectService

__all__ = [
    # PM 배정
    "RandomPolicy",
    "RoundRobinPolicy",
    "LeastLoadedPolicy",
    "PMAssignmentService",
    "policy_from_name",
    # 채팅
    "MessageFeed",
    "MessageService",
    # 프로젝트
    "ProjectService",
]
