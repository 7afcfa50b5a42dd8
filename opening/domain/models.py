"""
models.py - 도메인 모델

순수 파이썬 데이터 클래스. 저장소(JSON/Supabase) 행과의 변환은
to_dict / from_dict 로 처리한다.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid


def _parse_dt(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    # Supabase는 "Z" 접미사를 붙여 내려준다
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class CostUnit(Enum):
    """비용 기준 단위"""
    FLAT = "식"             # 일시불
    PER_AREA = "평당"       # 평당 단가
    PER_MONTH = "월"        # 월 단위

    @classmethod
    def from_label(cls, label: str) -> "CostUnit":
        """기준표 단위 문자열 → CostUnit (알 수 없는 단위는 일시불)"""
        aliases = {
            "평당": cls.PER_AREA,
            "per_area": cls.PER_AREA,
            "월": cls.PER_MONTH,
            "per_month": cls.PER_MONTH,
        }
        return aliases.get(label, cls.FLAT)


class StoreFloor(Enum):
    """매장 층수"""
    BASEMENT = "b1"     # 지하 1층
    GROUND = "1f"       # 1층
    UPPER = "2f"        # 2층 이상


class ProjectStatus(Enum):
    """창업 프로젝트 상태"""
    DRAFT = "DRAFT"
    PM_ASSIGNED = "PM_ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ChecklistStatus(Enum):
    """체크리스트 준비 상태"""
    DONE = "done"               # 이미 준비됨
    WORRY = "worry"             # 도움 필요
    UNCHECKED = "unchecked"     # 미확인


class MilestoneStatus(Enum):
    """마일스톤 상태"""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"


class SenderType(Enum):
    """메시지 발신자"""
    USER = "USER"
    PM = "PM"
    SYSTEM = "SYSTEM"


# ============================================================
# 비용 산출
# ============================================================

@dataclass(frozen=True)
class CostStandard:
    """비용 기준 (운영자가 관리하는 참조 데이터)"""
    business_category: str          # 업종 또는 "공통"
    location_district: str          # 구 단위 지역
    cost_type: str                  # 비용 항목 (보증금, 인테리어 등)
    cost_name: str                  # 세부 항목명
    unit: CostUnit
    min_price: float
    max_price: float
    avg_price: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CostStandard":
        return cls(
            business_category=data.get("business_category", ""),
            location_district=data.get("location_district", ""),
            cost_type=data.get("cost_type", ""),
            cost_name=data.get("cost_name", ""),
            unit=CostUnit.from_label(data.get("unit", "")),
            min_price=float(data.get("min_price") or 0),
            max_price=float(data.get("max_price") or 0),
            avg_price=float(data.get("avg_price") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "business_category": self.business_category,
            "location_district": self.location_district,
            "cost_type": self.cost_type,
            "cost_name": self.cost_name,
            "unit": self.unit.value,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "avg_price": self.avg_price,
        }


@dataclass(frozen=True)
class CostRange:
    """최소/최대/평균 금액 (원)"""
    min: int = 0
    max: int = 0
    avg: int = 0

    def __add__(self, other: "CostRange") -> "CostRange":
        return CostRange(self.min + other.min, self.max + other.max, self.avg + other.avg)

    def to_dict(self) -> Dict[str, int]:
        return {"min": self.min, "max": self.max, "avg": self.avg}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CostRange":
        data = data or {}
        return cls(int(data.get("min", 0)), int(data.get("max", 0)), int(data.get("avg", 0)))


@dataclass(frozen=True)
class CostEstimateLine:
    """견적 세부 항목"""
    name: str
    min: int
    max: int
    avg: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "min": self.min, "max": self.max, "avg": self.avg}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CostEstimateLine":
        return cls(
            name=data.get("name", ""),
            min=int(data.get("min", 0)),
            max=int(data.get("max", 0)),
            avg=int(data.get("avg", 0)),
        )


@dataclass(frozen=True)
class CostEstimateGroup:
    """비용 항목별 견적 묶음"""
    category: str
    items: List[CostEstimateLine] = field(default_factory=list)
    subtotal: CostRange = field(default_factory=CostRange)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CostEstimateGroup":
        return cls(
            category=data.get("category", ""),
            items=[CostEstimateLine.from_dict(i) for i in data.get("items", [])],
            subtotal=CostRange.from_dict(data.get("subtotal")),
        )


@dataclass(frozen=True)
class CostEstimate:
    """견적 결과

    available=False 이면 "견적 불가" 상태이며, 0원 견적과 구분된다.
    """
    groups: List[CostEstimateGroup] = field(default_factory=list)
    total: CostRange = field(default_factory=CostRange)
    available: bool = True
    reason: str = ""

    @classmethod
    def unavailable(cls, reason: str) -> "CostEstimate":
        return cls(groups=[], total=CostRange(), available=False, reason=reason)

    @property
    def grand_total(self) -> int:
        """프로젝트에 고정되는 총액 (평균 합계)"""
        return self.total.avg


# ============================================================
# 체크리스트 / 마일스톤
# ============================================================

@dataclass
class ChecklistItem:
    """창업 준비 체크리스트 항목"""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    title: str = ""
    category: str = ""
    status: ChecklistStatus = ChecklistStatus.UNCHECKED
    comment: Optional[str] = None
    description: str = ""
    estimated_cost: Optional[Dict[str, Any]] = None     # {"min", "max", "unit"}
    is_required: bool = False
    is_custom: bool = False                             # PM이 추가한 항목
    vendor_id: Optional[str] = None                     # PM이 배정한 협력업체

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "status": self.status.value,
            "comment": self.comment,
            "description": self.description,
            "estimated_cost": self.estimated_cost,
            "is_required": self.is_required,
            "is_custom": self.is_custom,
            "vendor_id": self.vendor_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChecklistItem":
        return cls(
            id=data.get("id", str(uuid.uuid4())),
            title=data.get("title", ""),
            category=data.get("category", ""),
            status=ChecklistStatus(data.get("status", "unchecked")),
            comment=data.get("comment"),
            description=data.get("description", ""),
            estimated_cost=data.get("estimated_cost"),
            is_required=data.get("is_required", False),
            is_custom=data.get("is_custom", False),
            vendor_id=data.get("vendor_id"),
        )


@dataclass
class Milestone:
    """프로젝트 마일스톤 (사업자등록 ~ 그랜드오픈)"""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    project_id: str = ""
    step_order: int = 0
    step_name: str = ""
    step_category: str = ""
    description: str = ""
    status: MilestoneStatus = MilestoneStatus.PENDING
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "step_order": self.step_order,
            "step_name": self.step_name,
            "step_category": self.step_category,
            "description": self.description,
            "status": self.status.value,
            "completed_at": _iso(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Milestone":
        return cls(
            id=data.get("id", str(uuid.uuid4())),
            project_id=data.get("project_id", ""),
            step_order=int(data.get("step_order", 0)),
            step_name=data.get("step_name", ""),
            step_category=data.get("step_category", ""),
            description=data.get("description", ""),
            status=MilestoneStatus(data.get("status", "PENDING")),
            completed_at=_parse_dt(data.get("completed_at")),
        )


# ============================================================
# 사람 / 협력업체
# ============================================================

@dataclass
class ProjectManager:
    """PM (프로젝트 매니저)"""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    phone: str = ""
    email: str = ""
    profile_image: str = ""
    introduction: str = ""
    specialties: List[str] = field(default_factory=list)
    rating: float = 0.0
    completed_projects: int = 0
    is_available: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "profile_image": self.profile_image,
            "introduction": self.introduction,
            "specialties": self.specialties,
            "rating": self.rating,
            "completed_projects": self.completed_projects,
            "is_available": self.is_available,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectManager":
        return cls(
            id=data.get("id", str(uuid.uuid4())),
            name=data.get("name", ""),
            phone=data.get("phone") or "",
            email=data.get("email") or "",
            profile_image=data.get("profile_image") or "",
            introduction=data.get("introduction") or "",
            specialties=data.get("specialties") or [],
            rating=float(data.get("rating") or 0),
            completed_projects=int(data.get("completed_projects") or 0),
            is_available=data.get("is_available", True),
        )


@dataclass
class Partner:
    """협력업체 (인테리어, 간판, 통신 등)"""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    category: str = ""
    phone: str = ""
    region: str = ""
    description: str = ""
    rating: float = 0.0
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "phone": self.phone,
            "region": self.region,
            "description": self.description,
            "rating": self.rating,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Partner":
        return cls(
            id=data.get("id", str(uuid.uuid4())),
            name=data.get("name", ""),
            category=data.get("category", ""),
            phone=data.get("phone") or "",
            region=data.get("region") or "",
            description=data.get("description") or "",
            rating=float(data.get("rating") or 0),
            is_active=data.get("is_active", True),
        )


# ============================================================
# 메시지
# ============================================================

@dataclass
class Message:
    """프로젝트 채팅 메시지 (추가 전용)"""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    project_id: str = ""
    sender_type: SenderType = SenderType.USER
    sender_id: Optional[str] = None
    message: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "sender_type": self.sender_type.value,
            "sender_id": self.sender_id,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            id=data.get("id", str(uuid.uuid4())),
            project_id=data.get("project_id", ""),
            sender_type=SenderType(data.get("sender_type", "USER")),
            sender_id=data.get("sender_id"),
            message=data.get("message", ""),
            created_at=_parse_dt(data.get("created_at")) or datetime.now(),
        )


# ============================================================
# 프로젝트
# ============================================================

@dataclass
class Project:
    """창업 프로젝트 (6→7 전환 시 생성)"""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    user_id: Optional[str] = None

    # 업종 / 위치 / 규모
    business_category: str = ""
    business_detail: str = ""
    location_city: str = "서울시"
    location_district: str = "강남구"
    location_dong: str = ""
    store_size: float = 0
    store_floor: StoreFloor = StoreFloor.GROUND

    # 예산 (원)
    budget_total: Optional[int] = None
    budget_own: Optional[int] = None
    budget_loan: Optional[int] = None

    # 견적 (생성 시 고정)
    estimated_costs: List[CostEstimateGroup] = field(default_factory=list)
    estimated_total: int = 0

    # 진행 상태
    current_step: int = 7
    pm_approved_step: int = 7
    status: ProjectStatus = ProjectStatus.IN_PROGRESS
    pm_id: Optional[str] = None
    pm_notes: str = ""
    checklist_data: List[ChecklistItem] = field(default_factory=list)

    # 낙관적 동시성 제어용 버전
    version: int = 1
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_cancelled(self) -> bool:
        return self.status == ProjectStatus.CANCELLED

    def find_checklist_item(self, item_id: str) -> Optional[ChecklistItem]:
        for item in self.checklist_data:
            if item.id == item_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "business_category": self.business_category,
            "business_detail": self.business_detail,
            "location_city": self.location_city,
            "location_district": self.location_district,
            "location_dong": self.location_dong,
            "store_size": self.store_size,
            "store_floor": self.store_floor.value,
            "budget_total": self.budget_total,
            "budget_own": self.budget_own,
            "budget_loan": self.budget_loan,
            "estimated_costs": [g.to_dict() for g in self.estimated_costs],
            "estimated_total": self.estimated_total,
            "current_step": self.current_step,
            "pm_approved_step": self.pm_approved_step,
            "status": self.status.value,
            "pm_id": self.pm_id,
            "pm_notes": self.pm_notes,
            "checklist_data": [item.to_dict() for item in self.checklist_data],
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=data.get("id", str(uuid.uuid4())),
            user_id=data.get("user_id"),
            business_category=data.get("business_category", ""),
            business_detail=data.get("business_detail") or "",
            location_city=data.get("location_city") or "서울시",
            location_district=data.get("location_district") or "강남구",
            location_dong=data.get("location_dong", ""),
            store_size=data.get("store_size", 0),
            store_floor=StoreFloor(data.get("store_floor") or "1f"),
            budget_total=data.get("budget_total"),
            budget_own=data.get("budget_own"),
            budget_loan=data.get("budget_loan"),
            estimated_costs=[CostEstimateGroup.from_dict(g) for g in data.get("estimated_costs") or []],
            estimated_total=int(data.get("estimated_total") or 0),
            current_step=int(data.get("current_step") or 7),
            pm_approved_step=int(data.get("pm_approved_step") or 0),
            status=ProjectStatus(data.get("status", "IN_PROGRESS")),
            pm_id=data.get("pm_id"),
            pm_notes=data.get("pm_notes") or "",
            checklist_data=[ChecklistItem.from_dict(i) for i in data.get("checklist_data") or []],
            version=int(data.get("version") or 1),
            created_at=_parse_dt(data.get("created_at")) or datetime.now(),
            updated_at=_parse_dt(data.get("updated_at")) or datetime.now(),
        )
