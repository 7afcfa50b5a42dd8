"""
checklist.py - 창업 준비 체크리스트 / 기본 마일스톤

강남구 기준 예상 비용 포함 (단위: 만원)
"""

from dataclasses import replace
from typing import Dict, List, Optional

from .models import ChecklistItem, ChecklistStatus, Milestone
from ..core.exceptions import ValidationError


# (id, 분류, 제목, 설명, 최소, 최대, 단위, 필수여부)
_STARTUP_CHECKLIST = [
    # 공사/정리
    ("demolition", "공사/정리", "철거 및 원상복구", "기존 시설 철거, 폐기물 처리", 50, 150, "평당 만원", True),
    ("interior", "공사/정리", "인테리어 시공", "업종별 맞춤 인테리어", 150, 400, "평당 만원", True),
    ("signage", "공사/정리", "간판/사인물", "외부 간판, 내부 사인물", 200, 800, "만원", True),
    ("cleaning", "공사/정리", "전문 청소", "준공/입주 딥클리닝", 30, 80, "만원", False),
    # 운영 준비
    ("network", "운영 준비", "통신 솔루션", "인터넷, CCTV, 포스기", 100, 300, "만원", True),
    ("insurance", "운영 준비", "필수 보험", "화재/배상책임 보험", 30, 100, "연 만원", True),
    ("beverage", "운영 준비", "음료/주류 도매", "주류사 계약, 음료 납품", 0, 0, "업체 연결", False),
    ("delivery", "운영 준비", "배달 대행", "배달권역 세팅, 배민/쿠팡 입점", 50, 150, "만원", False),
    # 입지/정보
    ("location", "입지/정보", "입지 탐색", "상권 분석, 매물 적합도 검토", 0, 0, "무료 컨설팅", True),
    ("permit", "입지/정보", "인허가/행정 가이드", "업종 허가, 영업 신고", 0, 0, "무료 가이드", True),
    # 오프닝 패키지
    ("furniture", "오프닝 패키지", "중고 가구/집기", "A급 검수 자재 + 설치", 500, 2000, "만원", False),
]

# (순서, 이름, 분류, 설명)
_DEFAULT_MILESTONES = [
    (1, "사업자등록", "인허가", "사업자등록증 발급"),
    (2, "영업신고", "인허가", "관할 구청 영업신고"),
    (3, "점포계약", "계약", "임대차 계약 체결"),
    (4, "인테리어", "시설", "인테리어 설계 및 시공"),
    (5, "장비/집기", "장비", "필수 장비 구매 및 설치"),
    (6, "간판/사인물", "시설", "간판 제작 및 설치"),
    (7, "POS/통신", "시스템", "POS, 인터넷, CCTV 설치"),
    (8, "시범운영", "오픈", "소프트 오픈"),
    (9, "그랜드오픈", "오픈", "정식 오픈"),
]


def default_checklist(statuses: Optional[Dict[str, ChecklistStatus]] = None) -> List[ChecklistItem]:
    """기본 체크리스트 생성

    Args:
        statuses: 온보딩에서 고객이 체크한 항목별 상태 (id → 상태)
    """
    statuses = statuses or {}
    items = []
    for item_id, category, title, description, cost_min, cost_max, unit, required in _STARTUP_CHECKLIST:
        items.append(ChecklistItem(
            id=item_id,
            title=title,
            category=category,
            description=description,
            status=statuses.get(item_id, ChecklistStatus.UNCHECKED),
            estimated_cost={"min": cost_min, "max": cost_max, "unit": unit},
            is_required=required,
        ))
    return items


def checklist_ids() -> List[str]:
    return [row[0] for row in _STARTUP_CHECKLIST]


def default_milestones(project_id: str) -> List[Milestone]:
    """프로젝트 기본 마일스톤 9개"""
    return [
        Milestone(
            project_id=project_id,
            step_order=order,
            step_name=name,
            step_category=category,
            description=description,
        )
        for order, name, category, description in _DEFAULT_MILESTONES
    ]


def items_with_status(items: List[ChecklistItem], status: ChecklistStatus) -> List[ChecklistItem]:
    return [item for item in items if item.status == status]


# ============================================================
# 체크리스트 수정 (새 리스트 반환)
# ============================================================

def set_item_status(
    items: List[ChecklistItem],
    item_id: str,
    status: ChecklistStatus,
    comment: Optional[str] = None,
) -> List[ChecklistItem]:
    """항목 상태/코멘트 변경"""
    _require(items, item_id)
    updated = []
    for item in items:
        if item.id == item_id:
            item = replace(item, status=status, comment=comment if comment is not None else item.comment)
        updated.append(item)
    return updated


def add_custom_item(
    items: List[ChecklistItem],
    title: str,
    category: str,
    comment: Optional[str] = None,
    estimated_cost: Optional[dict] = None,
) -> List[ChecklistItem]:
    """PM 커스텀 항목 추가"""
    if not title or not title.strip():
        raise ValidationError("체크리스트 항목 제목이 비어 있습니다.", field="title", value=title)
    item = ChecklistItem(
        title=title.strip(),
        category=category,
        comment=comment,
        estimated_cost=estimated_cost,
        is_custom=True,
    )
    return [*items, item]


def remove_custom_item(items: List[ChecklistItem], item_id: str) -> List[ChecklistItem]:
    """PM이 추가한 항목만 삭제 가능"""
    target = _require(items, item_id)
    if not target.is_custom:
        raise ValidationError("기본 체크리스트 항목은 삭제할 수 없습니다.", field="item_id", value=item_id)
    return [item for item in items if item.id != item_id]


def assign_item_vendor(items: List[ChecklistItem], item_id: str, vendor_id: Optional[str]) -> List[ChecklistItem]:
    """항목에 협력업체 배정 (None이면 해제)"""
    _require(items, item_id)
    return [replace(item, vendor_id=vendor_id) if item.id == item_id else item for item in items]


def _require(items: List[ChecklistItem], item_id: str) -> ChecklistItem:
    for item in items:
        if item.id == item_id:
            return item
    raise ValidationError("체크리스트 항목을 찾을 수 없습니다.", field="item_id", value=item_id)
