"""
sample_data.py - 개발/데모용 기준 데이터

강남구 비용 기준, PM, 협력업체 샘플
"""

from typing import List

from ..domain.models import CostStandard, CostUnit, Partner, ProjectManager


DISTRICT = "강남구"


def _std(category, cost_type, cost_name, unit, low, high, avg) -> CostStandard:
    return CostStandard(
        business_category=category,
        location_district=DISTRICT,
        cost_type=cost_type,
        cost_name=cost_name,
        unit=unit,
        min_price=low,
        max_price=high,
        avg_price=avg,
    )


def sample_cost_standards() -> List[CostStandard]:
    """강남구 비용 기준 (원)"""
    return [
        # 공통 (업종 무관)
        _std("공통", "보증금", "점포 보증금", CostUnit.PER_AREA, 3_000_000, 8_000_000, 5_500_000),
        _std("공통", "권리금", "바닥 권리금", CostUnit.FLAT, 20_000_000, 80_000_000, 45_000_000),
        _std("공통", "월세", "월 임대료", CostUnit.PER_MONTH, 3_000_000, 9_000_000, 5_500_000),
        _std("공통", "간판", "외부 간판", CostUnit.FLAT, 2_000_000, 8_000_000, 4_000_000),
        _std("공통", "인허가", "사업자/영업신고 대행", CostUnit.FLAT, 300_000, 1_000_000, 500_000),
        # 카페
        _std("카페", "인테리어", "카페 인테리어", CostUnit.PER_AREA, 1_500_000, 4_000_000, 2_750_000),
        _std("카페", "장비", "커피머신/그라인더", CostUnit.FLAT, 10_000_000, 30_000_000, 18_000_000),
        _std("카페", "장비", "제빙기/냉장고", CostUnit.FLAT, 3_000_000, 8_000_000, 5_000_000),
        # 한식
        _std("한식", "인테리어", "한식당 인테리어", CostUnit.PER_AREA, 1_800_000, 4_500_000, 3_000_000),
        _std("한식", "장비", "주방 설비", CostUnit.FLAT, 15_000_000, 40_000_000, 25_000_000),
        # 치킨
        _std("치킨", "인테리어", "치킨집 인테리어", CostUnit.PER_AREA, 1_200_000, 3_000_000, 2_000_000),
        _std("치킨", "장비", "튀김기/후드", CostUnit.FLAT, 8_000_000, 20_000_000, 12_000_000),
        # 주점
        _std("주점", "인테리어", "주점 인테리어", CostUnit.PER_AREA, 2_000_000, 5_000_000, 3_200_000),
        _std("주점", "장비", "주류 냉장/바 설비", CostUnit.FLAT, 6_000_000, 18_000_000, 10_000_000),
    ]


def sample_project_managers() -> List[ProjectManager]:
    """샘플 PM"""
    return [
        ProjectManager(
            name="김오픈",
            phone="010-1234-5678",
            email="kim@opening.kr",
            introduction="카페/디저트 창업 120건 진행",
            specialties=["카페", "디저트"],
            rating=4.9,
            completed_projects=120,
        ),
        ProjectManager(
            name="이창업",
            phone="010-2345-6789",
            email="lee@opening.kr",
            introduction="외식업 인테리어/주방 설비 전문",
            specialties=["한식", "치킨", "주점"],
            rating=4.8,
            completed_projects=85,
        ),
        ProjectManager(
            name="박강남",
            phone="010-3456-7890",
            email="park@opening.kr",
            introduction="강남 상권 입지 분석 전문",
            specialties=["소매", "미용"],
            rating=4.7,
            completed_projects=64,
        ),
    ]


def sample_partners() -> List[Partner]:
    """샘플 협력업체"""
    return [
        Partner(name="강남인테리어", category="인테리어", phone="02-555-0101", region=DISTRICT,
                description="카페/외식 인테리어 전문", rating=4.8),
        Partner(name="빛나는간판", category="간판", phone="02-555-0202", region=DISTRICT,
                description="LED 간판 제작/설치", rating=4.6),
        Partner(name="오픈텔레콤", category="통신", phone="02-555-0303", region=DISTRICT,
                description="인터넷, CCTV, POS 일괄 설치", rating=4.5),
        Partner(name="깨끗한청소", category="청소", phone="02-555-0404", region=DISTRICT,
                description="준공 청소", rating=4.4),
        Partner(name="든든보험", category="보험", phone="02-555-0505", region=DISTRICT,
                description="화재/배상책임 보험", rating=4.3),
    ]
