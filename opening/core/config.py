"""
config.py - 견적/여정 설정

비용 산출과 창업 여정에서 쓰는 기준값을 중앙 관리
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


# 업종 ID(위저드) → 비용 기준표 업종명
BUSINESS_CATEGORIES: Dict[str, str] = {
    "cafe": "카페",
    "korean": "한식",
    "chicken": "치킨",
    "pub": "주점",
    "retail": "소매",
    "beauty": "미용",
    "fitness": "헬스",
    "education": "교육",
}

# 업종 ID → 화면 표시명
BUSINESS_CATEGORY_LABELS: Dict[str, str] = {
    "cafe": "카페/디저트",
    "korean": "한식",
    "chicken": "치킨/분식",
    "pub": "주점/바",
    "retail": "소매/편의점",
    "beauty": "미용/뷰티",
    "fitness": "헬스/운동",
    "education": "교육/학원",
}

# 서비스 지역 (강남구)
GANGNAM_DONGS: Tuple[str, ...] = (
    "역삼동", "논현동", "신사동", "청담동", "삼성동",
    "대치동", "압구정동", "도곡동", "개포동", "일원동",
)


@dataclass
class EstimatorConfig:
    """비용 산출 설정"""
    # 모든 업종에 공통 적용되는 기준 행의 업종값
    common_category: str = "공통"

    # 서비스 지역
    default_city: str = "서울시"
    default_district: str = "강남구"

    # 층수 할인율 (지하 / 1층 / 2층 이상)
    floor_discounts: Dict[str, float] = field(default_factory=lambda: {
        "b1": 0.7,
        "1f": 1.0,
        "2f": 0.8,
    })

    # 층수 영향을 받는 비용 항목 (보증금, 권리금, 월세)
    floor_sensitive_cost_types: Tuple[str, ...] = (
        "보증금", "권리금", "월세",
        "deposit", "key_money", "monthly_rent", "rent",
    )

    def floor_discount(self, floor_id: str) -> float:
        """층수 할인율 (알 수 없는 층은 1.0)"""
        return self.floor_discounts.get(floor_id, 1.0)

    def is_floor_sensitive(self, cost_type: str) -> bool:
        """층수 영향 항목 여부 (대소문자, 공백/하이픈 표기 차이 무시)"""
        normalized = cost_type.strip().lower().replace(" ", "_").replace("-", "_")
        return normalized in self.floor_sensitive_cost_types


# 기본 설정 인스턴스
DEFAULT_CONFIG = EstimatorConfig()


def resolve_category(category_id: str) -> str:
    """위저드 업종 ID를 비용 기준표 업종명으로 변환

    매핑에 없는 값은 이미 업종명이라고 보고 그대로 반환한다.
    """
    return BUSINESS_CATEGORIES.get(category_id, category_id)


def category_label(category_id: str) -> str:
    """업종 표시명"""
    return BUSINESS_CATEGORY_LABELS.get(category_id, category_id)
