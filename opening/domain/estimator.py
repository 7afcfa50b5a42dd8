"""
estimator.py - 창업 비용 산출기

외부 의존성 없는 순수 파이썬 코드.
이미 조회된 비용 기준표만으로 계산하므로 같은 입력이면 항상 같은 결과를 낸다.

계산 순서:
1. 업종(또는 "공통") + 구 단위 지역이 일치하는 기준 선택
2. 평당 단가는 매장 평수를 곱함
3. 보증금/권리금/월세는 층수 할인율 적용
4. 원 단위 반올림 후 비용 항목별로 묶어 소계 합산
"""

import math
from typing import Dict, Iterable, List, Optional

from .models import (
    CostEstimate,
    CostEstimateGroup,
    CostEstimateLine,
    CostRange,
    CostStandard,
    CostUnit,
    StoreFloor,
)
from ..core.config import EstimatorConfig, DEFAULT_CONFIG
from ..core.exceptions import ValidationError


def round_won(value: float) -> int:
    """원 단위 반올림 (0.5는 올림)"""
    return int(math.floor(value + 0.5))


class CostEstimator:
    """창업 비용 산출기"""

    def __init__(self, config: Optional[EstimatorConfig] = None):
        """
        Args:
            config: 산출 설정. None이면 기본값 사용.
        """
        self.config = config or DEFAULT_CONFIG

    def select_standards(
        self,
        standards: Iterable[CostStandard],
        business_category: str,
        location_district: str,
    ) -> List[CostStandard]:
        """요청 업종 또는 공통 기준 중 지역이 일치하는 것만 선택"""
        return [
            std for std in standards
            if std.business_category in (business_category, self.config.common_category)
            and std.location_district == location_district
        ]

    def multiplier(self, standard: CostStandard, store_size: float, store_floor: StoreFloor) -> float:
        """기준 단가에 곱할 배수"""
        value = store_size if standard.unit == CostUnit.PER_AREA else 1
        if self.config.is_floor_sensitive(standard.cost_type):
            value *= self.config.floor_discount(store_floor.value)
        return value

    def estimate(
        self,
        standards: Iterable[CostStandard],
        business_category: str,
        location_district: str,
        store_size: float,
        store_floor: StoreFloor,
    ) -> CostEstimate:
        """비용 산출 실행

        Args:
            standards: 조회된 비용 기준 (다른 업종/지역 행이 섞여 있어도 됨)
            business_category: 비용 기준표 업종명
            location_district: 구 단위 지역
            store_size: 매장 평수 (0보다 커야 함)
            store_floor: 층수

        Returns:
            CostEstimate: 일치하는 기준이 없으면 available=False
        """
        if store_size is None or store_size <= 0:
            raise ValidationError("매장 평수는 0보다 커야 합니다.", field="store_size", value=store_size)

        matched = self.select_standards(standards, business_category, location_district)
        if not matched:
            return CostEstimate.unavailable(
                f"{location_district} {business_category} 비용 기준이 없습니다."
            )

        # 비용 항목별 묶음 (처음 나온 순서 유지)
        lines: Dict[str, List[CostEstimateLine]] = {}
        for std in matched:
            m = self.multiplier(std, store_size, store_floor)
            line = CostEstimateLine(
                name=std.cost_name,
                min=round_won(std.min_price * m),
                max=round_won(std.max_price * m),
                avg=round_won(std.avg_price * m),
            )
            lines.setdefault(std.cost_type, []).append(line)

        groups = []
        total = CostRange()
        for cost_type, items in lines.items():
            subtotal = CostRange(
                min=sum(i.min for i in items),
                max=sum(i.max for i in items),
                avg=sum(i.avg for i in items),
            )
            groups.append(CostEstimateGroup(category=cost_type, items=items, subtotal=subtotal))
            total = total + subtotal

        return CostEstimate(groups=groups, total=total, available=True)


def format_price(price: int) -> str:
    """금액 표시 (억/천만/만 단위)"""
    if price >= 100_000_000:
        return f"{price / 100_000_000:.1f}억"
    elif price >= 10_000_000:
        return f"{round_won(price / 10_000_000)}천만"
    elif price >= 10_000:
        return f"{round_won(price / 10_000)}만"
    return f"{price:,}"
