"""오프닝 - 강남구 창업 여정 코어"""

__version__ = "1.0.0"
