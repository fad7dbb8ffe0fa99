"""
规则引擎模块

负责条件判断、类别匹配和优先级排序
"""

from .conditions import Condition, ConditionType, Literal, Pattern, and_, applies, or_
from .rule_engine import Priority, RuleEngine, classify, rank

__all__ = [
    "Condition",
    "ConditionType",
    "Literal",
    "Pattern",
    "and_",
    "or_",
    "applies",
    "Priority",
    "RuleEngine",
    "classify",
    "rank",
]
