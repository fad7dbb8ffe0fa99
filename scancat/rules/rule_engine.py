"""
规则引擎

校验类别配置，对文档词列表进行多类别匹配，并按优先级排序
"""

import dataclasses
import logging
import numbers
from enum import IntEnum
from typing import Any, Dict, List, Sequence

from ..core.exceptions import ConfigurationError
from ..core.models import Category
from ..naming.renamer import Renamer
from ..path_planner.template import is_valid_path
from .conditions import applies


class Priority(IntEnum):
    LOW = -1
    DEFAULT = 0
    HIGH = 1


def classify(words: Sequence[str], categories: Sequence[Category]) -> List[Category]:
    """
    对文档进行分类

    类别的所有条件都成立时才算匹配，结果保持输入顺序。

    Args:
        words: 文档中提取的词
        categories: 类别列表

    Returns:
        List[Category]: 匹配的类别
    """
    return [
        category
        for category in categories
        if all(applies(words, condition) for condition in category.conditions)
    ]


def rank(matches: Sequence[Category]) -> List[Category]:
    """
    按优先级从高到低排序（稳定排序）

    未设置优先级的类别视为 Priority.DEFAULT，返回填充了默认值的副本，
    不修改传入的类别。
    """
    resolved = [
        c if c.priority else dataclasses.replace(c, priority=int(Priority.DEFAULT))
        for c in matches
    ]
    return sorted(resolved, key=lambda c: c.priority, reverse=True)


class RuleEngine:
    """规则引擎 - 类别校验与匹配"""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.renamer = Renamer(config)

    def validate(self, categories: Sequence[Category]) -> None:
        """
        运行前校验全部类别，任一类别无效即抛出 ConfigurationError

        Args:
            categories: 类别列表
        """
        if not categories:
            raise ConfigurationError("未配置任何类别，运行终止")

        for category in categories:
            if not category.name:
                raise ConfigurationError("类别名称不能为空")

            if len(category.conditions) < 1:
                raise ConfigurationError(
                    f"类别 {category.name} 至少需要一个条件"
                )

            if not is_valid_path(category.path):
                raise ConfigurationError(
                    f"类别 {category.name} 的路径无效: '{category.path}'"
                )

            self.renamer.probe(category)

            priority = category.priority
            if priority is not None and (
                isinstance(priority, bool) or not isinstance(priority, numbers.Number)
            ):
                raise ConfigurationError(
                    f"类别 {category.name} 无效，优先级必须是数字"
                )

        self.logger.info(f"类别校验通过: {len(categories)}个类别")

    def match(self, words: Sequence[str], categories: Sequence[Category]) -> List[Category]:
        """分类并排序，第一个为主类别"""
        matches = classify(words, categories)
        if not matches:
            return []

        self.logger.info(f"匹配类别: {', '.join(c.name for c in matches)}")
        return rank(matches)

    def get_rules_summary(self, categories: Sequence[Category]) -> Dict[str, Any]:
        """获取规则摘要"""
        return {
            "total_categories": len(categories),
            "total_conditions": sum(len(c.conditions) for c in categories),
            "secondary_allowed": [c.name for c in categories if c.allow_secondary],
            "priorities": {c.name: c.priority or int(Priority.DEFAULT) for c in categories},
        }
