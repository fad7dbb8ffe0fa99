"""
条件判断

AND/OR 条件由字面词和正则表达式组成，对文档的词列表进行判断
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence, Tuple, Union

from ..core.exceptions import ConfigurationError


@dataclass(frozen=True)
class Literal:
    """字面词，忽略大小写精确匹配"""

    value: str


@dataclass(frozen=True)
class Pattern:
    """正则表达式，对以空格连接的整个词序列进行匹配"""

    regex: "re.Pattern"

    @classmethod
    def compile(cls, source: str, ignore_case: bool = False) -> "Pattern":
        try:
            return cls(re.compile(source, re.IGNORECASE if ignore_case else 0))
        except re.error as e:
            raise ConfigurationError(f"无效的正则表达式 '{source}': {e}") from e


Term = Union[Literal, Pattern]


class ConditionType(Enum):
    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class Condition:
    type: ConditionType
    terms: Tuple[Term, ...]

    def __post_init__(self):
        if not isinstance(self.type, ConditionType):
            try:
                object.__setattr__(self, "type", ConditionType(str(self.type).lower()))
            except ValueError:
                raise ConfigurationError(f"未知的条件类型: {self.type}") from None
        object.__setattr__(self, "terms", tuple(to_term(t) for t in self.terms))


def to_term(value: Union[str, "re.Pattern", Term]) -> Term:
    """将字符串或已编译正则转换为条件项"""
    if isinstance(value, (Literal, Pattern)):
        return value
    if isinstance(value, str):
        return Literal(value)
    if isinstance(value, re.Pattern):
        return Pattern(value)
    raise ConfigurationError(f"不支持的条件项类型: {type(value).__name__}")


def and_(*values: Union[str, "re.Pattern", Term]) -> Condition:
    """构建 AND 条件：所有项都必须匹配"""
    return Condition(ConditionType.AND, tuple(values))


def or_(*values: Union[str, "re.Pattern", Term]) -> Condition:
    """构建 OR 条件：任意一项匹配即可"""
    return Condition(ConditionType.OR, tuple(values))


def clean_words(words: Iterable[str]) -> List[str]:
    """小写并去除首尾空白，丢弃空词"""
    cleaned = (w.lower().strip() for w in words)
    return [w for w in cleaned if w]


def clean_terms(terms: Sequence[Term]) -> List[Term]:
    """按与词列表相同的方式规范化字面词，正则保持不变"""
    cleaned: List[Term] = []
    for term in terms:
        if isinstance(term, Literal):
            value = term.value.lower().strip()
            if value:
                cleaned.append(Literal(value))
        else:
            cleaned.append(term)
    return cleaned


def _term_matches(term: Term, word_set: frozenset, joined: str) -> bool:
    if isinstance(term, Literal):
        return term.value in word_set
    if isinstance(term, Pattern):
        return term.regex.search(joined) is not None
    raise ConfigurationError(f"不支持的条件项类型: {type(term).__name__}")


def applies(words: Sequence[str], condition: Condition) -> bool:
    """
    判断词列表是否满足条件

    Args:
        words: 文档中提取的词
        condition: AND/OR 条件

    Returns:
        bool: 条件是否成立
    """
    cleaned_words = clean_words(words)
    terms = clean_terms(condition.terms)
    word_set = frozenset(cleaned_words)
    joined = " ".join(cleaned_words)

    if condition.type is ConditionType.AND:
        return all(_term_matches(t, word_set, joined) for t in terms)
    if condition.type is ConditionType.OR:
        return any(_term_matches(t, word_set, joined) for t in terms)
    raise ConfigurationError(f"未知的条件类型: {condition.type}")
