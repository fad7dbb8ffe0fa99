"""
命名规则

类别可以指定静态名称模板或计算名称的函数，结果必须以文档扩展名结尾
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..core.exceptions import ConfigurationError, DocumentProcessingError
from ..core.models import Category, Document
from ..path_planner.template import populate

INVALID_NAME_CHARS = re.compile(r'[\\/:*?"<>|]')
PLACEHOLDER_NAME = "TEMP"


@dataclass(frozen=True)
class StaticName:
    """名称模板，支持 `$变量`"""

    template: str


@dataclass(frozen=True)
class ComputedName:
    """根据文档计算名称的函数"""

    func: Callable[[Document], str]


RenameRule = Union[StaticName, ComputedName]


def to_rename_rule(value: Any) -> Optional[RenameRule]:
    """将字符串或函数包装为命名规则"""
    if value is None or isinstance(value, (StaticName, ComputedName)):
        return value
    if isinstance(value, str):
        return StaticName(value)
    if callable(value):
        return ComputedName(value)
    raise ConfigurationError(f"不支持的重命名规则类型: {type(value).__name__}")


def is_valid_file_name(file_name: str, extension: str = ".pdf") -> bool:
    """文件名是否以指定扩展名结尾（忽略大小写）"""
    if not file_name or not isinstance(file_name, str):
        return False
    return file_name.lower().endswith(extension.lower())


def sanitize_file_name(file_name: str, extension: str = ".pdf") -> str:
    """替换非法字符，保证文件名以扩展名结尾"""
    default = f"untitled{extension}"
    if not file_name or not isinstance(file_name, str):
        return default

    base_name = file_name
    if is_valid_file_name(base_name, extension):
        base_name = base_name[: len(base_name) - len(extension)]

    base_name = INVALID_NAME_CHARS.sub("_", base_name)
    base_name = re.sub(r"_+", "_", base_name)
    base_name = base_name.strip().strip("_")

    if not base_name:
        return default
    return f"{base_name}{extension}"


class Renamer:
    """命名生成器 - 计算文档在目标位置的最终名称"""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.logger = logging.getLogger(__name__)

        file_cfg = config.get("file", {})
        self.extension = file_cfg.get("document_extension", ".pdf")
        self.sanitize = file_cfg.get("sanitize_names", False)
        self.metadata: Mapping[str, Any] = config.get("template", {}).get("metadata", {}) or {}

    def probe(self, category: Category) -> None:
        """用占位文档试算一次重命名规则，结果不符合扩展名时拒绝配置"""
        rule = category.rename
        if rule is None:
            return

        if isinstance(rule, StaticName):
            name = rule.template
        else:
            placeholder = Document(id="", name=PLACEHOLDER_NAME, created_at=datetime.now())
            try:
                name = rule.func(placeholder)
            except Exception as e:
                raise ConfigurationError(
                    f"类别 {category.name} 的重命名函数执行失败: {e}"
                ) from e

        if not isinstance(name, str) or not is_valid_file_name(name, self.extension):
            raise ConfigurationError(
                f"类别 {category.name} 无效，重命名结果必须以 '{self.extension}' 结尾"
            )

    def resolve_name(
        self, document: Document, category: Category, date: datetime
    ) -> str:
        """
        计算文档名称

        Args:
            document: 文档
            category: 匹配的类别
            date: 模板参考日期

        Returns:
            str: 最终文件名

        Raises:
            DocumentProcessingError: 名称不以扩展名结尾
        """
        rule = category.rename
        if rule is None:
            name = document.name
        elif isinstance(rule, StaticName):
            name = populate(rule.template, date, self.metadata)
        else:
            name = rule.func(document)

        if self.sanitize and isinstance(name, str):
            name = sanitize_file_name(name, self.extension)

        if not is_valid_file_name(name, self.extension):
            raise DocumentProcessingError(
                f"文件名必须以 '{self.extension}' 结尾才能分类: {name}",
                document_name=document.name,
            )

        self.logger.debug(f"文件名: {document.name} -> {name}")
        return name
