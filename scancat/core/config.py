"""
配置管理模块

负责加载、验证和管理系统配置及类别定义
"""

import importlib
import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
import logging

from .exceptions import ConfigurationError
from .models import Category
from ..naming.renamer import ComputedName, StaticName
from ..rules.conditions import Condition, Literal, Pattern, Term


@dataclass
class SystemConfig:
    """系统配置"""

    log_level: str = "INFO"
    log_file: str = ".scancat/scancat.log"
    dry_run: bool = False
    debug: bool = False


@dataclass
class FileConfig:
    """文件处理配置"""

    source_directories: List[str] = field(default_factory=list)
    target_directory: str = "分类"
    document_extension: str = ".pdf"
    date_source: str = "created"  # created, filename
    sanitize_names: bool = False
    recursive: bool = False


@dataclass
class TemplateConfig:
    """路径模板配置"""

    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class NotificationConfig:
    """通知配置"""

    recipient: str = ""
    subject: str = "scancat 分类报告"


DEFAULT_CATEGORIES = [
    {
        "name": "发票",
        "conditions": [{"or": ["invoice", "rechnung", "发票"]}],
        "path": "Invoices/$y/$m",
        "rename": "Invoice $y-$m-$d.pdf",
    },
    {
        "name": "合同",
        "conditions": [
            {"and": ["contract"]},
            {"or": ["signed", {"pattern": "effective (date|from)"}]},
        ],
        "path": "Contracts/$y",
        "priority": 1,
        "shortcuts": ["Archive/$y/Contracts"],
        "allow_secondary": True,
    },
]


def parse_term(raw: Any) -> Term:
    """解析条件项：字符串为字面词，{pattern: ...} 为正则"""
    if isinstance(raw, str):
        return Literal(raw)
    if isinstance(raw, dict) and "pattern" in raw:
        return Pattern.compile(str(raw["pattern"]), bool(raw.get("ignore_case", False)))
    raise ConfigurationError(f"无法解析条件项: {raw!r}")


def parse_condition(raw: Any) -> Condition:
    """解析条件：{and: [...]} 或 {or: [...]}"""
    if not isinstance(raw, dict) or len(raw) != 1:
        raise ConfigurationError(f"条件格式错误，应为 {{and: [...]}} 或 {{or: [...]}}: {raw!r}")

    kind, values = next(iter(raw.items()))
    if isinstance(values, (str, dict)):
        values = [values]
    if not isinstance(values, list):
        raise ConfigurationError(f"条件项必须是列表: {raw!r}")

    return Condition(kind, tuple(parse_term(v) for v in values))


def resolve_callable(dotted: str):
    """解析 'module:function' 形式的重命名函数"""
    module_name, _, attr = dotted.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"重命名函数格式应为 'module:function': {dotted}")
    try:
        module = importlib.import_module(module_name)
        func = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"无法加载重命名函数 {dotted}: {e}") from e
    if not callable(func):
        raise ConfigurationError(f"重命名函数不可调用: {dotted}")
    return func


def parse_category(raw: Dict[str, Any], index: int = 0) -> Category:
    """将配置中的类别记录解析为 Category"""
    if not isinstance(raw, dict):
        raise ConfigurationError(f"类别 {index} 格式错误: {raw!r}")

    name = raw.get("name")
    if not name:
        raise ConfigurationError(f"类别 {index} 缺少名称")

    if raw.get("rename") is not None and raw.get("rename_callable") is not None:
        raise ConfigurationError(f"类别 {name} 不能同时设置 rename 和 rename_callable")

    rename = None
    if raw.get("rename") is not None:
        rename = StaticName(str(raw["rename"]))
    elif raw.get("rename_callable") is not None:
        rename = ComputedName(resolve_callable(str(raw["rename_callable"])))

    shortcuts = raw.get("shortcuts") or []
    if isinstance(shortcuts, str):
        shortcuts = [shortcuts]

    return Category(
        name=str(name),
        conditions=tuple(parse_condition(c) for c in raw.get("conditions") or []),
        path=str(raw.get("path", "")),
        priority=raw.get("priority"),
        shortcuts=tuple(str(s) for s in shortcuts),
        rename=rename,
        allow_secondary=bool(raw.get("allow_secondary", False)),
    )


def load_categories(raw_categories: Optional[List[Dict[str, Any]]]) -> List[Category]:
    """解析类别列表"""
    return [parse_category(raw, i) for i, raw in enumerate(raw_categories or [])]


class Config:
    """配置管理器"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config_file()
        self.logger = logging.getLogger(__name__)

        # 默认配置
        self.system = SystemConfig()
        self.file = FileConfig()
        self.template = TemplateConfig()
        self.notification = NotificationConfig()
        self.categories_data: List[Dict[str, Any]] = []

        # 加载配置
        if self.config_path and os.path.exists(self.config_path):
            self.load_config()
        else:
            self.create_default_config()

    def _find_config_file(self) -> str:
        """查找配置文件"""
        possible_paths = [
            "config/scancat.yaml",
            "scancat.yaml",
            ".scancat/config.yaml",
            os.path.expanduser("~/.scancat/config.yaml"),
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        return "config/scancat.yaml"

    def load_config(self) -> None:
        """加载配置文件"""
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)

            if not config_data:
                self.logger.warning("配置文件为空，使用默认配置")
                return

            # 加载系统配置
            if "system" in config_data:
                system_data = config_data["system"] or {}
                self.system.log_level = system_data.get("log_level", self.system.log_level)
                self.system.log_file = system_data.get("log_file", self.system.log_file)
                self.system.dry_run = system_data.get("dry_run", self.system.dry_run)
                self.system.debug = system_data.get("debug", self.system.debug)

            # 加载文件配置
            if "file" in config_data:
                file_data = config_data["file"] or {}
                self.file.source_directories = file_data.get(
                    "source_directories", self.file.source_directories
                )
                self.file.target_directory = file_data.get(
                    "target_directory", self.file.target_directory
                )
                self.file.document_extension = file_data.get(
                    "document_extension", self.file.document_extension
                )
                self.file.date_source = file_data.get("date_source", self.file.date_source)
                self.file.sanitize_names = file_data.get(
                    "sanitize_names", self.file.sanitize_names
                )
                self.file.recursive = file_data.get("recursive", self.file.recursive)

            # 加载模板变量
            if "template" in config_data:
                template_data = config_data["template"] or {}
                self.template.metadata = template_data.get("metadata") or {}

            # 加载通知配置
            if "notification" in config_data:
                notification_data = config_data["notification"] or {}
                self.notification.recipient = notification_data.get(
                    "recipient", self.notification.recipient
                )
                self.notification.subject = notification_data.get(
                    "subject", self.notification.subject
                )

            # 类别在运行前单独解析和校验
            self.categories_data = config_data.get("categories") or []

            self.logger.info(f"配置加载成功: {self.config_path}")

        except Exception as e:
            self.logger.error(f"配置加载失败: {e}")
            self.logger.info("使用默认配置")

    def get_categories(self) -> List[Category]:
        """解析配置中的类别，格式错误时抛出 ConfigurationError"""
        return load_categories(self.categories_data)

    def create_default_config(self) -> None:
        """创建默认配置文件"""
        self.categories_data = [dict(c) for c in DEFAULT_CATEGORIES]
        default_config = self.get_config_dict()

        try:
            # 确保目录存在
            config_dir = os.path.dirname(self.config_path)
            if config_dir:
                os.makedirs(config_dir, exist_ok=True)

            with open(self.config_path, "w", encoding="utf-8") as f:
                yaml.dump(
                    default_config,
                    f,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    indent=2,
                )

            self.logger.info(f"默认配置文件已创建: {self.config_path}")

        except Exception as e:
            self.logger.error(f"创建默认配置文件失败: {e}")

    def get_config_dict(self) -> Dict[str, Any]:
        """获取配置字典"""
        return {
            "system": dict(self.system.__dict__),
            "file": dict(self.file.__dict__),
            "template": dict(self.template.__dict__),
            "notification": dict(self.notification.__dict__),
            "categories": self.categories_data,
        }

    def save(self) -> None:
        """保存配置到文件"""
        try:
            config_data = self.get_config_dict()
            Path(self.config_path).parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                yaml.dump(
                    config_data,
                    f,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    indent=2,
                )
            self.logger.info(f"配置已保存: {self.config_path}")
        except Exception as e:
            self.logger.error(f"配置保存失败: {e}")
