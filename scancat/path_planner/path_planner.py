import logging
from datetime import datetime
from typing import Any, Dict, Mapping

from ..core.models import AssignmentRole, Category, Document, ResolvedAssignment
from ..naming.renamer import Renamer
from .template import extract_date_from_file_name, populate


class PathPlanner:
    """路径规划器 - 根据匹配的类别计算文档的目标名称与路径"""

    def __init__(self, config: Dict[str, Any], renamer: Renamer = None):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.renamer = renamer or Renamer(config)
        self.date_source = config.get("file", {}).get("date_source", "created")
        self.metadata: Mapping[str, Any] = config.get("template", {}).get("metadata", {}) or {}

    def reference_date(self, document: Document) -> datetime:
        """模板使用的参考日期：默认为创建时间，可改为文件名中的日期"""
        if self.date_source == "filename":
            date = extract_date_from_file_name(document.name)
            if date is not None:
                return date
            self.logger.debug(f"文件名中没有日期，使用创建时间: {document.name}")
        return document.created_at

    def plan(
        self, document: Document, category: Category, role: AssignmentRole
    ) -> ResolvedAssignment:
        """规划文档在某个类别下的名称、路径与快捷方式路径"""
        date = self.reference_date(document)
        name = self.renamer.resolve_name(document, category, date)
        path = populate(category.path, date, self.metadata)
        shortcut_paths = tuple(
            populate(shortcut, date, self.metadata) for shortcut in category.shortcuts
        )

        self.logger.debug(f"路径规划: {document.name} -> {path}/{name} ({role.value})")
        return ResolvedAssignment(
            document=document,
            category=category,
            name=name,
            path=path,
            role=role,
            shortcut_paths=shortcut_paths,
        )
