"""
数据模型

类别、文档与分配结果的数据结构
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ..naming.renamer import ComputedName, StaticName
    from ..rules.conditions import Condition


@dataclass(frozen=True)
class Category:
    """分类规则：条件、目标路径模板及可选的优先级/重命名/快捷方式设置"""

    name: str
    conditions: Tuple["Condition", ...]
    path: str
    priority: Optional[int] = None
    shortcuts: Tuple[str, ...] = ()
    rename: Optional[Union["StaticName", "ComputedName"]] = None
    allow_secondary: bool = False

    def __post_init__(self):
        # 允许传入列表，统一存为元组
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "shortcuts", tuple(self.shortcuts))


@dataclass(frozen=True)
class Document:
    """待分类文档（只读）"""

    id: str
    name: str
    created_at: datetime
    words: Tuple[str, ...] = ()
    handle: Any = field(default=None, compare=False, repr=False)


class AssignmentRole(Enum):
    """分配角色"""

    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class ResolvedAssignment:
    """某个类别对文档的最终分配结果"""

    document: Document
    category: Category
    name: str
    path: str
    role: AssignmentRole
    shortcut_paths: Tuple[str, ...] = ()


@dataclass
class RunReport:
    """一次运行的统计报告"""

    processed: int = 0
    moved: int = 0
    shortcuts: int = 0
    unmatched: int = 0
    failed: int = 0
    assignments: List[ResolvedAssignment] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
