"""
基于规则的文档自动分类系统

根据可配置的类别规则对文档文本进行分类，并按日期/元数据模板计算目标路径，
将文档移动到主类别目录，为次要类别创建快捷方式。
"""

__version__ = "0.1.0"
__author__ = "Auto File Classification Team"
__email__ = "team@example.com"

from .core.config import Config
from .core.workflow import CategorizationWorkflow

__all__ = [
    "CategorizationWorkflow",
    "Config",
]
