"""
核心功能模块

包含系统的主要组件：工作流引擎、配置管理、数据模型和异常
"""

from .config import Config
from .exceptions import (
    ConfigurationError,
    DocumentProcessingError,
    ScanCategorizerError,
    SourceResolutionError,
)
from .models import AssignmentRole, Category, Document, ResolvedAssignment, RunReport
from .workflow import CategorizationWorkflow

__all__ = [
    "CategorizationWorkflow",
    "Config",
    "ConfigurationError",
    "DocumentProcessingError",
    "ScanCategorizerError",
    "SourceResolutionError",
    "AssignmentRole",
    "Category",
    "Document",
    "ResolvedAssignment",
    "RunReport",
]
