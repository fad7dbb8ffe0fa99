"""
存储管理模块

负责文件夹创建、文件移动、重命名和快捷方式
"""

from .base import StorageProvider
from .local_storage import LocalStorage

__all__ = [
    "StorageProvider",
    "LocalStorage",
]
