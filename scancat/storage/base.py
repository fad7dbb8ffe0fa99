"""
存储接口

分类核心依赖的外部协作者：源解析、文档遍历、文本提取、文件夹与移动操作
"""

from abc import ABC, abstractmethod
from typing import Any, Iterator, List

from ..core.models import Document


class StorageProvider(ABC):
    """外部存储提供者"""

    @abstractmethod
    def resolve_source(self, source_id: str) -> Any:
        """解析源标识，失败时抛出 SourceResolutionError"""

    @abstractmethod
    def list_documents(self, collection: Any) -> Iterator[Document]:
        """遍历集合中的文档（单次遍历）"""

    @abstractmethod
    def extract_words(self, document: Document) -> List[str]:
        """提取文档文本并按空白分词"""

    @abstractmethod
    def ensure_folder(self, path: str) -> Any:
        """获取或创建目标文件夹（幂等）"""

    @abstractmethod
    def move_and_rename(self, document: Document, new_name: str, folder: Any) -> str:
        """移动并重命名文档，返回移动后的文档标识"""

    @abstractmethod
    def create_shortcut(self, target_id: str, name: str, folder: Any) -> str:
        """在文件夹中创建指向目标的快捷方式，返回快捷方式标识"""

    def notify(self, recipient: str, subject: str, body: str) -> None:
        """发送通知，默认不发送"""
