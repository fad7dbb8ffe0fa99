"""
测试共用夹具
"""

from datetime import datetime
from typing import Any, Dict, List

import pytest

from scancat.core.exceptions import SourceResolutionError
from scancat.core.models import Document
from scancat.storage.base import StorageProvider


class FakeStorage(StorageProvider):
    """内存存储，记录所有请求的操作"""

    def __init__(self, sources: Dict[str, List[Document]], texts: Dict[str, str] = None):
        self.sources = sources
        self.texts = texts or {}
        self.folders: List[str] = []
        self.moves: List[tuple] = []
        self.shortcuts: List[tuple] = []
        self.notifications: List[tuple] = []
        self.resolved: List[str] = []
        self.listed: List[str] = []

    def resolve_source(self, source_id: str) -> Any:
        if source_id not in self.sources:
            raise SourceResolutionError(f"unknown source {source_id}")
        self.resolved.append(source_id)
        return source_id

    def list_documents(self, collection: Any):
        self.listed.append(collection)
        yield from self.sources[collection]

    def extract_words(self, document: Document) -> List[str]:
        return self.texts.get(document.id, " ".join(document.words)).split()

    def ensure_folder(self, path: str) -> Any:
        self.folders.append(path)
        return path

    def move_and_rename(self, document: Document, new_name: str, folder: Any) -> str:
        self.moves.append((document.id, new_name, folder))
        return f"moved:{document.id}"

    def create_shortcut(self, target_id: str, name: str, folder: Any) -> str:
        self.shortcuts.append((target_id, name, folder))
        return f"shortcut:{len(self.shortcuts)}"

    def notify(self, recipient: str, subject: str, body: str) -> None:
        self.notifications.append((recipient, subject, body))


def make_document(doc_id: str, text: str, name: str = None, created_at: datetime = None) -> Document:
    return Document(
        id=doc_id,
        name=name or f"{doc_id}.pdf",
        created_at=created_at or datetime(2022, 3, 15, 14, 30, 45),
        words=tuple(text.split()),
    )


@pytest.fixture
def base_config():
    """基础配置"""
    return {
        "system": {"dry_run": False, "debug": False},
        "file": {"document_extension": ".pdf", "date_source": "created"},
        "template": {"metadata": {}},
        "notification": {"recipient": ""},
    }
