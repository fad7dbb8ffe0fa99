"""
本地文件系统存储

源为本地目录，快捷方式使用符号链接实现
"""

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List

try:
    from pdfminer.high_level import extract_text

    PDFMINER_AVAILABLE = True
except ImportError:
    PDFMINER_AVAILABLE = False

from ..core.exceptions import DocumentProcessingError, SourceResolutionError
from ..core.models import Document
from .base import StorageProvider


class LocalStorage(StorageProvider):
    """本地存储 - 在目标目录下执行移动、重命名与链接创建

    特性:
    - 目标文件夹按需逐级创建
    - 移动时不覆盖已有文件，自动添加后缀
    - 快捷方式为指向主文件的符号链接
    - 模拟运行模式只记录日志
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.logger = logging.getLogger(__name__)

        file_cfg = config.get("file", {})
        self.target_directory = Path(file_cfg.get("target_directory", "分类")).expanduser()
        self.extension = file_cfg.get("document_extension", ".pdf").lower()
        self.recursive = file_cfg.get("recursive", False)
        self.dry_run = config.get("system", {}).get("dry_run", False)

        self.logger.info("本地存储初始化完成")

    def resolve_source(self, source_id: str) -> Path:
        path = Path(source_id).expanduser()
        if not path.is_dir():
            raise SourceResolutionError(f"源目录不存在或无法访问: {source_id}")
        return path

    def list_documents(self, collection: Path) -> Iterator[Document]:
        pattern = "**/*" if self.recursive else "*"
        for file_path in sorted(collection.glob(pattern)):
            if not file_path.is_file() or file_path.is_symlink():
                continue
            if not file_path.name.lower().endswith(self.extension):
                continue

            yield Document(
                id=str(file_path),
                name=file_path.name,
                created_at=self._creation_time(file_path),
                handle=file_path,
            )

    def _creation_time(self, file_path: Path) -> datetime:
        stat_info = file_path.stat()
        timestamp = getattr(stat_info, "st_birthtime", None) or stat_info.st_mtime
        return datetime.fromtimestamp(timestamp)

    def extract_words(self, document: Document) -> List[str]:
        file_path = Path(document.id)
        if file_path.suffix.lower() == ".pdf":
            if not PDFMINER_AVAILABLE:
                raise DocumentProcessingError("pdfminer.six未安装，无法提取PDF文本", document.name)
            text = extract_text(str(file_path))
        else:
            text = file_path.read_text(encoding="utf-8", errors="ignore")
        return text.split()

    def ensure_folder(self, path: str) -> Path:
        folder = self.target_directory
        for part in path.split("/"):
            if part:
                folder = folder / part

        if self.dry_run:
            self.logger.info(f"Dry-run: 跳过创建目录 {folder}")
        else:
            folder.mkdir(parents=True, exist_ok=True)
        return folder

    def move_and_rename(self, document: Document, new_name: str, folder: Path) -> str:
        old_path = Path(document.id)
        new_path = folder / new_name
        self.logger.info(f"移动文件: {old_path} -> {new_path}")

        if self.dry_run:
            self.logger.info("Dry-run: 跳过实际移动")
            return str(new_path)

        if not old_path.exists():
            raise FileNotFoundError(f"源文件不存在: {old_path}")

        # 目标已存在时添加后缀，避免覆盖
        final_target = new_path
        counter = 1
        while final_target.exists() and final_target != old_path:
            final_target = new_path.with_name(f"{new_path.stem}_{counter}{new_path.suffix}")
            counter += 1
        if final_target != new_path:
            self.logger.warning(f"目标已存在，使用新路径: {final_target}")

        shutil.move(str(old_path), str(final_target))
        return str(final_target)

    def create_shortcut(self, target_id: str, name: str, folder: Path) -> str:
        link_path = folder / name
        self.logger.info(f"创建链接: {link_path} -> {target_id}")

        if self.dry_run:
            return str(link_path)

        target = Path(target_id).resolve()

        # 同名条目已存在时添加后缀，已指向同一目标的链接直接复用
        final_link = link_path
        counter = 1
        while final_link.exists() or final_link.is_symlink():
            if final_link.is_symlink() and final_link.resolve() == target:
                return str(final_link)
            final_link = link_path.with_name(f"{link_path.stem}_{counter}{link_path.suffix}")
            counter += 1
        if final_link != link_path:
            self.logger.warning(f"链接已存在，使用新路径: {final_link}")

        os.symlink(str(target), str(final_link))
        return str(final_link)

    def notify(self, recipient: str, subject: str, body: str) -> None:
        self.logger.info(f"通知 {recipient}: {subject}\n{body}")
