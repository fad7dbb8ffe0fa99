#!/usr/bin/env python3
"""
基本使用示例

展示如何用Python定义类别并对本地目录中的文档执行分类
"""

import logging
import re
import tempfile
from pathlib import Path

from scancat.core.models import Category
from scancat.core.workflow import CategorizationWorkflow
from scancat.naming.renamer import ComputedName, StaticName
from scancat.rules.conditions import and_, or_
from scancat.rules.rule_engine import Priority


def setup_logging():
    """设置日志"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def letter_name(document):
    """按原文件名生成信件名称"""
    return f"Letter - {document.name}"


CATEGORIES = [
    Category(
        name="Invoices",
        conditions=[or_("invoice", "rechnung"), and_(re.compile(r"total \d+"))],
        path="Invoices/$y/$m",
        rename=StaticName("Invoice $y-$m-$d.txt"),
        priority=Priority.HIGH,
        shortcuts=["Tax/$y"],
    ),
    Category(
        name="Letters",
        conditions=[or_("dear", "sincerely")],
        path="Letters/$y",
        rename=ComputedName(letter_name),
        allow_secondary=True,
    ),
]


def main():
    setup_logging()

    with tempfile.TemporaryDirectory() as temp_dir:
        inbox = Path(temp_dir) / "inbox"
        inbox.mkdir()
        (inbox / "scan_001.txt").write_text("Dear customer, invoice total 120 EUR", encoding="utf-8")
        (inbox / "scan_002.txt").write_text("Dear Anna, yours sincerely", encoding="utf-8")
        (inbox / "scan_003.txt").write_text("Shopping list", encoding="utf-8")

        config = {
            "system": {"dry_run": False},
            "file": {
                "target_directory": str(Path(temp_dir) / "sorted"),
                "document_extension": ".txt",
            },
        }
        workflow = CategorizationWorkflow(config)
        report = workflow.run(CATEGORIES, [str(inbox)])

        print(workflow.render_summary(report))
        for path in sorted((Path(temp_dir) / "sorted").rglob("*")):
            print(path.relative_to(temp_dir))


if __name__ == "__main__":
    main()
