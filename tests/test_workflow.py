"""
测试分类工作流
"""

import re
from datetime import datetime

import pytest

from scancat.core.exceptions import ConfigurationError, SourceResolutionError
from scancat.core.models import AssignmentRole, Category
from scancat.core.workflow import CategorizationWorkflow
from scancat.naming.renamer import ComputedName, StaticName
from scancat.rules.conditions import and_, or_

from .conftest import FakeStorage, make_document


def category(name, *conditions, **kwargs):
    kwargs.setdefault("path", f"{name}/$y/$m")
    return Category(name=name, conditions=conditions, **kwargs)


class TestCategorizationWorkflow:
    """测试工作流运行"""

    @pytest.fixture
    def invoice(self):
        return make_document("inv", "Invoice number 42 total 100 EUR", name="scan1.pdf")

    @pytest.fixture
    def letter(self):
        return make_document("let", "Dear customer your contract", name="scan2.pdf")

    @pytest.fixture
    def storage(self, invoice, letter):
        return FakeStorage({"inbox": [invoice, letter], "empty": []})

    @pytest.fixture
    def workflow(self, base_config, storage):
        return CategorizationWorkflow(base_config, storage)

    def test_primary_move(self, workflow, storage):
        """主类别移动并重命名"""
        categories = [
            category("Invoices", or_("invoice"), rename=StaticName("Invoice $y-$m-$d.pdf")),
        ]

        report = workflow.run(categories, ["inbox"])

        assert storage.moves == [("inv", "Invoice 2022-03-15.pdf", "Invoices/2022/03")]
        assert storage.folders == ["Invoices/2022/03"]
        assert storage.shortcuts == []
        assert report.processed == 2
        assert report.moved == 1
        assert report.unmatched == 1
        assert report.failed == 0
        assert report.assignments[0].role is AssignmentRole.PRIMARY

    def test_no_match_is_not_error(self, workflow, storage):
        report = workflow.run([category("Tax", and_("tax", "return"))], ["inbox"])
        assert storage.moves == []
        assert report.unmatched == 2
        assert report.failed == 0
        assert report.errors == []

    def test_equal_priority_keeps_order(self, workflow, storage):
        """同优先级时保持配置顺序，第一个为主类别"""
        a = category("A", or_("invoice"))
        b = category("B", or_("invoice"), allow_secondary=True)

        report = workflow.run([a, b], ["inbox"])

        assert storage.moves == [("inv", "scan1.pdf", "A/2022/03")]
        assert storage.shortcuts == [("moved:inv", "scan1.pdf", "B/2022/03")]
        assert [a.role for a in report.assignments] == [
            AssignmentRole.PRIMARY,
            AssignmentRole.SECONDARY,
        ]
        assert report.shortcuts == 1

    def test_priority_selects_primary(self, workflow, storage):
        cats = [
            category("A", or_("invoice"), priority=0),
            category("B", or_("invoice"), priority=1),
            category("C", or_("invoice"), priority=0, allow_secondary=True),
            category("D", or_("invoice"), priority=0),
        ]

        workflow.run(cats, ["inbox"])

        assert storage.moves == [("inv", "scan1.pdf", "B/2022/03")]
        # A 和 D 不允许次要分配，只有 C 创建快捷方式
        assert storage.shortcuts == [("moved:inv", "scan1.pdf", "C/2022/03")]
        assert cats[0].priority == 0 and cats[1].priority == 1

    def test_secondary_skipped_without_flag(self, workflow, storage):
        cats = [category("A", or_("invoice")), category("B", or_("invoice"))]
        report = workflow.run(cats, ["inbox"])
        assert storage.shortcuts == []
        assert len(report.assignments) == 1

    def test_shortcut_templates(self, workflow, storage):
        """主类别的快捷方式模板逐个创建"""
        cats = [
            category("A", or_("invoice"), shortcuts=["Archive/$y", "Inbox/Done"]),
        ]

        report = workflow.run(cats, ["inbox"])

        assert storage.shortcuts == [
            ("moved:inv", "scan1.pdf", "Archive/2022"),
            ("moved:inv", "scan1.pdf", "Inbox/Done"),
        ]
        assert report.shortcuts == 2

    def test_secondary_shortcut_templates(self, workflow, storage):
        cats = [
            category("A", or_("invoice")),
            category("B", or_("invoice"), allow_secondary=True, shortcuts=["Extra/$y"]),
        ]
        workflow.run(cats, ["inbox"])
        assert storage.shortcuts == [
            ("moved:inv", "scan1.pdf", "B/2022/03"),
            ("moved:inv", "scan1.pdf", "Extra/2022"),
        ]

    def test_does_not_mutate_categories(self, workflow):
        cats = [category("A", or_("invoice")), category("B", or_("invoice"))]
        snapshot = list(cats)
        workflow.run(cats, ["inbox"])
        assert cats == snapshot
        assert cats[0].priority is None

    def test_pattern_condition(self, workflow, storage):
        cats = [category("Invoices", and_("invoice", re.compile(r"total \d+ eur")))]
        workflow.run(cats, ["inbox"])
        assert [m[0] for m in storage.moves] == ["inv"]

    def test_document_error_continues(self, base_config, invoice, letter):
        """单个文档出错不影响后续文档"""
        storage = FakeStorage({"inbox": [invoice, letter]})
        workflow = CategorizationWorkflow(base_config, storage)

        def rename(document):
            return "TEMP.pdf" if document.name == "TEMP" else f"{document.id}.txt"

        cats = [
            category("Bad", or_("invoice"), rename=ComputedName(rename)),
            category("Letters", or_("contract")),
        ]

        report = workflow.run(cats, ["inbox"])

        assert report.failed == 1
        assert "scan1.pdf" in report.errors[0]
        assert storage.moves == [("let", "scan2.pdf", "Letters/2022/03")]
        assert report.moved == 1

    def test_storage_error_continues(self, base_config, invoice, letter):
        storage = FakeStorage({"inbox": [invoice, letter]})
        original_move = storage.move_and_rename

        def flaky_move(document, new_name, folder):
            if document.id == "inv":
                raise OSError("disk full")
            return original_move(document, new_name, folder)

        storage.move_and_rename = flaky_move
        workflow = CategorizationWorkflow(base_config, storage)

        report = workflow.run([category("All", or_("invoice", "contract"))], ["inbox"])

        assert report.failed == 1
        assert report.moved == 1
        assert storage.moves == [("let", "scan2.pdf", "All/2022/03")]

    def test_invalid_configuration_aborts(self, workflow, storage):
        """配置无效时不处理任何文档"""
        with pytest.raises(ConfigurationError):
            workflow.run([category("A", or_("invoice")), category("B")], ["inbox"])
        assert storage.resolved == []
        assert storage.moves == []

    def test_unresolvable_source_aborts(self, workflow, storage):
        """任一源无法解析时整个运行终止"""
        with pytest.raises(SourceResolutionError, match="missing"):
            workflow.run([category("A", or_("invoice"))], ["inbox", "missing"])
        assert storage.listed == []
        assert storage.moves == []

    def test_no_sources(self, workflow):
        with pytest.raises(SourceResolutionError):
            workflow.run([category("A", or_("invoice"))], [])

    def test_multiple_sources(self, workflow, storage):
        report = workflow.run([category("A", or_("invoice"))], ["empty", "inbox"])
        assert storage.listed == ["empty", "inbox"]
        assert report.processed == 2

    def test_debug_logs_text(self, workflow, caplog):
        with caplog.at_level("INFO"):
            workflow.run([category("A", or_("invoice"))], ["inbox"], debug=True)
        assert "Invoice number 42" in caplog.text

    def test_notification(self, base_config, storage):
        """配置收件人时发送运行报告"""
        config = dict(base_config, notification={"recipient": "me@example.com", "subject": "Report"})
        workflow = CategorizationWorkflow(config, storage)

        workflow.run([category("A", or_("invoice"))], ["inbox"])

        assert len(storage.notifications) == 1
        recipient, subject, body = storage.notifications[0]
        assert recipient == "me@example.com"
        assert subject == "Report"
        assert "scan1.pdf -> A/2022/03/scan1.pdf" in body
        assert "处理文档: 2" in body

    def test_no_notification_by_default(self, workflow, storage):
        workflow.run([category("A", or_("invoice"))], ["inbox"])
        assert storage.notifications == []


class TestPreview:
    """测试预览"""

    def test_preview(self, base_config):
        workflow = CategorizationWorkflow(base_config, FakeStorage({}))
        document = make_document("doc", "", name="x.pdf", created_at=datetime(2023, 1, 2))
        cats = [
            category("A", or_("alpha")),
            category("B", or_("alpha"), priority=5),
            category("C", or_("alpha"), allow_secondary=True),
        ]

        assignments = workflow.preview(["Alpha"], document, cats)

        assert [(a.category.name, a.role) for a in assignments] == [
            ("B", AssignmentRole.PRIMARY),
            ("C", AssignmentRole.SECONDARY),
        ]
        assert assignments[0].path == "B/2023/01"

    def test_preview_no_match(self, base_config):
        workflow = CategorizationWorkflow(base_config, FakeStorage({}))
        document = make_document("doc", "", name="x.pdf")
        assert workflow.preview(["beta"], document, [category("A", or_("alpha"))]) == []
