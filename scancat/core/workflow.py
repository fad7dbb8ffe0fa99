"""
文档分类工作流引擎

基于LangGraph编排单个文档的处理步骤，按文档逐个顺序执行
"""

from typing import Any, Dict, List, Optional, Sequence, TypedDict
from datetime import datetime
import dataclasses
import logging

from jinja2 import BaseLoader, Environment
from langgraph.graph import StateGraph, END

from .exceptions import DocumentProcessingError, SourceResolutionError
from .models import AssignmentRole, Category, Document, ResolvedAssignment, RunReport
from ..naming.renamer import Renamer
from ..path_planner.path_planner import PathPlanner
from ..rules.rule_engine import RuleEngine, classify, rank
from ..storage.base import StorageProvider
from ..storage.local_storage import LocalStorage

SUMMARY_TEMPLATE = """\
分类运行完成 ({{ report.started_at.strftime('%Y-%m-%d %H:%M:%S') }})
处理文档: {{ report.processed }}
移动: {{ report.moved }}  快捷方式: {{ report.shortcuts }}
未匹配: {{ report.unmatched }}  失败: {{ report.failed }}
{% for a in report.assignments %}
- {{ a.document.name }} -> {{ a.path }}/{{ a.name }} [{{ a.category.name }}, {{ a.role.value }}]
{%- endfor %}
{% if report.errors %}
错误:
{% for e in report.errors %}- {{ e }}
{% endfor %}{% endif %}"""


class DocumentState(TypedDict, total=False):
    document: Document
    categories: List[Category]
    debug: bool
    words: List[str]
    matches: List[Category]
    ranked: List[Category]
    assignments: List[ResolvedAssignment]
    target_id: str
    shortcut_ids: List[str]


class CategorizationWorkflow:
    """文档分类工作流引擎"""

    def __init__(self, config: Dict[str, Any], storage: Optional[StorageProvider] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)

        # 初始化各个模块
        self.storage = storage or LocalStorage(config)
        self.renamer = Renamer(config)
        self.rule_engine = RuleEngine(config)
        self.path_planner = PathPlanner(config, self.renamer)

        notification_cfg = config.get("notification", {})
        self.recipient = notification_cfg.get("recipient", "")
        self.subject = notification_cfg.get("subject", "scancat 分类报告")
        self.summary_template = Environment(loader=BaseLoader()).from_string(SUMMARY_TEMPLATE)

        # 构建工作流图
        self.workflow = self._build_workflow()

    def _build_workflow(self):
        """构建工作流图"""
        workflow = StateGraph(DocumentState)

        # 添加节点
        workflow.add_node("extract_words", self._extract_words)
        workflow.add_node("classify_document", self._classify_document)
        workflow.add_node("rank_matches", self._rank_matches)
        workflow.add_node("plan_assignments", self._plan_assignments)
        workflow.add_node("dispatch", self._dispatch)

        # 设置边和条件
        workflow.set_entry_point("extract_words")
        workflow.add_edge("extract_words", "classify_document")
        workflow.add_conditional_edges(
            "classify_document",
            self._route_matches,
            {"matched": "rank_matches", "unmatched": END},
        )
        workflow.add_edge("rank_matches", "plan_assignments")
        workflow.add_edge("plan_assignments", "dispatch")
        workflow.add_edge("dispatch", END)

        return workflow.compile()

    def run(
        self,
        categories: Sequence[Category],
        source_ids: Sequence[str],
        debug: bool = False,
    ) -> RunReport:
        """
        对所有源中的文档执行分类

        类别无效或任一源无法解析时抛出异常且不处理任何文档；
        单个文档的错误只记录日志，继续处理下一个文档。

        Args:
            categories: 类别列表
            source_ids: 源标识列表
            debug: 是否输出提取的文本

        Returns:
            RunReport: 运行报告
        """
        debug = debug or self.config.get("system", {}).get("debug", False)
        categories = list(categories)

        self.rule_engine.validate(categories)
        collections = self._resolve_sources(source_ids)

        self.logger.info("开始分类...")
        report = RunReport()

        for collection in collections:
            for document in self.storage.list_documents(collection):
                self._process_document(document, categories, debug, report)

        report.completed_at = datetime.now()
        self.logger.info(
            f"分类完成: 处理{report.processed}个文档, 移动{report.moved}个, "
            f"未匹配{report.unmatched}个, 失败{report.failed}个"
        )

        if self.recipient:
            self.storage.notify(self.recipient, self.subject, self.render_summary(report))

        return report

    def _resolve_sources(self, source_ids: Sequence[str]) -> List[Any]:
        """解析全部源，任一失败则整个运行终止"""
        if not source_ids:
            raise SourceResolutionError("未指定源目录，运行终止")

        collections = []
        failed = []
        for source_id in source_ids:
            try:
                collections.append(self.storage.resolve_source(source_id))
            except Exception as e:
                self.logger.error(f"获取源目录时出错: {source_id}: {e}")
                failed.append(source_id)

        if failed:
            raise SourceResolutionError(
                f"一个或多个源目录无效或无法访问: {', '.join(failed)}，运行终止"
            )
        return collections

    def _process_document(
        self,
        document: Document,
        categories: List[Category],
        debug: bool,
        report: RunReport,
    ) -> None:
        """处理单个文档，错误不向外传播"""
        self.logger.info(f"处理文件: {document.name}")
        report.processed += 1

        try:
            state = self.workflow.invoke(
                {"document": document, "categories": categories, "debug": debug}
            )
        except DocumentProcessingError as e:
            self.logger.error(f"文件处理失败: {document.name}: {e}")
            report.failed += 1
            report.errors.append(f"{document.name}: {e}")
            return
        except Exception as e:
            self.logger.error(f"文件处理失败: {document.name}: {e}", exc_info=True)
            report.failed += 1
            report.errors.append(f"{document.name}: {e}")
            return

        if not state.get("matches"):
            report.unmatched += 1
            return

        assignments = state.get("assignments", [])
        report.assignments.extend(assignments)
        report.moved += sum(1 for a in assignments if a.role is AssignmentRole.PRIMARY)
        report.shortcuts += len(state.get("shortcut_ids", []))
        self.logger.info(f"文件处理完成: {document.name}")

    def _extract_words(self, state: DocumentState) -> Dict[str, Any]:
        """提取文本节点"""
        document = state["document"]
        words = list(self.storage.extract_words(document))
        self.logger.info(f"找到{len(words)}个词")
        if state.get("debug"):
            self.logger.info(f"提取的文本: {' '.join(words)}")
        return {"words": words}

    def _classify_document(self, state: DocumentState) -> Dict[str, Any]:
        """分类节点"""
        matches = classify(state["words"], state["categories"])
        if not matches:
            self.logger.info(f"文件 {state['document'].name} 不匹配任何已配置的类别")
        else:
            self.logger.info(f"匹配类别: {', '.join(c.name for c in matches)}")
        return {"matches": matches}

    def _route_matches(self, state: DocumentState) -> str:
        return "matched" if state.get("matches") else "unmatched"

    def _rank_matches(self, state: DocumentState) -> Dict[str, Any]:
        """优先级排序节点"""
        return {"ranked": rank(state["matches"])}

    def _plan_assignments(self, state: DocumentState) -> Dict[str, Any]:
        """路径规划节点"""
        return {"assignments": self.plan_assignments(state["document"], state["ranked"])}

    def plan_assignments(
        self, document: Document, ranked: Sequence[Category]
    ) -> List[ResolvedAssignment]:
        """
        为排序后的类别计算分配结果

        第一个类别为主分配；其余类别仅在允许次要分配时生成快捷方式分配。
        """
        if not ranked:
            return []

        primary = ranked[0]
        self.logger.info(f"应用类别: {primary.name}")
        assignments = [self.path_planner.plan(document, primary, AssignmentRole.PRIMARY)]

        # 次要分配基于主分配重命名后的文档
        renamed = dataclasses.replace(document, name=assignments[0].name)
        for category in ranked[1:]:
            if not category.allow_secondary:
                self.logger.info(f"类别 {category.name} 不允许作为次要类别，已跳过")
                continue
            self.logger.info(f"为类别创建快捷方式: {category.name}")
            assignments.append(
                self.path_planner.plan(renamed, category, AssignmentRole.SECONDARY)
            )

        return assignments

    def _dispatch(self, state: DocumentState) -> Dict[str, Any]:
        """执行移动与快捷方式创建节点"""
        document = state["document"]
        target_id = document.id
        shortcut_ids: List[str] = []

        for assignment in state["assignments"]:
            folder = self.storage.ensure_folder(assignment.path)
            if assignment.role is AssignmentRole.PRIMARY:
                target_id = self.storage.move_and_rename(document, assignment.name, folder)
                self.logger.info(f"已移动 {assignment.name} 到 {assignment.path}")
            else:
                shortcut_ids.append(
                    self.storage.create_shortcut(target_id, assignment.name, folder)
                )

            for shortcut_path in assignment.shortcut_paths:
                shortcut_folder = self.storage.ensure_folder(shortcut_path)
                shortcut_ids.append(
                    self.storage.create_shortcut(target_id, assignment.name, shortcut_folder)
                )
                self.logger.info(f"已在 '{shortcut_path}' 创建快捷方式")

        return {"target_id": target_id, "shortcut_ids": shortcut_ids}

    def preview(
        self, words: Sequence[str], document: Document, categories: Sequence[Category]
    ) -> List[ResolvedAssignment]:
        """只计算分配结果，不执行任何文件操作"""
        self.rule_engine.validate(list(categories))
        return self.plan_assignments(document, self.rule_engine.match(words, categories))

    def render_summary(self, report: RunReport) -> str:
        """渲染运行报告"""
        return self.summary_template.render(report=report)
