"""
命令行界面

提供分类运行、配置校验和预览功能
"""

import click
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .core.config import Config
from .core.exceptions import ConfigurationError, DocumentProcessingError, SourceResolutionError
from .core.models import Document
from .core.workflow import CategorizationWorkflow


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """设置日志"""
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


@click.group()
@click.option("--config", "-c", help="配置文件路径")
@click.option("--verbose", "-v", is_flag=True, help="详细输出")
@click.pass_context
def main(ctx, config: Optional[str], verbose: bool):
    """基于规则的文档自动分类系统"""

    # 加载配置
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config(config)
    system_cfg = ctx.obj["config"].system

    # 设置日志
    log_level = "DEBUG" if verbose else system_cfg.log_level
    setup_logging(log_level, system_cfg.log_file or None)

    if verbose:
        click.echo(f"配置文件: {ctx.obj['config'].config_path}")


@main.command()
@click.pass_context
def init(ctx):
    """初始化配置文件"""
    config = ctx.obj["config"]
    config.save()
    click.echo(f"配置文件已保存: {config.config_path}")


@main.command()
@click.argument("sources", nargs=-1)
@click.option("--dry-run", is_flag=True, help="仅模拟运行，不实际移动文件")
@click.option("--debug", is_flag=True, help="输出提取的文本")
@click.pass_context
def run(ctx, sources: tuple, dry_run: bool, debug: bool):
    """对源目录中的文档执行分类"""
    config = ctx.obj["config"]

    if dry_run:
        config.system.dry_run = True
        click.echo("🔍 模拟运行模式 - 不会实际移动文件")

    source_ids = list(sources) or list(config.file.source_directories)
    click.echo(f"🎯 目标目录: {config.file.target_directory}")

    try:
        categories = config.get_categories()
        workflow = CategorizationWorkflow(config.get_config_dict())
        report = workflow.run(categories, source_ids, debug=debug)
    except (ConfigurationError, SourceResolutionError) as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    click.echo(workflow.render_summary(report))


@main.command()
@click.pass_context
def validate(ctx):
    """校验配置中的类别"""
    config = ctx.obj["config"]

    try:
        categories = config.get_categories()
        workflow = CategorizationWorkflow(config.get_config_dict())
        workflow.rule_engine.validate(categories)
    except ConfigurationError as e:
        click.echo(f"❌ 配置无效: {e}", err=True)
        sys.exit(1)

    summary = workflow.rule_engine.get_rules_summary(categories)
    click.echo(f"✅ 配置有效: {summary['total_categories']}个类别, {summary['total_conditions']}个条件")
    for category in categories:
        secondary = "，允许次要分类" if category.allow_secondary else ""
        click.echo(f"  - {category.name}: {category.path} (优先级 {category.priority or 0}{secondary})")


@main.command()
@click.argument("text_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", help="文档名称，默认使用文本文件名加文档扩展名")
@click.pass_context
def preview(ctx, text_file: str, name: Optional[str]):
    """预览文本文件的分类结果（不移动文件）"""
    config = ctx.obj["config"]
    path = Path(text_file)
    words = path.read_text(encoding="utf-8", errors="ignore").split()
    document = Document(
        id=str(path),
        name=name or f"{path.stem}{config.file.document_extension}",
        created_at=datetime.fromtimestamp(path.stat().st_mtime),
    )

    try:
        categories = config.get_categories()
        workflow = CategorizationWorkflow(config.get_config_dict())
        assignments = workflow.preview(words, document, categories)
    except ConfigurationError as e:
        click.echo(f"❌ 配置无效: {e}", err=True)
        sys.exit(1)
    except DocumentProcessingError as e:
        click.echo(f"❌ 文档处理失败: {e}", err=True)
        sys.exit(1)

    if not assignments:
        click.echo("未匹配任何类别")
        return

    for assignment in assignments:
        click.echo(
            f"[{assignment.role.value}] {assignment.category.name}: "
            f"{assignment.path}/{assignment.name}"
        )
        for shortcut_path in assignment.shortcut_paths:
            click.echo(f"    快捷方式: {shortcut_path}/{assignment.name}")


if __name__ == "__main__":
    main()
