"""
路径模板

将路径和文件名中的 `$变量` 替换为日期和元数据的值
"""

import re
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

INVALID_PATH_CHARS = re.compile(r'[\\:*?"<>|]')
DATE_IN_NAME = re.compile(r"[1-2][0-9][0-9][0-9]-[0-1][0-9]-[0-3][0-9]")
MIN_PATH_LENGTH = 4


def date_variables(date: datetime) -> Dict[str, str]:
    """由日期生成内置变量，固定宽度补零"""
    return {
        "y": f"{date.year:04d}",
        "l": f"{date.year - 1:04d}",
        "m": f"{date.month:02d}",
        "d": f"{date.day:02d}",
        "h": f"{date.hour:02d}",
        "i": f"{date.minute:02d}",
        "s": f"{date.second:02d}",
        "date": format_date(date),
    }


def populate(
    value: str,
    date: Optional[datetime] = None,
    metadata: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    替换字符串中的变量

    内置变量: `$y` 年, `$l` 上一年, `$m` 月, `$d` 日, `$h` 时, `$i` 分, `$s` 秒,
    `$date` 为 YYYY-MM-DD 格式的日期。
    元数据中的同名键覆盖内置变量。较长的键优先替换，
    例如 `$names` 不会被 `$name` 截断。未知变量保持不变。

    Args:
        value: 包含变量的模板
        date: 用于生成日期变量的时间，默认当前时间
        metadata: 额外的变量

    Returns:
        str: 替换后的字符串
    """
    variables = date_variables(date or datetime.now())
    if metadata:
        variables.update({str(k): str(v) for k, v in metadata.items()})

    for key in sorted(variables, key=len, reverse=True):
        if not key:
            continue
        value = value.replace(f"${key}", variables[key])
    return value


def is_valid_path(path: str) -> bool:
    """检查类别路径：长度至少4，且不含非法字符"""
    if not path or not isinstance(path, str):
        return False
    if len(path) < MIN_PATH_LENGTH:
        return False
    return not INVALID_PATH_CHARS.search(path)


def format_date(date: Optional[datetime] = None) -> str:
    """格式化为 YYYY-MM-DD"""
    date = date or datetime.now()
    return f"{date.year:04d}-{date.month:02d}-{date.day:02d}"


def extract_date_from_file_name(file_name: str) -> Optional[datetime]:
    """从文件名中提取 YYYY-MM-DD 日期，日期无效时返回 None"""
    if not file_name or not isinstance(file_name, str):
        return None

    match = DATE_IN_NAME.search(file_name)
    if not match:
        return None

    year, month, day = (int(part) for part in match.group(0).split("-"))
    try:
        return datetime(year, month, day)
    except ValueError:
        return None
