# luogu_parser.py
"""把洛谷奖项认证文本转换为查询配置。"""
import logging
import re

import yaml

from .errors import ConfigError
from .query_config import Bound, QueryConfig, RecordConstraint, SetFilter

logger = logging.getLogger(__name__)

YEAR_LINE = re.compile(r"\[(\d{4})\]\s*(.*)")


def load_mapping(mapping_file):
    try:
        with open(mapping_file, 'r', encoding='utf-8') as f:
            mapping = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"映射文件 '{mapping_file}' 未找到") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"解析映射文件 '{mapping_file}' 失败: {e}") from e
    if not isinstance(mapping, dict):
        raise ConfigError(f"映射文件 '{mapping_file}' 格式错误")
    return mapping


def convert_luogu_to_config(luogu_text, mapping):
    """
    每两行为一条奖项：

        [2023] CSP-S 提高级
        一等奖

    比赛名称按 contest_mapping 的子串匹配（先出现的优先），奖项按 level_mapping 精确匹配，
    任一无法识别的奖项会被跳过。
    """
    contest_map = mapping.get('contest_mapping') or {}
    level_map = mapping.get('level_mapping') or {}

    lines = [line.strip() for line in (luogu_text or '').strip().splitlines() if line.strip()]
    records = []
    for i in range(0, len(lines) - 1, 2):
        match = YEAR_LINE.match(lines[i])
        if not match:
            logger.debug("skip line without year: %s", lines[i])
            continue

        year, luogu_contest = int(match.group(1)), match.group(2).strip()
        luogu_level = lines[i + 1]

        standard_level = level_map.get(luogu_level)
        if not standard_level:
            logger.debug("unknown level %r, skipped", luogu_level)
            continue

        standard_contest_type = None
        for key, value in contest_map.items():
            if key in luogu_contest:
                standard_contest_type = value
                break
        if not standard_contest_type:
            logger.debug("unknown contest %r, skipped", luogu_contest)
            continue

        records.append(RecordConstraint(
            year_range=Bound(year, year),
            contest_type=SetFilter((standard_contest_type,)),
            level_range=SetFilter((standard_level,)),
        ))

    return QueryConfig(records=tuple(records))
