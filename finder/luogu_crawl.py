# luogu_crawl.py
"""从洛谷获取用户的奖项认证列表。"""
import logging

import requests

from .errors import ConfigError

logger = logging.getLogger(__name__)

PRIZE_BASE_URL = "https://www.luogu.com.cn/offlinePrize/getList"

UA = 'OIerFinder-Bot/1.0 (+https://github.com/Zi-Gao/OIerFinder)'

BASE_HEADER = {
    'User-Agent': UA
}

TIMEOUT = 15


def get_prize_list(uid, session=None):
    """返回奖项列表，每项形如 {'year': 2023, 'contest': 'CSP-S 提高级', 'prize': '一等奖'}。"""
    http = session or requests
    url = f"{PRIZE_BASE_URL}/{uid}"
    try:
        response = http.get(url, headers=BASE_HEADER, timeout=TIMEOUT)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        raise ConfigError(f"获取洛谷用户 {uid} 的奖项失败: {e}") from e
    except ValueError as e:
        raise ConfigError(f"洛谷返回的数据无法解析: {e}") from e

    prizes = []
    for item in data.get('prizes') or []:
        prize = item.get('prize') if isinstance(item, dict) else None
        if prize:
            prizes.append(prize)
    logger.info("fetched %d prizes for luogu user %s", len(prizes), uid)
    return prizes


def format_prizes(prizes):
    """输出为 convert_luogu_to_config 能识别的两行一组格式。"""
    lines = []
    for prize in prizes:
        year, contest, level = prize.get('year'), prize.get('contest'), prize.get('prize')
        if not (year and contest and level):
            continue
        lines.append(f"[{year}] {contest}")
        lines.append(str(level))
    return "\n".join(lines)
