import argparse
import os
import sys

from tabulate import tabulate

from finder import ConfigError, FinderEngine, FinderError, QueryConfig, Store
from finder.log import setup_logging
from finder.luogu_parser import convert_luogu_to_config, load_mapping
from finder.settings import DEFAULT_SETTINGS_FILE, load_settings

DEFAULT_CONFIG_FILE = 'config.yml'


def load_config(config_file):
    """加载 YAML 查询配置"""
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            return QueryConfig.from_yaml(f.read())
    except FileNotFoundError as e:
        raise ConfigError(f"配置文件 '{config_file}' 未找到。") from e


def load_luogu(luogu_file, mapping_file):
    try:
        with open(luogu_file, 'r', encoding='utf-8') as f:
            luogu_text = f.read()
    except FileNotFoundError as e:
        raise ConfigError(f"洛谷奖项文件 '{luogu_file}' 未找到。") from e
    return convert_luogu_to_config(luogu_text, load_mapping(mapping_file))


def format_results(oiers, limit=None):
    """格式化结果表格"""
    if not oiers:
        return "未找到符合所有条件的 OIer。"

    shown = oiers[:limit] if limit else oiers
    rows = [
        [o.uid, o.name, o.gender.label, o.enroll_middle, f"{o.oierdb_score:.2f}", f"{o.ccf_score:.2f}", o.ccf_level]
        for o in shown
    ]
    headers = ['UID', '姓名', '性别', '入学年份', 'DB评分', 'CCF评分', 'CCF等级']
    lines = [f"找到 {len(oiers)} 名符合所有条件的 OIer:", tabulate(rows, headers=headers, tablefmt='simple')]
    if len(shown) < len(oiers):
        lines.append(f"（仅显示前 {len(shown)} 名）")
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="根据 YAML 配置查询 OIer 数据。")
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        '-c', '--config',
        help=f"指定 YAML 配置文件路径 (默认为: {DEFAULT_CONFIG_FILE})"
    )
    source.add_argument('-l', '--luogu', help="使用洛谷奖项认证文本作为查询条件")
    parser.add_argument('-s', '--settings', default=DEFAULT_SETTINGS_FILE, help="程序配置文件")
    parser.add_argument('--db', help="数据库文件路径，覆盖配置文件中的设置")
    parser.add_argument('-n', '--limit', type=int, help="最多显示多少条结果")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.settings)
        setup_logging(settings.log_level)
        db_file = args.db or settings.database

        if not os.path.exists(db_file):
            print(f"错误: 数据库文件 '{db_file}' 不存在。请先运行 create_db.py。", file=sys.stderr)
            return 1

        if args.luogu:
            config = load_luogu(args.luogu, settings.mapping)
        else:
            config = load_config(args.config or DEFAULT_CONFIG_FILE)

        with Store.open(db_file, readonly=True) as store:
            engine = FinderEngine(store, threshold=settings.enumerate_threshold)
            result = engine.find(config)
    except FinderError as e:
        print(f"错误: {e}", file=sys.stderr)
        return 1

    print("--- 本次查询使用的配置 ---")
    print(result.config.to_yaml() or "无有效查询条件")
    print(format_results(result.oiers, args.limit))
    return 0


if __name__ == '__main__':
    sys.exit(main())
