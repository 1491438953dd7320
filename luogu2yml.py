import argparse
import sys

from finder import FinderError
from finder.luogu_crawl import format_prizes, get_prize_list
from finder.luogu_parser import convert_luogu_to_config, load_mapping

DEFAULT_INPUT_FILE = 'luogu_awards.txt'
DEFAULT_MAPPING_FILE = 'name_mapping.yml'
DEFAULT_OUTPUT_FILE = 'config.yml'


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="将洛谷奖项认证格式的文本转换为 oierfinder 的 YAML 配置文件。"
    )
    parser.add_argument(
        '-i', '--input',
        default=DEFAULT_INPUT_FILE,
        help=f"输入的洛谷奖项文本文件 (默认为: {DEFAULT_INPUT_FILE})"
    )
    parser.add_argument('-u', '--uid', type=int, help="直接从洛谷获取该用户的奖项认证，忽略 --input")
    parser.add_argument(
        '-m', '--mapping',
        default=DEFAULT_MAPPING_FILE,
        help=f"名称映射的 YAML 文件 (默认为: {DEFAULT_MAPPING_FILE})"
    )
    parser.add_argument(
        '-o', '--output',
        default=DEFAULT_OUTPUT_FILE,
        help=f"输出的配置文件名 (默认为: {DEFAULT_OUTPUT_FILE})"
    )
    args = parser.parse_args(argv)

    try:
        mapping = load_mapping(args.mapping)
        if args.uid is not None:
            luogu_text = format_prizes(get_prize_list(args.uid))
        else:
            try:
                with open(args.input, 'r', encoding='utf-8') as f:
                    luogu_text = f.read()
            except FileNotFoundError:
                print(f"错误: 输入文件 '{args.input}' 未找到。", file=sys.stderr)
                return 1

        config = convert_luogu_to_config(luogu_text, mapping)
    except FinderError as e:
        print(f"处理过程中发生错误: {e}", file=sys.stderr)
        return 1

    with open(args.output, 'w', encoding='utf-8') as f:
        f.write(config.to_yaml())

    source = f"洛谷用户 {args.uid}" if args.uid is not None else f"'{args.input}'"
    print(f"成功将 {source} 的 {len(config.records)} 条奖项转换为配置文件 '{args.output}'。")
    return 0


if __name__ == '__main__':
    sys.exit(main())
