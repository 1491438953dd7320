import argparse
import json
import os
import sqlite3
import sys

from tqdm import tqdm

from finder.schema import create_indexes, create_tables

# --- 数据源文件 ---
DIST_DIR = 'oierdb-data/dist'

# --- 输出文件 ---
DB_FILE = 'oier_data.db'

# 用于解码 result.txt 中的索引
PROVINCES = [
    "安徽", "北京", "福建", "甘肃", "广东", "广西", "贵州", "海南", "河北", "河南",
    "黑龙江", "湖北", "湖南", "吉林", "江苏", "江西", "辽宁", "内蒙古", "山东", "山西",
    "陕西", "上海", "四川", "天津", "新疆", "浙江", "重庆", "宁夏", "云南", "澳门",
    "香港", "青海", "西藏", "台湾",
]
AWARD_LEVELS = [
    "金牌", "银牌", "铜牌", "一等奖", "二等奖", "三等奖", "国际金牌", "国际银牌",
    "国际铜牌", "前5%", "前15%", "前25%",
]


def decode_index(raw, table):
    idx = int(raw)
    return table[idx] if 0 <= idx < len(table) else raw


def load_static_data(cursor, static_file):
    """从 static.json 加载 School 和 Contest 数据"""
    with open(static_file, 'r', encoding='utf-8') as f:
        data = json.load(f)

    schools_to_insert = [
        (i, school[0], school[1], school[2], school[3]) for i, school in enumerate(data['schools'])
    ]
    cursor.executemany('INSERT INTO School (id, name, province, city, score) VALUES (?, ?, ?, ?, ?)', schools_to_insert)

    contests_to_insert = [
        (i, contest.get('name'), contest.get('type'), contest.get('year'),
         contest.get('fall_semester'), contest.get('full_score'))
        for i, contest in enumerate(data['contests'])
    ]
    cursor.executemany('INSERT INTO Contest (id, name, type, year, fall_semester, full_score) VALUES (?, ?, ?, ?, ?, ?)', contests_to_insert)
    return len(schools_to_insert), len(contests_to_insert)


def parse_result_line(line):
    """
    解析 result.txt 的一行，返回 (OIer 行, Record 行列表)。

    格式: uid,initials,name,gender,enroll_middle,oierdb_score,ccf_score,ccf_level,records
    records 以 '/' 分隔，每条为 contest_id:school_id:score:rank:province_idx:level_idx
    """
    parts = line.split(',', 8)
    if len(parts) != 9:
        raise ValueError(f"格式错误: {line!r}")
    oier_uid = int(parts[0])
    oier = (
        oier_uid, parts[1], parts[2], int(parts[3]), int(parts[4]),
        float(parts[5]), float(parts[6]), int(parts[7])
    )

    records = []
    for record_part in parts[8].split('/'):
        fields = record_part.split(';')[0].split(':')[0:6]
        score_val = float(fields[2]) if fields[2] else None
        records.append((
            oier_uid, int(fields[0]), int(fields[1]), score_val, int(fields[3]),
            decode_index(fields[4], PROVINCES), decode_index(fields[5], AWARD_LEVELS),
        ))
    return oier, records


def load_results_data(cursor, result_file):
    """从 result.txt 加载 OIer 和 Record 数据"""
    oiers_to_insert = []
    records_to_insert = []

    with open(result_file, 'r', encoding='utf-8') as f:
        lines = [line.strip() for line in f if line.strip()]

    for line in tqdm(lines, desc='result.txt'):
        oier, records = parse_result_line(line)
        oiers_to_insert.append(oier)
        records_to_insert.extend(records)

    cursor.executemany('INSERT INTO OIer (uid, initials, name, gender, enroll_middle, oierdb_score, ccf_score, ccf_level) VALUES (?, ?, ?, ?, ?, ?, ?, ?)', oiers_to_insert)
    cursor.executemany('INSERT INTO Record (oier_uid, contest_id, school_id, score, rank, province, level) VALUES (?, ?, ?, ?, ?, ?, ?)', records_to_insert)
    return len(oiers_to_insert), len(records_to_insert)


def build_database(db_file, dist_dir):
    if os.path.exists(db_file):
        os.remove(db_file)

    conn = sqlite3.connect(db_file)
    try:
        cursor = conn.cursor()
        create_tables(cursor)
        schools, contests = load_static_data(cursor, os.path.join(dist_dir, 'static.json'))
        tqdm.write(f"Inserted {schools} schools, {contests} contests.")
        oiers, records = load_results_data(cursor, os.path.join(dist_dir, 'result.txt'))
        tqdm.write(f"Inserted {oiers} OIers, {records} Records.")
        create_indexes(cursor)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="从 oierdb-data 生成 SQLite 数据库。")
    parser.add_argument('--dist', default=DIST_DIR, help=f"static.json 与 result.txt 所在目录 (默认为: {DIST_DIR})")
    parser.add_argument('-o', '--output', default=DB_FILE, help=f"输出的数据库文件 (默认为: {DB_FILE})")
    args = parser.parse_args(argv)

    try:
        build_database(args.output, args.dist)
    except (OSError, ValueError, KeyError, sqlite3.Error) as e:
        print(f"\nAn error occurred: {e}", file=sys.stderr)
        return 1

    print(f"\nDatabase '{args.output}' created and populated successfully!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
