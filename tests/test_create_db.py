"""
Tests for create_db.py - building the SQLite dataset.
"""

import json

import pytest

import create_db
from finder import Store, find_oiers


@pytest.fixture
def dist_dir(tmp_path):
    dist = tmp_path / 'dist'
    dist.mkdir()
    static = {
        'schools': [['一中', '北京', '北京', 10.0]],
        'contests': [
            {'name': 'NOI2023', 'type': 'NOI', 'year': 2023, 'fall_semester': False, 'full_score': 700},
            {'name': 'CSP2023提高', 'type': 'CSP提高', 'year': 2023, 'fall_semester': True, 'full_score': 400},
        ],
    }
    (dist / 'static.json').write_text(json.dumps(static, ensure_ascii=False), encoding='utf-8')
    (dist / 'result.txt').write_text(
        "1,zs,张三,1,2020,90.5,80,8,0:0:500:3:1:0/1:0:300:5:1:3\n"
        "\n"
        "2,ls,李四,-1,2021,70,60,6,1:0::40:21:4;extra\n",
        encoding='utf-8',
    )
    return dist


def test_parse_result_line():
    oier, records = create_db.parse_result_line("7,ab,某人,0,2019,1.5,2,3,0:1:100:9:0:99")
    assert oier == (7, 'ab', '某人', 0, 2019, 1.5, 2.0, 3)
    # 越界的奖项索引保留原文
    assert records == [(7, 0, 1, 100.0, 9, '安徽', '99')]


def test_parse_result_line_malformed():
    with pytest.raises(ValueError):
        create_db.parse_result_line("1,zs,张三")


def test_build_database(tmp_path, dist_dir):
    db_file = tmp_path / 'oier_data.db'
    create_db.build_database(str(db_file), str(dist_dir))

    with Store.open(db_file, readonly=True) as store:
        assert store.execute("SELECT COUNT(*) FROM Record")[0][0] == 3
        record = store.execute("SELECT province, level, score FROM Record WHERE oier_uid = 2")[0]
        assert tuple(record) == ('上海', '二等奖', None)

        result = find_oiers({'records': [{'contest_type': ['NOI'], 'level_range': ['金牌']}]}, store)
        assert [o.name for o in result.oiers] == ['张三']


def test_main_reports_missing_input(tmp_path, capsys):
    code = create_db.main(['--dist', str(tmp_path / 'nothing'), '-o', str(tmp_path / 'x.db')])
    assert code == 1
    assert 'An error occurred' in capsys.readouterr().err
