"""
Pytest configuration and shared fixtures.
"""

import sqlite3

import pytest

from finder.schema import create_tables
from finder.store import Store

CONTESTS = [
    # id, name, type, year
    (0, 'NOIP2022提高', 'NOIP提高', 2022),
    (1, 'NOI2023', 'NOI', 2023),
    (2, 'CSP2023提高', 'CSP提高', 2023),
]

OIERS = [
    # uid, initials, name, gender, enroll_middle, oierdb_score, ccf_score, ccf_level
    (1, 'zs', '张三', 1, 2020, 90.0, 80.0, 8),
    (2, 'ls', '李四', -1, 2021, 80.0, 70.0, 7),
    (3, 'ww', '王五', 0, 2021, 70.0, 60.0, 6),
    (4, 'zl', '赵六', 1, 2022, 80.0, 65.0, 6),
    (5, 'sq', '孙七', 1, 2019, 60.0, 50.0, 5),
]

RECORDS = [
    # oier_uid, contest_id, score, rank, province, level
    (1, 0, 300.0, 5, '北京', '一等奖'),
    (1, 1, 500.0, 3, '北京', '金牌'),
    (2, 0, 200.0, 150, '上海', '二等奖'),
    (2, 2, 250.0, 40, '上海', '一等奖'),
    (3, 1, 400.0, 30, '浙江', '银牌'),
    (4, 2, 280.0, 10, '北京', '一等奖'),
]


def populate(conn, oiers=OIERS, contests=CONTESTS, records=RECORDS):
    cursor = conn.cursor()
    create_tables(cursor)
    cursor.executemany(
        'INSERT INTO Contest (id, name, type, year) VALUES (?, ?, ?, ?)', contests)
    cursor.executemany(
        'INSERT INTO OIer (uid, initials, name, gender, enroll_middle, oierdb_score, ccf_score, ccf_level) '
        'VALUES (?, ?, ?, ?, ?, ?, ?, ?)', oiers)
    cursor.executemany(
        'INSERT INTO Record (oier_uid, contest_id, school_id, score, rank, province, level) '
        'VALUES (?, ?, 0, ?, ?, ?, ?)', records)
    conn.commit()


class RecordingStore(Store):
    """记录每次执行的 SQL 和参数。"""

    def __init__(self, conn=None):
        super().__init__(conn)
        self.queries = []

    def execute(self, sql, values=()):
        self.queries.append((sql, list(values)))
        return super().execute(sql, values)

    def record_queries(self):
        return [q for q in self.queries if 'FROM Record' in q[0]]


@pytest.fixture
def db_path(tmp_path):
    """Create a small OIer database file."""
    path = tmp_path / 'oier_data.db'
    conn = sqlite3.connect(path)
    populate(conn)
    conn.close()
    return path


@pytest.fixture
def store():
    conn = sqlite3.connect(':memory:')
    populate(conn)
    s = RecordingStore(conn)
    yield s
    s.close()


@pytest.fixture
def make_store():
    """Build an in-memory store from custom rows."""
    stores = []

    def _make(oiers, records=(), contests=CONTESTS):
        conn = sqlite3.connect(':memory:')
        populate(conn, oiers=oiers, contests=contests, records=records)
        s = RecordingStore(conn)
        stores.append(s)
        return s

    yield _make
    for s in stores:
        s.close()
