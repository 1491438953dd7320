# schema.py
"""数据库表结构与索引。"""

TABLES = {
    # 学校表 (School)
    'School': '''
    CREATE TABLE School (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        province TEXT,
        city TEXT,
        score REAL
    )
    ''',
    # 比赛表 (Contest)
    'Contest': '''
    CREATE TABLE Contest (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        type TEXT,
        year INTEGER,
        fall_semester BOOLEAN,
        full_score INTEGER
    )
    ''',
    # 选手表 (OIer)
    'OIer': '''
    CREATE TABLE OIer (
        uid INTEGER PRIMARY KEY,
        initials TEXT,
        name TEXT NOT NULL,
        gender INTEGER,
        enroll_middle INTEGER,
        oierdb_score REAL,
        ccf_score REAL,
        ccf_level INTEGER
    )
    ''',
    # 记录表 (Record)
    'Record': '''
    CREATE TABLE Record (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        oier_uid INTEGER,
        contest_id INTEGER,
        school_id INTEGER,
        score REAL,
        rank INTEGER,
        province TEXT,
        level TEXT,
        FOREIGN KEY(oier_uid) REFERENCES OIer(uid),
        FOREIGN KEY(contest_id) REFERENCES Contest(id),
        FOREIGN KEY(school_id) REFERENCES School(id)
    )
    ''',
}

INDEXES = [
    # 枚举模式下按 oier_uid 取记录，覆盖过滤所需的全部字段
    "CREATE INDEX IF NOT EXISTS idx_record_oier_covering ON Record(oier_uid, contest_id, level, score, rank, province)",
    # 首个条件通常按比赛筛选
    "CREATE INDEX IF NOT EXISTS idx_record_contest ON Record(contest_id, level, province)",
    "CREATE INDEX IF NOT EXISTS idx_contest_type_year ON Contest(type, year)",
    "CREATE INDEX IF NOT EXISTS idx_oier_enroll ON OIer(enroll_middle)",
    "CREATE INDEX IF NOT EXISTS idx_oier_score ON OIer(oierdb_score DESC)",
]


def create_tables(cursor):
    """创建数据库表结构"""
    for sql in TABLES.values():
        cursor.execute(sql)


def create_indexes(cursor):
    for sql in INDEXES:
        cursor.execute(sql)
