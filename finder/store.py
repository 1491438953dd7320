# store.py
"""
只读的 SQLite 数据源。

数据库在进程启动时打开一次，之后只做查询；每次查询使用独立的游标，
无论成功还是出错都会关闭。
"""
import logging
import sqlite3
from contextlib import closing
from pathlib import Path

from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)

# 旧版 SQLite 单条语句最多 999 个参数
DEFAULT_MAX_VARIABLES = 999


class Store:

    def __init__(self, conn=None):
        self.conn = conn
        self.query_count = 0
        if conn is not None:
            conn.row_factory = sqlite3.Row

    @classmethod
    def open(cls, path, readonly=False):
        try:
            if readonly:
                conn = sqlite3.connect(Path(path).resolve().as_uri() + "?mode=ro", uri=True)
            else:
                conn = sqlite3.connect(path)
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"无法打开数据库 '{path}': {e}") from e
        logger.info("opened database %s", path)
        return cls(conn)

    @property
    def is_open(self):
        return self.conn is not None

    @property
    def max_variables(self):
        if self.conn is not None and hasattr(self.conn, 'getlimit'):
            return self.conn.getlimit(sqlite3.SQLITE_LIMIT_VARIABLE_NUMBER)
        return DEFAULT_MAX_VARIABLES

    def execute(self, sql, values=()):
        """执行一条查询并返回全部行。"""
        if self.conn is None:
            raise StoreUnavailableError("数据库尚未连接")
        self.query_count += 1
        logger.debug("[Query #%d] %s %s", self.query_count, sql, list(values))
        with closing(self.conn.cursor()) as cursor:
            cursor.execute(sql, list(values))
            rows = cursor.fetchall()
        logger.debug("→ 返回 %d 行", len(rows))
        return rows

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
