# finder_engine.py
"""
OIer 查询引擎。

流程：先按入学年份在 OIer 表上筛出初始候选集合，再逐条处理 record 条件，
每条条件在 Record JOIN Contest 上查出满足的 uid 并与候选集合求交。
候选人数少于 ENUMERATE_THRESHOLD 后进入枚举模式，之后的查询都限定在候选 uid 内。
"""
import logging
import sqlite3
from dataclasses import dataclass
from datetime import date
from typing import List, NamedTuple

from .errors import ExecutionError, StoreUnavailableError
from .models import OIer
from .query_config import QueryConfig, RECORD_FIELDS

logger = logging.getLogger(__name__)

ENUMERATE_THRESHOLD = 20

RECORD_VIEW = "Record r JOIN Contest c ON r.contest_id = c.id"


class Predicate(NamedTuple):
    where: str
    values: list


@dataclass
class FindResult:
    oiers: List[OIer]
    config: QueryConfig


def build_where_clause_and_values(constraint):
    """把一条 record 条件编译成 WHERE 子句和参数，没有任何条件时为 1=1。"""
    conditions, values = [], []
    for spec in RECORD_FIELDS:
        field_conditions, field_values = getattr(constraint, spec.name).conditions(spec.column)
        conditions.extend(field_conditions)
        values.extend(field_values)
    return Predicate(" AND ".join(conditions) if conditions else "1=1", values)


def _in_clause(column, uids):
    placeholders = ', '.join(['?'] * len(uids))
    return f"{column} IN ({placeholders})"


class FinderEngine:
    """持有数据库句柄的查询引擎，每次 find 互不影响。"""

    def __init__(self, store, threshold=ENUMERATE_THRESHOLD, today=None):
        self.store = store
        self.threshold = threshold
        self.today = today

    def current_year(self):
        return (self.today or date.today()).year

    def _lookup(self, stage, sql, values):
        if self.store is None:
            raise StoreUnavailableError("数据库尚未连接", stage=stage)
        try:
            return self.store.execute(sql, values)
        except StoreUnavailableError as e:
            e.stage = stage
            raise
        except (sqlite3.Error, OverflowError) as e:
            # OverflowError: 整数超出 SQLite INTEGER 范围，绑定参数时抛出
            raise ExecutionError(f"执行查询失败: {e}", stage=stage) from e

    def filter_base(self, config):
        """按入学年份筛选，没有条件时返回 None（表示全体，尚未计算）。"""
        conditions, values = config.enroll_year_range.conditions('enroll_middle')
        if not conditions:
            return None
        where_clause = " AND ".join(conditions)
        rows = self._lookup('base filter', f"SELECT uid FROM OIer WHERE {where_clause}", values)
        return {row[0] for row in rows}

    def narrow_candidates(self, records, candidates):
        candidate_uids = set(candidates) if candidates is not None else None
        enumeration_mode = candidate_uids is not None and len(candidate_uids) < self.threshold

        for index, constraint in enumerate(records, 1):
            if candidate_uids is not None and not candidate_uids:
                # 候选为空，结果已经确定
                break
            where_clause, values = build_where_clause_and_values(constraint)
            if enumeration_mode and candidate_uids:
                where_clause += " AND " + _in_clause('r.oier_uid', candidate_uids)
                values = values + sorted(candidate_uids)
            query = f"SELECT DISTINCT r.oier_uid FROM {RECORD_VIEW} WHERE {where_clause}"
            rows = self._lookup(f"record constraint #{index}", query, values)
            matched = {row[0] for row in rows}

            if candidate_uids is None:
                candidate_uids = matched
            else:
                candidate_uids &= matched
            logger.debug("record constraint #%d: %d matched, %d candidates left",
                         index, len(matched), len(candidate_uids))

            if not enumeration_mode and len(candidate_uids) < self.threshold:
                enumeration_mode = True
        return candidate_uids

    def materialize(self, config, candidates):
        if config.is_empty:
            rows = self._lookup('materialize', "SELECT * FROM OIer ORDER BY oierdb_score DESC, uid ASC", [])
        elif not candidates:
            return []
        else:
            uids = sorted(candidates)
            limit = self.store.max_variables
            rows = []
            for start in range(0, len(uids), limit):
                chunk = uids[start:start + limit]
                query = f"SELECT * FROM OIer WHERE {_in_clause('uid', chunk)} ORDER BY oierdb_score DESC, uid ASC"
                rows.extend(self._lookup('materialize', query, chunk))
            if len(uids) > limit:
                rows.sort(key=lambda row: (-(row['oierdb_score'] or 0), row['uid']))
        return [OIer.from_row(row) for row in rows]

    def find(self, config) -> FindResult:
        config = QueryConfig.from_dict(config).normalized(self.current_year())
        candidates = self.filter_base(config)
        candidates = self.narrow_candidates(config.records, candidates)
        oiers = self.materialize(config, candidates)
        logger.info("found %d OIers with %d record constraints", len(oiers), len(config.records))
        return FindResult(oiers, config)


def find_oiers(config, store, today=None) -> FindResult:
    return FinderEngine(store, today=today).find(config)
