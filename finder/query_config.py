# query_config.py
"""
查询配置的规范表示。

YAML / 表单 / 洛谷格式最终都会被转换成 QueryConfig，查询引擎只接受这一种形状。
约定：字段缺失或为空列表都表示"不限制"。
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError, confloat, conint

from .errors import ConfigError

# SQLite INTEGER 的取值范围
INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


class FieldState(Enum):
    ABSENT = 'absent'
    EMPTY = 'empty'
    POPULATED = 'populated'


class FieldKind(Enum):
    RANGE = 'range'
    SET = 'set'


def _clean_bound(value):
    # 表单里的空字符串等同于不填；bool 是 int 的子类，这里不接受
    if isinstance(value, bool):
        raise ValueError("边界必须是数字")
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


IntBound = Annotated[Optional[conint(ge=INT64_MIN, le=INT64_MAX)], BeforeValidator(_clean_bound)]
FloatBound = Annotated[Optional[confloat(allow_inf_nan=False)], BeforeValidator(_clean_bound)]
SetValues = Optional[Union[str, List[Optional[Union[str, int, float]]]]]


class RecordConstraintInput(BaseModel):
    model_config = ConfigDict(extra='forbid')

    year_range: Optional[Tuple[IntBound, IntBound]] = None
    rank_range: Optional[Tuple[IntBound, IntBound]] = None
    score_range: Optional[Tuple[FloatBound, FloatBound]] = None
    province: SetValues = None
    contest_type: SetValues = None
    level_range: SetValues = None


class QueryConfigInput(BaseModel):
    model_config = ConfigDict(extra='forbid')

    enroll_year_range: Optional[Tuple[IntBound, IntBound]] = None
    grade_range: Optional[Tuple[IntBound, IntBound]] = None
    records: Optional[List[Optional[RecordConstraintInput]]] = None


def _validate(model, data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"查询配置格式错误: {problems}") from e


@dataclass(frozen=True)
class Bound:
    """闭区间 [min, max]，两端各自可选。"""

    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def state(self):
        if self.min is None and self.max is None:
            return FieldState.ABSENT
        return FieldState.POPULATED

    @property
    def is_open(self):
        return self.state is FieldState.ABSENT

    def conditions(self, column):
        conditions, values = [], []
        if self.min is not None:
            conditions.append(f"{column} >= ?")
            values.append(self.min)
        if self.max is not None:
            conditions.append(f"{column} <= ?")
            values.append(self.max)
        return conditions, values

    def intersect(self, other):
        """两个区间同时生效时的等价区间。"""
        mins = [v for v in (self.min, other.min) if v is not None]
        maxs = [v for v in (self.max, other.max) if v is not None]
        return Bound(max(mins) if mins else None, min(maxs) if maxs else None)

    def to_list(self):
        return [self.min, self.max]

    @classmethod
    def from_pair(cls, pair):
        if pair is None:
            return cls()
        return cls(*pair)


@dataclass(frozen=True)
class SetFilter:
    """取值集合过滤。values 为 None 表示未给出，空元组表示显式给出了空集合，两者都不做限制。"""

    values: Optional[Tuple[str, ...]] = None

    @property
    def state(self):
        if self.values is None:
            return FieldState.ABSENT
        if not self.values:
            return FieldState.EMPTY
        return FieldState.POPULATED

    @property
    def is_open(self):
        return self.state is not FieldState.POPULATED

    def conditions(self, column):
        if self.is_open:
            return [], []
        placeholders = ', '.join(['?'] * len(self.values))
        return [f"{column} IN ({placeholders})"], list(self.values)

    def to_list(self):
        return list(self.values or ())

    @classmethod
    def from_values(cls, raw):
        if raw is None:
            return cls()
        if isinstance(raw, str):
            raw = [raw]
        values = []
        for item in raw:
            if item is None:
                continue
            text = str(item).strip()
            if text and text not in values:
                values.append(text)
        return cls(tuple(values))


@dataclass(frozen=True)
class FieldSpec:
    name: str
    column: str
    kind: FieldKind


# Record 条件中每个字段对应的列，顺序即生成 SQL 条件的顺序
RECORD_FIELDS = (
    FieldSpec('year_range', 'c.year', FieldKind.RANGE),
    FieldSpec('score_range', 'r.score', FieldKind.RANGE),
    FieldSpec('rank_range', 'r.rank', FieldKind.RANGE),
    FieldSpec('province', 'r.province', FieldKind.SET),
    FieldSpec('level_range', 'r.level', FieldKind.SET),
    FieldSpec('contest_type', 'c.type', FieldKind.SET),
)


@dataclass(frozen=True)
class RecordConstraint:
    year_range: Bound = field(default_factory=Bound)
    rank_range: Bound = field(default_factory=Bound)
    score_range: Bound = field(default_factory=Bound)
    province: SetFilter = field(default_factory=SetFilter)
    contest_type: SetFilter = field(default_factory=SetFilter)
    level_range: SetFilter = field(default_factory=SetFilter)

    @property
    def is_open(self):
        return all(getattr(self, spec.name).is_open for spec in RECORD_FIELDS)

    @classmethod
    def from_dict(cls, data):
        return cls.from_input(_validate(RecordConstraintInput, data or {}))

    @classmethod
    def from_input(cls, model):
        if model is None:
            return cls()
        kwargs = {}
        for spec in RECORD_FIELDS:
            raw = getattr(model, spec.name)
            if spec.kind is FieldKind.RANGE:
                kwargs[spec.name] = Bound.from_pair(raw)
            else:
                kwargs[spec.name] = SetFilter.from_values(raw)
        return cls(**kwargs)

    def to_dict(self):
        result = {}
        # 输出顺序与表单一致
        for name in ('year_range', 'rank_range', 'score_range', 'province', 'contest_type', 'level_range'):
            value = getattr(self, name)
            if not value.is_open:
                result[name] = value.to_list()
        return result


def grade_to_enroll_range(grade_range, current_year):
    """年级区间换算成入学年份区间：入学年份 = 当前年份 - 年级 + 7。"""
    min_grade, max_grade = grade_range.min, grade_range.max
    return Bound(
        current_year - max_grade + 7 if max_grade is not None else None,
        current_year - min_grade + 7 if min_grade is not None else None,
    )


@dataclass(frozen=True)
class QueryConfig:
    enroll_year_range: Bound = field(default_factory=Bound)
    grade_range: Bound = field(default_factory=Bound)
    records: Tuple[RecordConstraint, ...] = ()

    @property
    def has_base_conditions(self):
        return not (self.enroll_year_range.is_open and self.grade_range.is_open)

    @property
    def is_empty(self):
        return not self.has_base_conditions and not self.records

    @classmethod
    def from_dict(cls, data):
        if data is None:
            return cls()
        if isinstance(data, QueryConfig):
            return data
        model = _validate(QueryConfigInput, data)
        return cls(
            enroll_year_range=Bound.from_pair(model.enroll_year_range),
            grade_range=Bound.from_pair(model.grade_range),
            records=tuple(RecordConstraint.from_input(item) for item in model.records or ()),
        )

    @classmethod
    def from_yaml(cls, text):
        try:
            data = yaml.safe_load(text) if text else None
        except yaml.YAMLError as e:
            raise ConfigError(f"解析 YAML 失败: {e}") from e
        return cls.from_dict(data)

    def normalized(self, current_year):
        """把年级条件换算进入学年份条件，得到实际执行的配置。"""
        if self.grade_range.is_open:
            return self
        enroll = self.enroll_year_range.intersect(grade_to_enroll_range(self.grade_range, current_year))
        return QueryConfig(enroll_year_range=enroll, records=self.records)

    def to_dict(self):
        """去掉所有不限制的字段，得到简洁的配置。"""
        result = {}
        if not self.enroll_year_range.is_open:
            result['enroll_year_range'] = self.enroll_year_range.to_list()
        if not self.grade_range.is_open:
            result['grade_range'] = self.grade_range.to_list()
        if self.records:
            # 不带任何条件的 record 仍然要求至少有一条记录，保留为空字典
            result['records'] = [record.to_dict() for record in self.records]
        return result

    def to_yaml(self):
        data = self.to_dict()
        if not data:
            return ''
        return yaml.dump(data, allow_unicode=True, sort_keys=False, default_flow_style=False)
