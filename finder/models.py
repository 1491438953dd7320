# models.py
from dataclasses import dataclass, asdict
from enum import IntEnum


class Gender(IntEnum):
    MALE = 1
    FEMALE = -1
    UNKNOWN = 0

    @property
    def label(self):
        return {1: '男', -1: '女', 0: '未知'}[self.value]


@dataclass(frozen=True)
class OIer:
    """OIer 表中的一行。只读，查询引擎不会修改它。"""

    uid: int
    initials: str
    name: str
    gender: Gender
    enroll_middle: int
    oierdb_score: float
    ccf_score: float
    ccf_level: int

    @classmethod
    def from_row(cls, row):
        row = dict(row)
        try:
            gender = Gender(row.get('gender') or 0)
        except ValueError:
            gender = Gender.UNKNOWN
        return cls(
            uid=row['uid'],
            initials=row.get('initials'),
            name=row['name'],
            gender=gender,
            enroll_middle=row.get('enroll_middle'),
            oierdb_score=row.get('oierdb_score') or 0.0,
            ccf_score=row.get('ccf_score') or 0.0,
            ccf_level=row.get('ccf_level'),
        )

    def to_dict(self):
        data = asdict(self)
        data['gender'] = int(self.gender)
        return data
