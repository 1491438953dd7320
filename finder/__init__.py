from .errors import ConfigError, ExecutionError, FinderError, StoreUnavailableError
from .finder_engine import ENUMERATE_THRESHOLD, FinderEngine, FindResult, find_oiers
from .models import Gender, OIer
from .query_config import Bound, QueryConfig, RecordConstraint, SetFilter
from .store import Store

__all__ = [
    'Bound', 'ConfigError', 'ENUMERATE_THRESHOLD', 'ExecutionError', 'FindResult',
    'FinderEngine', 'FinderError', 'Gender', 'OIer', 'QueryConfig', 'RecordConstraint',
    'SetFilter', 'Store', 'StoreUnavailableError', 'find_oiers',
]
