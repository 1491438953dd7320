# errors.py
"""查询过程中可能抛出的异常。"""


class FinderError(Exception):
    """所有查询异常的基类，stage 记录出错的阶段。"""

    def __init__(self, message, stage=None):
        super().__init__(message)
        self.stage = stage

    def __str__(self):
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class ConfigError(FinderError):
    """查询配置格式错误（例如非数字的边界）。"""


class StoreUnavailableError(FinderError):
    """数据库尚未连接或已关闭。"""


class ExecutionError(FinderError):
    """数据库执行查询失败，原始异常保存在 __cause__ 中。"""
