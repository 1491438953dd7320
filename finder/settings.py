# settings.py
import os

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError
from .finder_engine import ENUMERATE_THRESHOLD

DEFAULT_SETTINGS_FILE = 'settings.yml'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='OIERFINDER_', extra='forbid', case_sensitive=False)

    database: str = 'oier_data.db'
    mapping: str = 'name_mapping.yml'
    enumerate_threshold: int = Field(ENUMERATE_THRESHOLD, ge=1)
    log_level: str = 'WARNING'

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings,
                                   dotenv_settings, file_secret_settings):
        # 环境变量优先于 settings.yml
        return env_settings, init_settings


def load_settings(path=DEFAULT_SETTINGS_FILE):
    """读取 YAML 配置文件，文件不存在时使用默认值；OIERFINDER_* 环境变量优先。"""
    data = {}
    if path and os.path.exists(path):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"解析配置文件 '{path}' 失败: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"配置文件 '{path}' 格式错误")

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"配置文件 '{path}' 有误: {e}") from e
