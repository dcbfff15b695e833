"""日志配置"""

import logging
import sys
from typing import Dict, Optional, Union

Level = Union[str, int]

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"

# 第三方客户端的请求日志过于冗长
DEFAULT_SILENCED = {"httpx": "WARNING", "httpcore": "WARNING", "openai": "WARNING"}


def _to_level(level: Level, default: int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), default)
    return level


def configure_logging(
    general_level: Level = "INFO",
    module_levels: Optional[Dict[str, Level]] = None,
    silenced_loggers: Optional[Dict[str, Level]] = None,
) -> None:
    """配置根 logger：单个 stderr handler，并按模块调整级别。"""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in (module_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.INFO))

    silenced = DEFAULT_SILENCED if silenced_loggers is None else silenced_loggers
    for name, level in silenced.items():
        logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))
