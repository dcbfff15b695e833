"""配置：生成参数、API Key 来源与本地设置存储"""

import asyncio
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

# 设置存储中 API Key 的键名
API_KEY_SETTING = "geminiApiKey"
API_KEY_ENV = "GEMINI_API_KEY"

DEFAULT_MODEL = "gemini-2.0-pro-exp-02-05"
GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
AXE_CDN_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"
DEFAULT_SETTINGS_PATH = Path.home() / ".alt_agent" / "settings.json"


@dataclass
class GenerationConfig:
    temperature: float = 1.0
    top_p: float = 0.95
    top_k: int = 64
    max_output_tokens: int = 8192
    response_mime_type: str = "text/plain"


@dataclass
class AppConfig:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: str = GEMINI_OPENAI_BASE_URL
    rule_id: str = "image-alt"
    # 单次远程调用超时（秒），不做重试
    request_timeout: float = 60.0
    fetch_timeout: float = 30.0
    axe_script_url: str = AXE_CDN_URL
    axe_script_path: Optional[str] = None
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigError(
                f"未配置 API Key：请设置环境变量 {API_KEY_ENV}，"
                f"或运行 `alt-text-agent set-key <KEY>` 保存到设置中"
            )
        return self.api_key


class SettingsStore:
    """基于 JSON 文件的键值设置存储"""

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            env_path = os.environ.get("ALT_AGENT_SETTINGS")
            path = Path(env_path) if env_path else DEFAULT_SETTINGS_PATH
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("读取设置文件失败 %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        logger.debug("已保存设置 %s -> %s", key, self.path)


async def load_config(store: Optional[SettingsStore] = None, use_dotenv: bool = True) -> AppConfig:
    """
    加载配置。API Key 优先取环境变量，其次取设置存储。
    此处不校验 Key 是否存在，由流程在发起远程调用前检查。
    """
    if use_dotenv:
        load_dotenv()

    config = AppConfig()
    config.model = os.environ.get("GEMINI_MODEL", config.model)
    config.axe_script_path = os.environ.get("AXE_SCRIPT_PATH") or None

    api_key = os.environ.get(API_KEY_ENV)
    if not api_key:
        store = store or SettingsStore()
        api_key = await asyncio.to_thread(store.get, API_KEY_SETTING)
        if api_key:
            logger.debug("从设置存储读取 API Key: %s", store.path)
    config.api_key = api_key or None
    return config
