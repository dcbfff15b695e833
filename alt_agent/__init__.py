"""Alt Text Agent 包

包含各个模块：
- models: 数据模型
- scanner: 扫描模块（axe-core）
- cache: 帮助文档摘要缓存
- prompts: 提示词模板
- gateway: 模型网关
- controller: 执行模块（DOM 读写、图片下载）
- pipeline: 修复流程
- config: 配置
"""

from .models import (
    AltTextResult,
    ImagePayload,
    NodeOutcome,
    NodeState,
    PassReport,
    RemediationRequest,
    ReviewItem,
    RuleSummary,
    ScanResult,
    Violation,
    ViolationNode,
)
from .errors import AltAgentError, ConfigError, FetchError, ModelError, ScanError
from .config import AppConfig, GenerationConfig, SettingsStore, load_config
from .cache import HelpAnalysisCache
from .prompts import build_help_prompt, build_image_prompt
from .gateway import ModelGateway
from .scanner import Scanner
from .controller import PageController
from .pipeline import RemediationPipeline, run_remediation_pass

__all__ = [
    "AltTextResult",
    "ImagePayload",
    "NodeOutcome",
    "NodeState",
    "PassReport",
    "RemediationRequest",
    "ReviewItem",
    "RuleSummary",
    "ScanResult",
    "Violation",
    "ViolationNode",
    "AltAgentError",
    "ConfigError",
    "FetchError",
    "ModelError",
    "ScanError",
    "AppConfig",
    "GenerationConfig",
    "SettingsStore",
    "load_config",
    "HelpAnalysisCache",
    "build_help_prompt",
    "build_image_prompt",
    "ModelGateway",
    "Scanner",
    "PageController",
    "RemediationPipeline",
    "run_remediation_pass",
]
