"""错误类型

- ScanError:   axe-core 扫描失败，整次流程中止
- ConfigError: 缺少 API Key，在任何网络请求之前中止
- FetchError:  图片下载失败，仅影响单个节点
- ModelError:  模型调用失败或返回无法提取的文本，仅影响单个节点
"""

from typing import Optional


class AltAgentError(Exception):
    """所有错误的基类"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} ({self.cause})"
        return self.message


class ScanError(AltAgentError):
    pass


class ConfigError(AltAgentError):
    pass


class FetchError(AltAgentError):
    pass


class ModelError(AltAgentError):
    pass
