"""缓存模块：规则帮助文档摘要"""

from typing import Awaitable, Callable, Dict, Optional


class HelpAnalysisCache:
    """
    helpUrl -> 摘要文本的进程级缓存。

    - 只在计算成功后写入，失败的计算不会污染缓存
    - 不淘汰、不过期
    - 并发未命中同一个 key 时可能重复计算，后写入者覆盖
    """

    def __init__(self):
        self._entries: Dict[str, str] = {}

    async def get_or_compute(self, key: str, compute: Callable[[], Awaitable[str]]) -> str:
        if key in self._entries:
            return self._entries[key]

        value = await compute()
        self._entries[key] = value
        return value

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
