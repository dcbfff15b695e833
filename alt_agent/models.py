"""数据模型定义"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ViolationNode:
    """违规规则命中的单个节点"""
    html: str  # 序列化后的 HTML 片段
    target: Tuple[str, ...]  # CSS 选择器，修复时再解析，不做缓存


@dataclass(frozen=True)
class Violation:
    """axe-core 报告的一条规则违规"""
    id: str
    description: str
    help_url: str
    impact: Optional[str]  # minor|moderate|serious|critical
    nodes: Tuple[ViolationNode, ...] = ()


@dataclass(frozen=True)
class RuleSummary:
    """不适用规则的摘要"""
    id: str
    description: str


@dataclass(frozen=True)
class ScanResult:
    """一次扫描的结果，创建后不可变"""
    violations: Tuple[Violation, ...] = ()
    incomplete: Tuple[Violation, ...] = ()
    inapplicable: Tuple[RuleSummary, ...] = ()


@dataclass
class RemediationRequest:
    """单个 (图片 URL, 节点) 的修复请求，用完即弃"""
    image_url: str
    violation_id: str
    impact: Optional[str]
    html: str
    help_url: str


@dataclass
class ImagePayload:
    """随请求附带的内联图片"""
    mime_type: str
    base64_data: str


@dataclass
class AltTextResult:
    """生成结果；text 为空且 applied 为 True 表示装饰性图片"""
    text: str
    applied: bool


class NodeState(str, Enum):
    PENDING = "pending"
    RESOLVING = "resolving"
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class NodeOutcome:
    """单个选择器的处理结果"""
    selector: str
    violation_id: str
    state: NodeState = NodeState.PENDING
    result: Optional[AltTextResult] = None
    reason: Optional[str] = None


@dataclass
class ReviewItem:
    """需要人工复核的 incomplete 节点"""
    element: str
    impact: Optional[str]
    reason: str
    help: str


@dataclass
class PassReport:
    """一次修复流程的报告"""
    url: Optional[str] = None
    outcomes: List[NodeOutcome] = field(default_factory=list)
    needs_review: List[ReviewItem] = field(default_factory=list)
    not_applicable: List[RuleSummary] = field(default_factory=list)

    def _with_state(self, state: NodeState) -> List[NodeOutcome]:
        return [o for o in self.outcomes if o.state == state]

    @property
    def fixed(self) -> List[NodeOutcome]:
        return self._with_state(NodeState.APPLIED)

    @property
    def failed(self) -> List[NodeOutcome]:
        return self._with_state(NodeState.FAILED)

    @property
    def skipped(self) -> List[NodeOutcome]:
        return self._with_state(NodeState.SKIPPED)

    def summary(self) -> str:
        return (
            f"fixed={len(self.fixed)} failed={len(self.failed)} "
            f"skipped={len(self.skipped)} needs_review={len(self.needs_review)} "
            f"not_applicable={len(self.not_applicable)}"
        )
