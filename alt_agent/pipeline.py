"""修复流程：扫描 -> 逐节点生成替代文本 -> 写回 DOM"""

import logging
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError, Page

from .cache import HelpAnalysisCache
from .config import AppConfig
from .controller import PageController
from .errors import AltAgentError, FetchError, ModelError
from .gateway import ModelGateway
from .models import (
    AltTextResult,
    NodeOutcome,
    NodeState,
    PassReport,
    RemediationRequest,
    ReviewItem,
    ScanResult,
    Violation,
)
from .prompts import build_help_prompt, build_image_prompt
from .scanner import Scanner

logger = logging.getLogger(__name__)


def normalize_alt_text(text: str) -> str:
    """去掉模型偶尔包裹的一对引号；单独的 "" 视为空字符串"""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("\"", "'"):
        inner = text[1:-1]
        # 内部还有同样的引号时说明引号属于正文，原样保留
        if text[0] not in inner:
            text = inner.strip()
    return text


class RemediationPipeline:
    """
    修复流程的编排器。

    每个选择器独立经过 Pending -> Resolving -> {Applied, Skipped, Failed}。
    单个节点的失败只记录日志，不会中止整个流程；
    ScanError / ConfigError 直接抛给调用方。
    """

    def __init__(
        self,
        page: Page,
        config: AppConfig,
        cache: Optional[HelpAnalysisCache] = None,
        gateway: Optional[ModelGateway] = None,
        scanner: Optional[Scanner] = None,
        controller: Optional[PageController] = None,
    ):
        self.page = page
        self.config = config
        self.cache = cache if cache is not None else HelpAnalysisCache()
        self.gateway = gateway
        self.scanner = scanner or Scanner(page, config.axe_script_url, config.axe_script_path)
        self.controller = controller or PageController(page, config.fetch_timeout)

    async def run(self) -> PassReport:
        # 没有 Key 时在任何扫描、下载、模型调用之前中止
        self.config.require_api_key()
        if self.gateway is None:
            self.gateway = ModelGateway.from_config(self.config)

        rule_id = self.config.rule_id
        scan = await self.scanner.scan({rule_id})
        logger.info(
            "扫描完成: %d 条违规, %d 条待复核, %d 条不适用规则",
            len(scan.violations), len(scan.incomplete), len(scan.inapplicable),
        )

        report = PassReport(url=getattr(self.page, "url", None))
        for violation in scan.violations:
            if violation.id != rule_id:
                continue
            for node in violation.nodes:
                for selector in node.target:
                    outcome = await self._remediate(violation, node.html, selector)
                    report.outcomes.append(outcome)

        report.needs_review = self._review_items(scan)
        report.not_applicable = list(scan.inapplicable)
        logger.info("修复流程结束: %s", report.summary())
        return report

    async def _remediate(self, violation: Violation, html: str, selector: str) -> NodeOutcome:
        outcome = NodeOutcome(selector=selector, violation_id=violation.id)
        try:
            await self._remediate_target(violation, html, outcome)
        except PlaywrightError as e:
            self._fail(outcome, e)
        return outcome

    async def _remediate_target(self, violation: Violation, html: str, outcome: NodeOutcome):
        outcome.state = NodeState.RESOLVING
        element = await self.controller.resolve(outcome.selector)
        if element is None:
            self._skip(outcome, "element not found")
            return

        existing = await self.controller.read_alt(element)
        if existing and existing.strip():
            self._skip(outcome, "alt already present")
            return

        image_url = await self.controller.image_source(element)
        try:
            image = await self.controller.fetch_image(image_url)
        except FetchError as e:
            self._fail(outcome, e)
            return

        request = RemediationRequest(
            image_url=image_url,
            violation_id=violation.id,
            impact=violation.impact,
            html=html,
            help_url=violation.help_url,
        )
        help_summary = await self._help_summary(request.help_url)
        prompt = build_image_prompt(request, help_summary)

        try:
            text = await self.gateway.ask(prompt, image)
        except ModelError as e:
            self._fail(outcome, e)
            return

        alt_text = normalize_alt_text(text)
        await self.controller.set_alt(element, alt_text)
        outcome.state = NodeState.APPLIED
        outcome.result = AltTextResult(text=alt_text, applied=True)
        if alt_text:
            logger.info("✓ %s alt=%r", outcome.selector, alt_text)
        else:
            logger.info("✓ %s 为装饰性图片，alt 置空", outcome.selector)

    async def _help_summary(self, help_url: str) -> str:
        """摘要失败不致命，降级为空字符串"""
        if not help_url:
            return ""

        async def compute() -> str:
            return await self.gateway.ask(build_help_prompt(help_url))

        try:
            return await self.cache.get_or_compute(help_url, compute)
        except ModelError as e:
            logger.warning("帮助文档摘要失败，继续生成: %s", e)
            return ""

    def _skip(self, outcome: NodeOutcome, reason: str):
        outcome.state = NodeState.SKIPPED
        outcome.reason = reason
        logger.debug("跳过 %s: %s", outcome.selector, reason)

    def _fail(self, outcome: NodeOutcome, error: Exception):
        outcome.state = NodeState.FAILED
        outcome.result = AltTextResult(text="", applied=False)
        outcome.reason = str(error)
        level = logging.WARNING if isinstance(error, AltAgentError) else logging.ERROR
        logger.log(level, "❌ %s 修复失败: %s", outcome.selector, error)

    def _review_items(self, scan: ScanResult) -> List[ReviewItem]:
        """incomplete 结果只做人工复核报告，不自动修复"""
        items = []
        for rule in scan.incomplete:
            if rule.id != self.config.rule_id:
                continue
            for node in rule.nodes:
                items.append(ReviewItem(
                    element=node.html,
                    impact=rule.impact,
                    reason=rule.description,
                    help=rule.help_url,
                ))
        if items:
            logger.info("%d 张图片需要人工复核", len(items))
        return items


async def run_remediation_pass(
    page: Page,
    config: AppConfig,
    *,
    cache: Optional[HelpAnalysisCache] = None,
    gateway: Optional[ModelGateway] = None,
    scanner: Optional[Scanner] = None,
) -> PassReport:
    """对已加载的页面执行一次修复流程"""
    pipeline = RemediationPipeline(page, config, cache=cache, gateway=gateway, scanner=scanner)
    return await pipeline.run()
