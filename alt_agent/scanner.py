"""扫描模块：在页面中运行 axe-core，并规整其结果"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from playwright.async_api import Error as PlaywrightError, Page

from .config import AXE_CDN_URL
from .errors import ScanError
from .models import RuleSummary, ScanResult, Violation, ViolationNode

logger = logging.getLogger(__name__)

RESULT_TYPES = ["violations", "incomplete", "inapplicable"]


class Scanner:
    """
    扫描模块：注入 axe-core 并执行扫描。
    不修改 DOM，只返回 ScanResult。
    """

    def __init__(self, page: Page, axe_script_url: str = AXE_CDN_URL, axe_script_path: Optional[str] = None):
        self.page = page
        self.axe_script_url = axe_script_url
        self.axe_script_path = axe_script_path

    async def _ensure_axe(self):
        """页面中没有 window.axe 时注入脚本"""
        try:
            if await self.page.evaluate("() => !!window.axe"):
                return
            if self.axe_script_path:
                await self.page.add_script_tag(path=self.axe_script_path)
            else:
                await self.page.add_script_tag(url=self.axe_script_url)
            loaded = await self.page.evaluate("() => !!window.axe")
        except PlaywrightError as e:
            raise ScanError("注入 axe-core 失败", cause=e) from e

        if not loaded:
            raise ScanError("axe-core 已注入但 window.axe 不存在")

    async def scan(self, rule_filter: Optional[Set[str]] = None) -> ScanResult:
        """
        执行扫描。始终请求 violations / incomplete / inapplicable 三类结果；
        给定 rule_filter 时只运行这些规则。
        """
        await self._ensure_axe()

        js_code = """
        async ({ ruleIds, resultTypes }) => {
            const options = { resultTypes };
            if (ruleIds && ruleIds.length) {
                options.runOnly = { type: 'rule', values: ruleIds };
            }

            const pickRule = (rule) => ({
                id: rule.id,
                description: rule.description,
                helpUrl: rule.helpUrl,
                impact: rule.impact || null,
                nodes: (rule.nodes || []).map(node => ({
                    html: node.html,
                    target: node.target,
                })),
            });

            try {
                const r = await window.axe.run(document, options);
                return {
                    ok: true,
                    results: {
                        violations: r.violations.map(pickRule),
                        incomplete: r.incomplete.map(pickRule),
                        inapplicable: r.inapplicable.map(rule => ({
                            id: rule.id,
                            description: rule.description,
                        })),
                    },
                };
            } catch (e) {
                return { error: (e && e.message) || String(e) };
            }
        }
        """

        args = {"ruleIds": sorted(rule_filter) if rule_filter else [], "resultTypes": RESULT_TYPES}
        try:
            payload = await self.page.evaluate(js_code, args)
        except PlaywrightError as e:
            raise ScanError("axe.run 执行失败", cause=e) from e

        if not payload:
            raise ScanError("axe.run 没有返回结果")
        if payload.get("error"):
            raise ScanError(f"axe.run 报告错误: {payload['error']}")

        results = payload.get("results")
        if not isinstance(results, dict):
            raise ScanError("axe.run 返回的结果格式无效")

        return parse_scan_result(results)


def _normalize_target(target: Iterable[Any]) -> List[str]:
    """
    iframe / shadow DOM 中的节点 target 是嵌套数组，只保留最内层选择器。
    Playwright 的 CSS 引擎会穿透 open shadow root。
    """
    selectors = []
    for item in target or []:
        if isinstance(item, (list, tuple)):
            if item:
                selectors.append(str(item[-1]))
        elif item:
            selectors.append(str(item))
    return selectors


def _parse_violation(raw: Dict[str, Any]) -> Violation:
    nodes = tuple(
        ViolationNode(html=node.get("html", ""), target=tuple(_normalize_target(node.get("target"))))
        for node in raw.get("nodes") or []
    )
    return Violation(
        id=raw.get("id", ""),
        description=raw.get("description", ""),
        help_url=raw.get("helpUrl", ""),
        impact=raw.get("impact"),
        nodes=nodes,
    )


def parse_scan_result(results: Dict[str, Any]) -> ScanResult:
    """把 axe-core 的结果对象转换为 ScanResult"""
    return ScanResult(
        violations=tuple(_parse_violation(v) for v in results.get("violations") or []),
        incomplete=tuple(_parse_violation(v) for v in results.get("incomplete") or []),
        inapplicable=tuple(
            RuleSummary(id=r.get("id", ""), description=r.get("description", ""))
            for r in results.get("inapplicable") or []
        ),
    )
