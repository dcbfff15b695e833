"""
Alt Text Agent - 基于 Playwright + axe-core + Gemini 的图片替代文本修复工具

流程：
  1. 扫描 (Scanner)        - 在页面中注入并运行 axe-core，只检查 image-alt 规则
  2. 生成 (ModelGateway)   - 把图片和违规上下文交给模型，生成替代文本
  3. 写回 (PageController) - 把结果写入 alt 属性

依赖安装：
    pip install -e .
    playwright install chromium

运行示例：
    alt-text-agent set-key <GEMINI_API_KEY>
    alt-text-agent run https://example.com --output fixed.html
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from playwright.async_api import async_playwright

from alt_agent import AltAgentError, PassReport, load_config, run_remediation_pass
from alt_agent.config import API_KEY_SETTING, SettingsStore
from alt_agent.logging_config import configure_logging

logger = logging.getLogger("alt_text_agent")


async def remediate_url(
    url: str,
    headless: bool = True,
    output: Optional[Path] = None,
    store: Optional[SettingsStore] = None,
) -> PassReport:
    """
    打开页面并执行一次修复流程。
    配置在启动浏览器之前加载，缺少 Key 时不会发起任何请求。
    """
    config = await load_config(store)
    config.require_api_key()

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            await page.goto(url, wait_until="load")

            report = await run_remediation_pass(page, config)

            if output is not None:
                output.write_text(await page.content(), encoding="utf-8")
                logger.info("已保存修复后的页面: %s", output)
        finally:
            await browser.close()

    return report


def _mask(key: str) -> str:
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}{'*' * (len(key) - 8)}{key[-4:]}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="alt-text-agent", description="为网页中缺少 alt 的图片生成替代文本")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--settings", type=Path, default=None, help="设置文件路径")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="扫描并修复页面")
    run.add_argument("url")
    run.add_argument("--headed", action="store_true", help="显示浏览器窗口")
    run.add_argument("--output", type=Path, default=None, help="保存修复后的 HTML")
    run.add_argument("--report", type=Path, default=None, help="保存 JSON 报告")

    set_key = sub.add_parser("set-key", help="保存 Gemini API Key")
    set_key.add_argument("key")

    sub.add_parser("show-key", help="显示已保存的 API Key")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    store = SettingsStore(args.settings)

    if args.command == "set-key":
        store.set(API_KEY_SETTING, args.key)
        print(f"✓ API Key 已保存到 {store.path}")
        return 0

    if args.command == "show-key":
        key = store.get(API_KEY_SETTING)
        if not key:
            print("(未设置)")
            return 1
        print(_mask(key))
        return 0

    try:
        report = asyncio.run(remediate_url(args.url, headless=not args.headed, output=args.output, store=store))
    except AltAgentError as e:
        logger.error("修复流程中止: %s", e)
        return 1

    logger.info("结果: %s", report.summary())
    for item in report.needs_review:
        logger.info("需要人工复核: %s (%s)", item.element, item.help)

    if args.report is not None:
        args.report.write_text(json.dumps(dataclasses.asdict(report), ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("已保存报告: %s", args.report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
