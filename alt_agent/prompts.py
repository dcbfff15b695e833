"""提示词模板：纯函数，无副作用"""

from .models import RemediationRequest

# 替代文本的建议长度上限
ALT_TEXT_SOFT_LIMIT = 125


def build_help_prompt(help_url: str) -> str:
    """要求模型总结规则帮助文档中的修复要点。"""
    return (
        "Summarize the key requirements and best practices for fixing the "
        f"axe-core violation at this URL: {help_url}. "
        "Focus on brevity, conciseness, and the distinction between decorative "
        "and informative images."
    )


def build_image_prompt(request: RemediationRequest, help_summary: str) -> str:
    """
    根据违规详情和帮助摘要生成图片描述提示词。
    要求模型只输出替代文本本身。
    """
    return (
        "You are an accessibility expert (WCAG 2.1, 2.2). "
        f"You've already analyzed axe-core rule: {request.help_url}.\n\n"
        f"Based on this pre-analysis (key points: {help_summary}), "
        "and considering the following violation details:\n\n"
        f"- Type: {request.violation_id}\n"
        f"- Impact: {request.impact}\n"
        f"- Context (HTML): {request.html}\n\n"
        "Generate ONLY the alt text (no explanations, no quotes, just the text) "
        f"for the image. Be concise (under {ALT_TEXT_SOFT_LIMIT} characters if possible), "
        "and prioritize the image's *purpose* within the context. "
        "If decorative, output an empty string (\"\"). "
        "If informative, be brief but accurate. "
        "If it's an image inside a link, describe the link's *destination*."
    )
