"""执行模块：解析选择器、读写 alt 属性、下载图片"""

import base64
import binascii
import logging
import mimetypes
from typing import Optional
from urllib.parse import unquote, unquote_to_bytes

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from .errors import FetchError
from .models import ImagePayload

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/png"


class PageController:
    """执行模块：页面上唯一的写操作是设置 alt 属性"""

    def __init__(self, page: Page, fetch_timeout: float = 30.0):
        self.page = page
        self.fetch_timeout = fetch_timeout

    async def resolve(self, selector: str) -> Optional[ElementHandle]:
        """每次都重新解析，扫描之后 DOM 可能已经变化"""
        return await self.page.query_selector(selector)

    async def read_alt(self, element: ElementHandle) -> Optional[str]:
        return await element.get_attribute("alt")

    async def image_source(self, element: ElementHandle) -> str:
        src = await element.evaluate("el => el.currentSrc || el.src || el.getAttribute('src') || ''")
        return src or ""

    async def set_alt(self, element: ElementHandle, text: str):
        # 空字符串也显式写入，标记为装饰性图片
        await element.evaluate("(el, value) => el.setAttribute('alt', value)", text)

    async def fetch_image(self, url: str) -> ImagePayload:
        """下载图片并编码为 base64"""
        if not url:
            raise FetchError("图片没有 src")

        if url.startswith("data:"):
            return _decode_data_url(url)

        try:
            response = await self.page.request.get(url, timeout=self.fetch_timeout * 1000)
        except PlaywrightError as e:
            raise FetchError(f"下载图片失败: {url}", cause=e) from e

        if not response.ok:
            raise FetchError(f"下载图片失败: {url} (HTTP {response.status})")

        try:
            body = await response.body()
        except PlaywrightError as e:
            raise FetchError(f"读取图片内容失败: {url}", cause=e) from e

        mime_type = (response.headers.get("content-type") or "").split(";")[0].strip()
        if not mime_type:
            mime_type = mimetypes.guess_type(url)[0] or DEFAULT_IMAGE_MIME

        logger.debug("已下载图片 %s (%d bytes, %s)", url, len(body), mime_type)
        return ImagePayload(mime_type=mime_type, base64_data=base64.b64encode(body).decode("ascii"))


def _decode_data_url(url: str) -> ImagePayload:
    """内联 data: URL 无需网络请求"""
    try:
        header, data = url[len("data:"):].split(",", 1)
    except ValueError as e:
        raise FetchError("data: URL 格式无效", cause=e) from e

    parts = header.split(";")
    mime_type = parts[0] or DEFAULT_IMAGE_MIME
    if "base64" in parts[1:]:
        # 允许百分号编码和换行折叠的内容
        data = "".join(unquote(data).split())
        try:
            base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise FetchError("data: URL 的 base64 内容无效", cause=e) from e
        return ImagePayload(mime_type=mime_type, base64_data=data)

    raw = unquote_to_bytes(data)
    return ImagePayload(mime_type=mime_type, base64_data=base64.b64encode(raw).decode("ascii"))
