"""模型网关：封装远程生成模型的调用"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from .config import AppConfig, GenerationConfig
from .errors import ModelError
from .models import ImagePayload

logger = logging.getLogger(__name__)


class ModelGateway:
    """
    每次请求都是一次全新的会话：消息列表现场构建，不在请求之间复用。
    失败时抛出 ModelError，绝不返回部分或猜测的文本。
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        generation: Optional[GenerationConfig] = None,
        timeout: float = 60.0,
    ):
        self.client = client
        self.model = model
        self.generation = generation or GenerationConfig()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: AppConfig) -> "ModelGateway":
        # max_retries=0：每次远程调用只尝试一次
        client = AsyncOpenAI(
            api_key=config.require_api_key(),
            base_url=config.base_url,
            timeout=config.request_timeout,
            max_retries=0,
        )
        return cls(client, config.model, config.generation, config.request_timeout)

    def _start_session(self, prompt: str, image: Optional[ImagePayload]) -> List[Dict[str, Any]]:
        if image is None:
            return [{"role": "user", "content": prompt}]

        data_url = f"data:{image.mime_type};base64,{image.base64_data}"
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": data_url}},
                ],
            }
        ]

    async def ask(self, prompt: str, image: Optional[ImagePayload] = None) -> str:
        messages = self._start_session(prompt, image)
        gen = self.generation
        response_type = "text" if gen.response_mime_type == "text/plain" else "json_object"

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    temperature=gen.temperature,
                    top_p=gen.top_p,
                    max_tokens=gen.max_output_tokens,
                    response_format={"type": response_type},
                    extra_body={"top_k": gen.top_k},
                    messages=messages,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ModelError(f"模型调用超时（{self.timeout}s）", cause=e) from e
        except OpenAIError as e:
            raise ModelError("模型调用失败", cause=e) from e

        return self._extract_text(response)

    @staticmethod
    def _extract_text(response: Any) -> str:
        if response is None:
            raise ModelError("模型没有返回响应")

        choices = getattr(response, "choices", None)
        if not choices:
            raise ModelError("模型响应中没有候选结果")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise ModelError("模型响应中没有可提取的文本")

        return content.strip()
