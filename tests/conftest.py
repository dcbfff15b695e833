import asyncio
from types import SimpleNamespace

import pytest

from alt_agent import AppConfig


class FakeElement:
    def __init__(self, src="", alt=None):
        self.src = src
        self.attrs = {}
        if alt is not None:
            self.attrs["alt"] = alt
        self.set_calls = 0

    async def get_attribute(self, name):
        return self.attrs.get(name)

    async def evaluate(self, js, arg=None):
        if "setAttribute" in js:
            self.set_calls += 1
            self.attrs["alt"] = arg
            return None
        if "currentSrc" in js:
            return self.src
        raise AssertionError(f"unexpected script: {js}")


class FakeResponse:
    def __init__(self, body=b"\x89PNG", status=200, content_type="image/png"):
        self._body = body
        self.status = status
        self.ok = 200 <= status < 300
        self.headers = {"content-type": content_type} if content_type else {}

    async def body(self):
        return self._body


class FakeRequest:
    def __init__(self):
        self.responses = {}
        self.calls = []

    async def get(self, url, timeout=None):
        self.calls.append(url)
        result = self.responses.get(url, FakeResponse())
        if isinstance(result, Exception):
            raise result
        return result


class FakePage:
    def __init__(self, elements=None, axe_payload=None, axe_loaded=True, url="https://example.test/"):
        self.url = url
        self.elements = elements or {}
        self.request = FakeRequest()
        self.axe_payload = axe_payload
        self.axe_loaded = axe_loaded
        self.evaluate_calls = []
        self.script_tags = []
        self.scan_args = None

    async def evaluate(self, js, arg=None):
        self.evaluate_calls.append(js)
        if "!!window.axe" in js:
            return self.axe_loaded
        self.scan_args = arg
        return self.axe_payload

    async def add_script_tag(self, **kwargs):
        self.script_tags.append(kwargs)
        self.axe_loaded = True

    async def query_selector(self, selector):
        return self.elements.get(selector)


class FakeGateway:
    """ask() 的替身：无图片的调用视为帮助摘要请求"""

    def __init__(self, image_responses=None, help_response="Decorative images get empty alt."):
        self.image_responses = list(image_responses or [])
        self.help_response = help_response
        self.help_calls = []
        self.image_calls = []

    async def ask(self, prompt, image=None):
        if image is None:
            self.help_calls.append(prompt)
            result = self.help_response
        else:
            self.image_calls.append((prompt, image))
            result = self.image_responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def calls(self):
        return len(self.help_calls) + len(self.image_calls)


class FakeCompletions:
    def __init__(self, content=None, error=None, delay=0.0):
        self.content = content
        self.error = error
        self.delay = delay
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def make_client(**kwargs):
    completions = FakeCompletions(**kwargs)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def axe_payload(violations=(), incomplete=(), inapplicable=()):
    return {
        "ok": True,
        "results": {
            "violations": list(violations),
            "incomplete": list(incomplete),
            "inapplicable": list(inapplicable),
        },
    }


def image_alt_violation(*nodes, help_url="https://dequeuniversity.com/rules/axe/4.10/image-alt", impact="critical"):
    return {
        "id": "image-alt",
        "description": "Ensures <img> elements have alternate text or a role of none or presentation",
        "helpUrl": help_url,
        "impact": impact,
        "nodes": [{"html": html, "target": list(target)} for html, target in nodes],
    }


@pytest.fixture
def config():
    return AppConfig(api_key="test-key")
