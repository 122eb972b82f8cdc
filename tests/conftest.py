"""Shared fakes: transports that record calls and answer on demand."""

import asyncio

import httpx
import pytest


def json_response(data, status=200, **kwargs):
    return httpx.Response(status, json=data, **kwargs)


class FakeTransport:
    """Records calls; answers from a list of responses or exceptions.

    The last entry repeats once the list is exhausted.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    async def __call__(self, url, options=None):
        index = len(self.calls)
        self.calls.append((url, options))
        result = self.responses[min(index, len(self.responses) - 1)]
        if isinstance(result, BaseException):
            raise result
        if callable(result):
            result = result(url, options)
        return result

    def calls_to(self, url):
        return [call for call in self.calls if call[0] == url]


class GatedTransport:
    """Every call blocks until the test releases it, so tests pick the settle order.

    A call may be released before its transport coroutine has started.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.gates = []

    def _gate(self, index):
        while len(self.gates) <= index:
            self.gates.append(asyncio.Event())
        return self.gates[index]

    async def __call__(self, url, options=None):
        index = len(self.calls)
        self.calls.append((url, options))
        await self._gate(index).wait()
        result = self.responses[index]
        if isinstance(result, BaseException):
            raise result
        return result

    def release(self, index):
        self._gate(index).set()


@pytest.fixture
def states():
    """Collects every state delivered to an observer."""
    return []
