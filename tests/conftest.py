"""
Pytest configuration and shared fixtures.

Puts the project root on the Python path so the tests import lazy_paginate
from the working tree, and provides in-memory paginated sources.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest


class FetchFailed(Exception):
    """Simulated fetch failure"""
    pass


class PageServer:
    """
    In-memory paginated data source.

    Serves ``items`` by offset, page number or cursor and records the params
    of every request. Calls listed in ``fail_on`` (1-based call numbers)
    raise FetchFailed; ``fail_always`` makes every call fail.
    """

    def __init__(self, items, fail_on=(), fail_always=False):
        self.items = list(items)
        self.fail_on = set(fail_on)
        self.fail_always = fail_always
        self.requests = []

    @property
    def calls(self):
        return len(self.requests)

    def _record(self, request):
        self.requests.append(request.to_params())
        if self.fail_always or self.calls in self.fail_on:
            raise FetchFailed(f"call {self.calls} failed")

    def _slice(self, start, limit):
        end = start + limit
        return {
            "items": self.items[start:end],
            "pageInfo": {"hasNextPage": end < len(self.items)},
        }

    async def by_offset(self, request):
        self._record(request)
        return self._slice(request.offset, request.limit)

    async def by_page(self, request):
        self._record(request)
        return self._slice((request.page - 1) * request.limit, request.limit)

    async def by_cursor(self, request):
        self._record(request)
        start = int(request.cursor) if request.cursor is not None else 0
        end = start + request.limit
        has_next = end < len(self.items)
        return {
            "items": self.items[start:end],
            "page_info": {
                "has_next_page": has_next,
                "next_cursor": str(end) if has_next else None,
            },
        }


class HookRecorder:
    """Records hook invocations in call order"""

    def __init__(self):
        self.events = []

    def on_page(self, request):
        self.events.append(("page", request.to_params()))

    async def on_return(self):
        self.events.append(("return",))

    async def on_error(self, error):
        self.events.append(("error", error))

    def on_max_consecutive_errors(self, error, context):
        self.events.append(("max_errors", error, context))

    def named(self, name):
        return [event for event in self.events if event[0] == name]

    def hooks(self):
        return {
            "on_page": self.on_page,
            "on_return": self.on_return,
            "on_error": self.on_error,
            "on_max_consecutive_errors": self.on_max_consecutive_errors,
        }


@pytest.fixture
def items25():
    return [f"item-{i}" for i in range(25)]


@pytest.fixture
def server(items25):
    return PageServer(items25)


@pytest.fixture
def recorder():
    return HookRecorder()


@pytest.fixture
def numbers():
    return PageServer(range(100))
