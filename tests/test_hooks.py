"""
Test Suite: Lifecycle Hooks
on_page, on_return, on_error and on_max_consecutive_errors
"""

import pytest

from conftest import PageServer
from lazy_paginate import PaginationHooks, paginate


class TestOnPage:
    """on_page runs before every fetch"""

    @pytest.mark.asyncio
    async def test_called_with_each_request(self, server, recorder):
        await paginate(
            server.by_offset, strategy="offset", limit=10, error_policy={"type": "throw"}, hooks=recorder.hooks()
        ).to_list()

        assert recorder.named("page") == [
            ("page", {"limit": 10, "offset": 0}),
            ("page", {"limit": 10, "offset": 10}),
            ("page", {"limit": 10, "offset": 20}),
        ]
        assert recorder.events[-1] == ("return",)

    @pytest.mark.asyncio
    async def test_awaited_before_fetch(self):
        """Async on_page completes before the fetch it announces"""
        events = []

        async def on_page(request):
            events.append(f"page:{request.page}")

        async def fetch(request):
            events.append(f"fetch:{request.page}")
            return {"items": [request.page], "pageInfo": {"hasNextPage": request.page < 2}}

        await paginate(
            fetch, strategy="page", limit=1, error_policy={"type": "throw"}, hooks={"onPage": on_page}
        ).to_list()

        assert events == ["page:1", "fetch:1", "page:2", "fetch:2"]

    @pytest.mark.asyncio
    async def test_on_page_error_propagates(self):
        """An on_page failure is not handled by the error policy"""
        source = PageServer(range(10))

        def on_page(request):
            raise RuntimeError("on_page broke")

        with pytest.raises(RuntimeError, match="on_page broke"):
            await paginate(
                source.by_offset,
                strategy="offset",
                limit=5,
                error_policy={"type": "continue", "max_error_count": 5},
                hooks={"on_page": on_page},
            ).to_list()

        assert source.calls == 0

    @pytest.mark.asyncio
    async def test_on_page_error_on_later_page(self):
        """Items already delivered stay delivered; on_return is not called"""
        source = PageServer(range(10))
        returned = []

        def on_page(request):
            if request.offset > 0:
                raise RuntimeError("second page refused")

        pagination = paginate(
            source.by_offset,
            strategy="offset",
            limit=5,
            error_policy={"type": "break"},
            hooks={"on_page": on_page, "on_return": lambda: returned.append(True)},
        )

        received = []
        with pytest.raises(RuntimeError):
            async for item in pagination:
                received.append(item)

        assert received == [0, 1, 2, 3, 4]
        assert returned == []


class TestOnReturn:
    """on_return fires exactly once on completion"""

    @pytest.mark.asyncio
    async def test_fires_once_after_last_page(self, server, recorder):
        await paginate(
            server.by_page, strategy="page", limit=10, error_policy={"type": "throw"}, hooks=recorder.hooks()
        ).to_list()

        assert recorder.named("return") == [("return",)]

    @pytest.mark.asyncio
    async def test_not_fired_when_consumer_stops_early(self, server, recorder):
        """Abandoning iteration performs no further fetches or hooks"""
        result = await paginate(
            server.by_offset, strategy="offset", limit=10, error_policy={"type": "throw"}, hooks=recorder.hooks()
        ).take(3).to_list()

        assert result == ["item-0", "item-1", "item-2"]
        assert server.calls == 1
        assert recorder.named("return") == []
        assert len(recorder.named("page")) == 1

    @pytest.mark.asyncio
    async def test_hooks_model_instance(self, server):
        calls = []
        hooks = PaginationHooks(on_return=lambda: calls.append("done"))

        await paginate(
            server.by_offset, strategy="offset", limit=10, error_policy={"type": "throw"}, hooks=hooks
        ).to_list()

        assert calls == ["done"]


class TestFailingErrorHooks:
    """Errors raised by on_error / on_max_consecutive_errors stop pagination cleanly"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("policy", [{"type": "break"}, {"type": "continue", "max_error_count": 5}])
    async def test_on_error_failure_stops_cleanly(self, policy):
        source = PageServer(range(20), fail_on={2})
        returned = []

        def on_error(error):
            raise ValueError("on_error broke")

        result = await paginate(
            source.by_offset,
            strategy="offset",
            limit=5,
            error_policy=policy,
            hooks={"on_error": on_error, "on_return": lambda: returned.append(True)},
        ).to_list()

        assert result == [0, 1, 2, 3, 4]
        assert source.calls == 2
        assert returned == [True]

    @pytest.mark.asyncio
    async def test_on_max_consecutive_errors_failure_stops_cleanly(self):
        source = PageServer(range(20), fail_always=True)
        returned = []

        async def on_max(error, context):
            raise ValueError("on_max broke")

        result = await paginate(
            source.by_offset,
            strategy="offset",
            limit=5,
            error_policy={"type": "continue", "max_error_count": 2},
            hooks={"on_max_consecutive_errors": on_max, "on_return": lambda: returned.append(True)},
        ).to_list()

        assert result == []
        assert source.calls == 2
        assert returned == [True]
