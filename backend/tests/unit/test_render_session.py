"""
Unit Tests for render sessions over changing content
"""
import asyncio

from standuphub.content.parser import ContentParser
from standuphub.content.session import ContentRenderSession


class TestContentRenderSession:
    """Test only the newest render is kept"""

    async def test_update_publishes_result(self, make_store):
        session = ContentRenderSession(ContentParser(make_store()))

        result = await session.update("- one")

        assert result is not None
        assert result.markup == "<ul><li>one</li></ul>"
        assert session.result is result
        assert session.generation == 1

    async def test_late_result_is_discarded(self, gated_store):
        session = ContentRenderSession(ContentParser(gated_store))

        first = asyncio.create_task(session.update("Working on #TASK-11"))
        await asyncio.sleep(0)

        second = await session.update("Working on #TASK-22")
        gated_store.gate.set()

        assert await first is None
        assert second is not None
        assert "#22" in second.markup
        assert session.result is second

    async def test_cancel_drops_in_flight_render(self, gated_store):
        session = ContentRenderSession(ContentParser(gated_store))

        pending = asyncio.create_task(session.update("#TASK-11"))
        await asyncio.sleep(0)
        session.cancel()
        gated_store.gate.set()

        assert await pending is None
        assert session.result is None

    async def test_sequential_updates_replace_result(self, make_store):
        session = ContentRenderSession(ContentParser(make_store()))

        await session.update("first")
        latest = await session.update("second")

        assert session.result is latest
        assert latest.markup == "<p>second</p>"
        assert session.generation == 2
