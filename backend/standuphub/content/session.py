"""Rendering bound to content that keeps changing.

While a report is being edited the content can change again before the
lookups for the previous version come back. A render session only keeps the
result of the newest request and drops anything that finishes late.
"""

from typing import Optional, Union

import structlog

from standuphub.content.document import ContentDocument
from standuphub.content.parser import ContentParser, ParseResult

logger = structlog.get_logger()


class ContentRenderSession:
    """Keeps the latest render of a changing document.

    Example:
        ```python
        session = ContentRenderSession(ContentParser(store))
        result = await session.update(content)
        if result is None:
            pass  # a newer update superseded this one
        ```
    """

    def __init__(self, parser: ContentParser):
        self.parser = parser
        self.result: Optional[ParseResult] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def update(self, content: Union[str, ContentDocument, None]) -> Optional[ParseResult]:
        """Render new content and publish it unless a newer update started meanwhile.

        Returns:
            The result, or None when it was discarded as stale
        """
        self._generation += 1
        generation = self._generation

        result = await self.parser.parse(content)

        if generation != self._generation:
            logger.debug(
                "stale_render_discarded",
                generation=generation,
                current_generation=self._generation,
            )
            return None

        self.result = result
        return result

    def cancel(self) -> None:
        """Drop whatever render is in flight."""
        self._generation += 1
