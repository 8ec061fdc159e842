from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable


class ColumnRegistry:
    """Lazily resolved, process-lifetime list of displayable attribute names.

    The first non-empty column list wins; later publications are ignored.
    """

    def __init__(
        self,
        source: Callable[[], Awaitable[Iterable[str]]],
        excluded: Iterable[str] = (),
    ) -> None:
        self._source = source
        self._excluded = frozenset(excluded)
        self._columns: tuple[str, ...] | None = None

    @property
    def cached(self) -> tuple[str, ...] | None:
        return self._columns

    async def columns(self) -> tuple[str, ...]:
        if self._columns is not None:
            return self._columns
        return self.publish(await self._source())

    def publish(self, columns: Iterable[str]) -> tuple[str, ...]:
        resolved = tuple(column for column in columns if column not in self._excluded)
        if resolved and self._columns is None:
            self._columns = resolved
        return self._columns if self._columns is not None else resolved
