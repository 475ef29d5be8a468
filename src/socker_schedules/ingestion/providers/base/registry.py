from __future__ import annotations

from collections.abc import Iterable, Iterator

from .errors import UnknownSource
from .types import FetchStrategy, SourceConfig


class SourceRegistry:
    """
    Fixed set of schedule sources, built once at startup.

    Iteration and `list_sources()` follow registration order.
    """

    def __init__(self, sources: Iterable[SourceConfig]) -> None:
        self._sources: dict[str, SourceConfig] = {}
        for source in sources:
            if source.id in self._sources:
                raise ValueError(f"Duplicate source registration: {source.id}")
            self._sources[source.id] = source

    def list_sources(self) -> list[str]:
        return list(self._sources)

    def get(self, source_id: str) -> SourceConfig:
        source = self._sources.get(source_id)
        if source is None:
            raise UnknownSource(source_id)
        return source

    def strategy_for(self, source_id: str) -> FetchStrategy:
        return self.get(source_id).strategy

    def __iter__(self) -> Iterator[SourceConfig]:
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._sources
