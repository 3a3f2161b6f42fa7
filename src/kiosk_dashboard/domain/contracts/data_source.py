"""Protocol for a polled data source."""

from typing import Protocol, TypeVar

from kiosk_dashboard.domain.models.source_health import SourceHealth

T_co = TypeVar("T_co", covariant=True)


class DataSourceProtocol(Protocol[T_co]):
    """A source that always answers, possibly with stale or empty data."""

    name: str

    async def fetch(self) -> T_co:
        """Return the freshest available data. Never raises for upstream faults."""
        ...

    def health(self) -> SourceHealth:
        """Report the outcome of the most recent fetch."""
        ...
