"""Contract between the report engine and the spreadsheet it writes to."""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, Sequence, runtime_checkable


@runtime_checkable
class SheetBackend(Protocol):
    """Asynchronous access to a spreadsheet made of titled tabs.

    Tab ids are stable integers. Lookups of unknown titles raise
    ``LookupError``.
    """

    async def list_tab_titles(self) -> List[str]:
        ...

    async def resolve_tab_id(self, title: str) -> int:
        ...

    async def fetch_tab_values(self, tab_id: int) -> List[List[Any]]:
        ...

    async def create_tab(self, title: str) -> int:
        ...

    async def delete_tab(self, title: str) -> None:
        ...

    async def append_values(self, title: str, rows: Sequence[Sequence[Any]]) -> None:
        ...

    async def update_values(self, updates: Sequence[Dict[str, Any]]) -> None:
        """Write ``{"range": "Title!A1", "values": [[...]]}`` entries."""
        ...

    async def batch_update(self, requests: Sequence[Dict[str, Any]]) -> None:
        ...
