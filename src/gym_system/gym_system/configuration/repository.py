from __future__ import annotations

from typing import Any, Optional, Protocol


class ConfigRepository(Protocol):
    """Stores the single gym configuration document."""

    def get_document(self) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    def save_document(self, document: dict[str, Any]) -> None:
        raise NotImplementedError
