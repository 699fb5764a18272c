from typing import Any, Protocol


class SearchProviderError(Exception):
    """El proveedor no respondió o respondió algo inutilizable."""

    def __init__(self, provider: str, error_code: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider
        self.error_code = error_code


class SearchProvider(Protocol):
    name: str

    async def search_offers(self, criteria: dict[str, Any]) -> list[dict[str, Any]]:
        """Raises SearchProviderError si el proveedor falla."""
        ...
