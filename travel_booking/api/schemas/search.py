from typing import Any

from pydantic import BaseModel, ConfigDict


class SearchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: str
    source: str
    offers: list[dict[str, Any]]
