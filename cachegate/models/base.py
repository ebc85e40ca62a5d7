"""JsonModel base class for API communication."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class JsonModel(BaseModel):
    """Base model for API communication with camelCase/snake_case conversion.

    - Wire format uses camelCase (``sessionId``, ``taskDurationMs``)
    - Internal Python uses snake_case
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(self, by_alias: bool = True) -> dict[str, Any]:
        """JSON-ready dict in wire format, with unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=by_alias, exclude_none=True)
