from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PayloadModel(BaseModel):
    """Base for models that serialize into platform wire JSON (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> Dict[str, Any]:
        """Return the wire representation, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
