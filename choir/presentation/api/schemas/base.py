from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelPayload(BaseModel):
    """Request body accepting camelCase keys (and snake_case for convenience)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
