"""FundSpark — Shared response schema base."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Pydantic schema that speaks camelCase on the wire.

    Accepts both snake_case and camelCase on input and can be built
    straight from table rows.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
