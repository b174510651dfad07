"""
Shared pydantic configuration for the camelCase wire format.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base schema whose JSON keys are camelCase.
    Python code keeps snake_case field names; both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class MessageResponse(CamelModel):
    """Plain acknowledgement body."""

    message: str
