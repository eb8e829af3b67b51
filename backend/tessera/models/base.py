"""
Shared pydantic base model.

Planner records are persisted and exchanged with camelCase keys
(``startMinutes``, ``weekStartIso`` ...). Python code keeps snake_case names.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
