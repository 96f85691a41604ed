"""
Base commune des schémas Pydantic : clés camelCase sur le fil, snake_case en Python.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(CamelModel):
    """Confirmation simple renvoyée par les opérations d'écriture."""
    message: str
