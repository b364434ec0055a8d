from dataclasses import asdict, is_dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CustomBaseModel(BaseModel):
    """Custom base model for all schemas.
    - camelCase on the wire (walletAddress), snake_case in python
    - accepts snake_case input too
    - helper to build a schema from a store record
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_record(cls, record: Any):
        if is_dataclass(record) and not isinstance(record, type):
            data = asdict(record)
        elif isinstance(record, dict):
            data = dict(record)
        else:
            raise ValueError(f"Invalid record type: {type(record)}")
        return cls(**{k: v for k, v in data.items() if k in cls.model_fields})


class ErrorResponse(BaseModel):
    error: str
    message: str
