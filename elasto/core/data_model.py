__all__ = ["DataModel"]

from typing import Self

from pydantic import BaseModel, ConfigDict


class DataModel(BaseModel):
    """Data model."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    def to_dict(self, exclude_none: bool = False):
        return self.model_dump(exclude_none=exclude_none)

    def to_json(self, indent: int | None = None):
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_dict(cls, obj: dict | None) -> Self:
        return cls.model_validate(obj)
