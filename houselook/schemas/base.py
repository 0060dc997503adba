# File: houselook/schemas/base.py
# Status: COMPLETE
# Dependencies: pydantic

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common config"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
