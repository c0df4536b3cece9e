"""
Shared schema base and collaborator summaries.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserSummary(CamelModel):
    id: int
    username: str
    nickname: str
    profile_image: Optional[str] = None


class ProductSummary(CamelModel):
    id: int
    title: str
    price: int
    status: str
    image_url: Optional[str] = None
    seller_id: int
