from typing import List, Optional

from pydantic import Field

from .base import CamelPayload


class MerchandiseCreatePayload(CamelPayload):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    sizes: Optional[List[str]] = None
    category: Optional[str] = None
    image: Optional[str] = None
    stock: int = Field(default=0)
    status: Optional[str] = None


class MerchandiseUpdatePayload(CamelPayload):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    sizes: Optional[List[str]] = None
    category: Optional[str] = None
    image: Optional[str] = None
    stock: Optional[int] = None
    status: Optional[str] = None
