from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

MERCHANDISE_SIZES = ("XS", "S", "M", "L", "XL", "XXL", "One Size")


class MerchandiseCategory(str, Enum):
    TSHIRT = "tshirt"
    BAND = "band"
    HOODIE = "hoodie"


class MerchandiseStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    DISCONTINUED = "discontinued"


@dataclass(slots=True)
class Merchandise:
    id: int
    name: str
    description: str
    price: float
    image: Optional[str]
    sizes: List[str]
    stock: int
    category: str
    status: str
    created_by: int
    created_at: datetime
    updated_at: datetime

    @property
    def is_available(self) -> bool:
        return self.status == MerchandiseStatus.AVAILABLE.value
