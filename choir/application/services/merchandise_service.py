from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ...domain.errors import NotFoundError, ValidationError
from ...domain.models import Merchandise, MerchandiseCategory, MerchandiseStatus
from ...domain.models.merchandise import MERCHANDISE_SIZES
from ...domain.ports.persistence import MerchandiseRepository
from ..validation import parse_enum

logger = logging.getLogger(__name__)


def _validate_sizes(sizes: Any) -> List[str]:
    if not isinstance(sizes, list) or not sizes:
        raise ValidationError("At least one size is required.")
    unknown = [size for size in sizes if size not in MERCHANDISE_SIZES]
    if unknown:
        raise ValidationError(f"Invalid sizes: {', '.join(map(str, unknown))}.")
    return list(dict.fromkeys(sizes))


def _validate_price(price: Any) -> float:
    try:
        value = float(price)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Price must be a number.") from exc
    if value < 0:
        raise ValidationError("Price cannot be negative.")
    return value


class MerchandiseService:
    def __init__(self, merchandise: MerchandiseRepository) -> None:
        self._merchandise = merchandise

    def create(
        self,
        *,
        name: Optional[str],
        description: Optional[str],
        price: Any,
        sizes: Any,
        category: Optional[str],
        created_by: int,
        image: Optional[str] = None,
        stock: int = 0,
        status: Optional[str] = None,
    ) -> Merchandise:
        if not (name or "").strip() or not (description or "").strip() or price is None or not category:
            raise ValidationError("Name, description, price, sizes and category are required.")
        if stock is not None and stock < 0:
            raise ValidationError("Stock cannot be negative.")
        item = self._merchandise.create_merchandise(
            name=name.strip(),
            description=description.strip(),
            price=_validate_price(price),
            image=image,
            sizes=_validate_sizes(sizes),
            stock=stock or 0,
            category=parse_enum(MerchandiseCategory, category, "Category").value,
            status=parse_enum(MerchandiseStatus, status or MerchandiseStatus.AVAILABLE.value, "Status").value,
            created_by=created_by,
        )
        logger.info("Merchandise %s created by member %s", item.id, created_by)
        return item

    def list_merchandise(self, *, category: Optional[str] = None, status: Optional[str] = None) -> List[Merchandise]:
        return self._merchandise.list_merchandise(category=category, status=status)

    def get(self, merchandise_id: int) -> Merchandise:
        item = self._merchandise.get_merchandise(merchandise_id)
        if item is None:
            raise NotFoundError("Merchandise not found.")
        return item

    def update(self, merchandise_id: int, changes: Dict[str, Any]) -> Merchandise:
        self.get(merchandise_id)
        fields: Dict[str, Any] = {}
        for key, value in changes.items():
            if value is None:
                continue
            if key in ("name", "description"):
                if not str(value).strip():
                    raise ValidationError(f"{key.capitalize()} cannot be empty.")
                fields[key] = str(value).strip()
            elif key == "price":
                fields[key] = _validate_price(value)
            elif key == "sizes":
                fields[key] = _validate_sizes(value)
            elif key == "category":
                fields[key] = parse_enum(MerchandiseCategory, value, "Category").value
            elif key == "status":
                fields[key] = parse_enum(MerchandiseStatus, value, "Status").value
            elif key == "stock":
                if value < 0:
                    raise ValidationError("Stock cannot be negative.")
                fields[key] = value
            elif key == "image":
                fields[key] = value
        return self._merchandise.update_merchandise(merchandise_id, fields)

    def delete(self, merchandise_id: int) -> None:
        if not self._merchandise.delete_merchandise(merchandise_id):
            raise NotFoundError("Merchandise not found.")
        logger.info("Merchandise %s deleted", merchandise_id)
