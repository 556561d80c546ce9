"""Проверка сырых документов заказов на входе в аналитику."""
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from analytics.models import UNKNOWN_ITEM, LineItem, Order, OrderStatus

logger = logging.getLogger(__name__)

VALID_STATUSES = frozenset(status.value for status in OrderStatus)


def _is_number(value: Any) -> bool:
    # bool — подкласс int, но числом для нас не является
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _quantity(value: Any) -> int:
    if not _is_number(value):
        return 0
    try:
        quantity = int(value)
    except (ValueError, OverflowError):  # nan, inf
        return 0
    return quantity if quantity >= 0 else 0


def _price(value: Any) -> Decimal:
    if not _is_number(value):
        return Decimal("0")
    # через str, чтобы 0.1 не превращался в 0.1000000000000000055...
    price = value if isinstance(value, Decimal) else Decimal(str(value))
    if not price.is_finite() or price < 0:
        return Decimal("0")
    return price


def _text(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def parse_line_item(raw: Mapping[str, Any]) -> LineItem:
    """
    Позиция заказа из документа.

    Отсутствующие и некорректные поля получают значения по умолчанию:
    quantity → 0, price → 0, itemName → "Unknown Item", miniResName → "".
    """
    return LineItem(
        restaurant_name=_text(raw.get("miniResName"), ""),
        item_name=_text(raw.get("itemName"), UNKNOWN_ITEM),
        quantity=_quantity(raw.get("quantity")),
        price=_price(raw.get("price")),
    )


def parse_timestamp(value: Any) -> datetime | None:
    """
    Момент создания заказа: epoch в миллисекундах, ISO-8601 или datetime.
    Наивные значения считаются UTC. Точность — до миллисекунд.
    """
    if isinstance(value, datetime):
        moment = value
    elif _is_number(value):
        try:
            moment = datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value)
        except ValueError:
            return None
    else:
        return None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def parse_order(raw: Mapping[str, Any]) -> Order | None:
    """
    Заказ из документа или None, если документ структурно некорректен.

    Обязательные поля: id, items (список объектов), orderStatus
    (один из пяти статусов), createdAt.
    """
    order_id = raw.get("id")
    items = raw.get("items")
    status = raw.get("orderStatus")
    created_at = parse_timestamp(raw.get("createdAt"))

    reason = None
    if not isinstance(order_id, str) or not order_id:
        reason = "bad_id"
    elif not isinstance(items, list) or not all(isinstance(i, Mapping) for i in items):
        reason = "bad_items"
    elif status not in VALID_STATUSES:
        reason = "bad_status"
    elif created_at is None:
        reason = "bad_created_at"

    if reason is not None:
        logger.warning("order_skipped", extra={"order_id": order_id, "reason": reason})
        return None

    try:
        return Order(
            id=order_id,
            items=[parse_line_item(item) for item in items],
            status=OrderStatus(status),
            created_at=created_at,
        )
    except ValidationError as e:
        logger.warning("order_skipped", extra={"order_id": order_id, "reason": str(e)})
        return None


def parse_orders(raws: Iterable[Mapping[str, Any]]) -> list[Order]:
    """Отбрасывает некорректные документы, остальные сохраняют порядок"""
    orders = []
    skipped = 0
    for raw in raws:
        order = parse_order(raw) if isinstance(raw, Mapping) else None
        if order is None:
            skipped += 1
            continue
        orders.append(order)

    if skipped:
        logger.info("orders_parsed", extra={"parsed": len(orders), "skipped": skipped})
    return orders
