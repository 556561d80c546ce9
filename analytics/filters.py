"""Фильтрация заказов для экрана аналитики ресторана."""
import logging
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, tzinfo

from analytics.models import FilterState, Order, StatusBucket, status_bucket

logger = logging.getLogger(__name__)

DAY_START_MINUTES = 0
DAY_END_MINUTES = 23 * 60 + 59


def _local(moment: datetime, tz: tzinfo | None) -> datetime:
    # tz=None — локальная зона системы
    return moment.astimezone(tz)


def _start_of_day(day: date, tz: tzinfo | None) -> datetime:
    if tz is None:
        return datetime.combine(day, time.min).astimezone()
    return datetime.combine(day, time.min, tzinfo=tz)


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def in_date(order: Order, selected_date: date | None, tz: tzinfo | None = None) -> bool:
    """Заказ создан в выбранный день: [начало дня, начало следующего дня)"""
    if selected_date is None:
        return True
    try:
        start = _start_of_day(selected_date, tz)
    except OverflowError:
        return False
    try:
        end = _start_of_day(selected_date + timedelta(days=1), tz)
    except OverflowError:
        # последний представимый день: верхней границы нет
        return start <= order.created_at
    return start <= order.created_at < end


def in_time_range(
    order: Order,
    start_time: time | None,
    end_time: time | None,
    tz: tzinfo | None = None,
) -> bool:
    """
    Время создания заказа (часы и минуты) попадает в [start, end] включительно.
    Незаданные границы — 00:00 и 23:59.
    """
    if start_time is None and end_time is None:
        return True
    try:
        created = _local(order.created_at, tz)
    except OverflowError:
        # момент не представим в локальной зоне (у границ datetime)
        return False
    order_minutes = created.hour * 60 + created.minute
    start_minutes = _minutes(start_time) if start_time is not None else DAY_START_MINUTES
    end_minutes = _minutes(end_time) if end_time is not None else DAY_END_MINUTES
    return start_minutes <= order_minutes <= end_minutes


def has_restaurant_items(order: Order, restaurant_name: str) -> bool:
    """Хотя бы одна позиция заказа принадлежит ресторану"""
    return any(item.matches(restaurant_name) for item in order.items)


def in_status(order: Order, status: StatusBucket | None) -> bool:
    if status is None:
        return True
    return status_bucket(order.status) == status


def filter_orders(
    all_orders: Iterable[Order],
    restaurant_name: str,
    filters: FilterState,
    tz: tzinfo | None = None,
) -> list[Order]:
    """
    Отбирает заказы ресторана по дате, времени суток и статусу.

    Порядок заказов сохраняется. Заказ остаётся, даже если большая часть
    его позиций из других ресторанов: агрегатор фильтрует позиции сам.

    Args:
        all_orders: заказы, прошедшие проверку при загрузке
        restaurant_name: отображаемое имя ресторана
        filters: текущие фильтры
        tz: зона для дня и времени суток; None — локальная зона системы
    """
    result = [
        order
        for order in all_orders
        if in_date(order, filters.selected_date, tz)
        and in_time_range(order, filters.start_time, filters.end_time, tz)
        and has_restaurant_items(order, restaurant_name)
        and in_status(order, filters.status)
    ]

    logger.debug(
        "orders_filtered",
        extra={"restaurant": restaurant_name, "kept": len(result)}
    )
    return result
