from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, PlainSerializer


UNKNOWN_ITEM = "Unknown Item"

# В JSON сумма уходит числом; в Python остаётся Decimal
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class StatusBucket(str, Enum):
    PENDING = "pending"         # ожидает
    ACCEPTED = "accepted"       # принят, готовится или в пути
    DELIVERED = "delivered"     # доставлен

    @property
    def display_name(self) -> str:
        names = {
            "pending": "Ожидает",
            "accepted": "Принят",
            "delivered": "Доставлен",
        }
        return names[self.value]


class OrderStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    PREPARING = "Preparing"
    ON_THE_WAY = "On the way"
    DELIVERED = "Delivered"

    @property
    def display_name(self) -> str:
        names = {
            "Pending": "Ожидает",
            "Accepted": "Принят",
            "Preparing": "Готовится",
            "On the way": "В пути",
            "Delivered": "Доставлен",
        }
        return names[self.value]

    @property
    def bucket(self) -> StatusBucket:
        return status_bucket(self)


_BUCKETS = {
    OrderStatus.PENDING: StatusBucket.PENDING,
    OrderStatus.ACCEPTED: StatusBucket.ACCEPTED,
    OrderStatus.PREPARING: StatusBucket.ACCEPTED,
    OrderStatus.ON_THE_WAY: StatusBucket.ACCEPTED,
    OrderStatus.DELIVERED: StatusBucket.DELIVERED,
}


def status_bucket(raw_status: OrderStatus | str) -> StatusBucket:
    """
    Логическая стадия заказа по его статусу.

    Единственное место, где задано соответствие статусов стадиям:
    им пользуются и фильтр, и агрегатор.
    Raises:
        ValueError: неизвестный статус
    """
    return _BUCKETS[OrderStatus(raw_status)]


class LineItem(BaseModel):
    """Позиция заказа. Заказ может содержать позиции разных ресторанов."""
    model_config = ConfigDict(frozen=True)

    restaurant_name: str = ""
    item_name: str = UNKNOWN_ITEM
    quantity: int = Field(default=0, ge=0)
    price: Decimal = Field(default=Decimal("0"), ge=0)

    def matches(self, restaurant_name: str) -> bool:
        """Сравнение по отображаемому имени ресторана без учёта регистра"""
        return self.restaurant_name.casefold() == restaurant_name.casefold()

    @property
    def total(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    items: list[LineItem]
    status: OrderStatus
    created_at: AwareDatetime  # точность до миллисекунд


class FilterState(BaseModel):
    """Фильтры экрана аналитики. None — нет ограничения по измерению."""
    model_config = ConfigDict(frozen=True)

    selected_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    status: StatusBucket | None = None  # None — все заказы

    @property
    def is_empty(self) -> bool:
        return (
            self.selected_date is None
            and self.start_time is None
            and self.end_time is None
            and self.status is None
        )

    @property
    def has_time_range(self) -> bool:
        return self.start_time is not None or self.end_time is not None

    def cleared(self) -> "FilterState":
        return FilterState()


class ItemStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_name: str
    total_quantity: int
    total_revenue: Money
    pending_count: int
    accepted_count: int
    delivered_count: int


class OrderSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_orders: int = 0
    total_items: int = 0
    total_revenue: Money = Decimal("0")
    pending_orders: int = 0
    accepted_orders: int = 0
    delivered_orders: int = 0


class AnalyticsResult(BaseModel):
    """Результат одного прогона: разбивка по позициям + сводка по заказам"""
    model_config = ConfigDict(frozen=True)

    item_stats: list[ItemStats] = []
    summary: OrderSummary = OrderSummary()
