"""Агрегация статистики по позициям и заказам ресторана."""
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import tzinfo
from decimal import Decimal

from analytics.filters import filter_orders
from analytics.models import (
    AnalyticsResult,
    FilterState,
    ItemStats,
    Order,
    OrderSummary,
    StatusBucket,
    status_bucket,
)

logger = logging.getLogger(__name__)


@dataclass
class _Accumulator:
    """Промежуточные суммы по одной позиции, живут один прогон"""
    total_quantity: int = 0
    total_revenue: Decimal = Decimal("0")
    pending_count: int = 0
    accepted_count: int = 0
    delivered_count: int = 0

    def add(self, quantity: int, revenue: Decimal, bucket: StatusBucket) -> None:
        self.total_quantity += quantity
        self.total_revenue += revenue
        # Статус берётся у заказа: у позиций своего статуса нет
        if bucket is StatusBucket.PENDING:
            self.pending_count += quantity
        elif bucket is StatusBucket.ACCEPTED:
            self.accepted_count += quantity
        else:
            self.delivered_count += quantity


def aggregate(filtered_orders: Sequence[Order], restaurant_name: str) -> AnalyticsResult:
    """
    Считает статистику по позициям ресторана и сводку по заказам.

    Позиции сортируются по выручке по убыванию; при равной выручке
    сохраняется порядок первого появления. Итоги сводки считаются
    по списку позиций, поэтому всегда с ним согласованы.

    Returns:
        AnalyticsResult; для пустого входа — пустой список и нулевая сводка
    """
    accumulators: dict[str, _Accumulator] = {}

    for order in filtered_orders:
        bucket = status_bucket(order.status)
        for item in order.items:
            if not item.matches(restaurant_name):
                continue
            acc = accumulators.setdefault(item.item_name, _Accumulator())
            acc.add(item.quantity, item.total, bucket)

    item_stats = [
        ItemStats(
            item_name=name,
            total_quantity=acc.total_quantity,
            total_revenue=acc.total_revenue,
            pending_count=acc.pending_count,
            accepted_count=acc.accepted_count,
            delivered_count=acc.delivered_count,
        )
        for name, acc in accumulators.items()
    ]
    # sorted стабилен — равные по выручке остаются в порядке появления
    item_stats = sorted(item_stats, key=lambda s: s.total_revenue, reverse=True)

    buckets = [status_bucket(order.status) for order in filtered_orders]
    summary = OrderSummary(
        total_orders=len(filtered_orders),
        total_items=sum(s.total_quantity for s in item_stats),
        total_revenue=sum((s.total_revenue for s in item_stats), Decimal("0")),
        pending_orders=buckets.count(StatusBucket.PENDING),
        accepted_orders=buckets.count(StatusBucket.ACCEPTED),
        delivered_orders=buckets.count(StatusBucket.DELIVERED),
    )

    logger.info(
        "analytics_computed",
        extra={
            "restaurant": restaurant_name,
            "orders": summary.total_orders,
            "items": summary.total_items,
            "revenue": str(summary.total_revenue),
        }
    )

    return AnalyticsResult(item_stats=item_stats, summary=summary)


def compute_analytics(
    all_orders: Iterable[Order],
    restaurant_name: str,
    filters: FilterState,
    tz: tzinfo | None = None,
) -> AnalyticsResult:
    """Фильтр + агрегация: точка входа ядра"""
    filtered = filter_orders(all_orders, restaurant_name, filters, tz)
    return aggregate(filtered, restaurant_name)
