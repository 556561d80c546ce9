"""Текстовый отчёт по аналитике ресторана."""
from decimal import Decimal

from analytics.config import settings
from analytics.models import AnalyticsResult, FilterState, ItemStats, StatusBucket


def format_money(value: Decimal | int, symbol: str | None = None) -> str:
    """৳1 234.50 — два знака, пробел как разделитель тысяч"""
    symbol = settings.currency_symbol if symbol is None else symbol
    return f"{symbol}{Decimal(value):,.2f}".replace(",", " ")


def format_filters(filters: FilterState) -> str:
    if filters.is_empty:
        return "все заказы"

    parts = []
    if filters.selected_date is not None:
        parts.append(filters.selected_date.strftime("%d.%m.%Y"))
    if filters.has_time_range:
        start = filters.start_time.strftime("%H:%M") if filters.start_time else "00:00"
        end = filters.end_time.strftime("%H:%M") if filters.end_time else "23:59"
        parts.append(f"{start}–{end}")
    if filters.status is not None:
        parts.append(filters.status.display_name)
    return ", ".join(parts)


def _format_item(index: int, stat: ItemStats) -> list[str]:
    return [
        f"{index}. {stat.item_name} — {format_money(stat.total_revenue)}",
        f"   Количество: {stat.total_quantity}",
        (
            f"   {StatusBucket.PENDING.display_name}: {stat.pending_count}"
            f" | {StatusBucket.ACCEPTED.display_name}: {stat.accepted_count}"
            f" | {StatusBucket.DELIVERED.display_name}: {stat.delivered_count}"
        ),
    ]


def format_report(
    restaurant_name: str,
    result: AnalyticsResult,
    filters: FilterState | None = None,
) -> str:
    """Форматирует статистику ресторана для вывода"""
    filters = filters or FilterState()
    header = f"📊 {restaurant_name} ({format_filters(filters)})"
    summary = result.summary

    if summary.total_orders == 0:
        return f"{header}\n\nЗаказов не найдено"

    lines = [
        header,
        "",
        f"📦 Заказов: {summary.total_orders}",
        f"🍽 Продано позиций: {summary.total_items}",
        f"💰 Выручка: {format_money(summary.total_revenue)}",
        "",
        f"⏳ {StatusBucket.PENDING.display_name}: {summary.pending_orders}",
        f"👨‍🍳 {StatusBucket.ACCEPTED.display_name}: {summary.accepted_orders}",
        f"✅ {StatusBucket.DELIVERED.display_name}: {summary.delivered_orders}",
    ]

    if result.item_stats:
        lines.append("")
        lines.append("🏆 По позициям:")
        for i, stat in enumerate(result.item_stats, 1):
            lines.extend(_format_item(i, stat))

    return "\n".join(lines)
