"""Сессия экрана аналитики: фильтры, загрузка заказов, пересчёт."""
from collections.abc import Awaitable, Callable
from datetime import date, time, tzinfo
from typing import Any

import aiosqlite

from analytics.aggregator import compute_analytics
from analytics.config import settings
from analytics.database import fetch_orders
from analytics.ingest import parse_orders
from analytics.logger import log
from analytics.models import AnalyticsResult, FilterState, StatusBucket

FetchOrders = Callable[[], Awaitable[list[dict[str, Any]]]]

# Ошибки источника заказов: ядро в этом случае не вызывается
FETCH_ERRORS = (aiosqlite.Error, OSError)


class AnalyticsSession:
    """
    Аналитика одного ресторана с текущими фильтрами.

    Каждое изменение фильтра запускает пересчёт. Пересчёты нумеруются,
    и публикуется только результат последнего запущенного: медленная
    старая загрузка не перезапишет более новый результат.

    Использование:
        session = AnalyticsSession("Cafe A")
        await session.set_status(StatusBucket.PENDING)
        print(session.result.summary.total_orders)
    """

    def __init__(
        self,
        restaurant_name: str,
        fetch: FetchOrders = fetch_orders,
        tz: tzinfo | None = None,
    ) -> None:
        self.restaurant_name = restaurant_name
        self.filters = FilterState()
        self.result = AnalyticsResult()
        self.error: str | None = None
        self._fetch = fetch
        self._tz = tz if tz is not None else settings.tzinfo
        self._generation = 0
        self._settled = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_loading(self) -> bool:
        return self._settled != self._generation

    async def refresh(self) -> AnalyticsResult | None:
        """
        Загружает заказы и пересчитывает статистику по текущим фильтрам.

        Returns:
            новый результат; None, если загрузка не удалась
            или за это время был запущен более новый пересчёт
        """
        self._generation += 1
        generation = self._generation
        filters = self.filters
        log.fetch_started(self.restaurant_name, generation)

        try:
            try:
                raws = await self._fetch()
            except FETCH_ERRORS as e:
                if generation != self._generation:
                    log.stale_result_dropped(self.restaurant_name, generation, self._generation)
                    return None
                # Предыдущий результат остаётся на экране
                self.error = f"Не удалось загрузить заказы: {e}"
                log.error(self.restaurant_name, "fetch_orders", e, generation=generation)
                return None

            if generation != self._generation:
                log.stale_result_dropped(self.restaurant_name, generation, self._generation)
                return None

            orders = parse_orders(raws)
            result = compute_analytics(orders, self.restaurant_name, filters, self._tz)

            self.result = result
            self.error = None
            log.result_published(
                self.restaurant_name,
                generation,
                orders=result.summary.total_orders,
                revenue=str(result.summary.total_revenue),
            )
            return result
        finally:
            # Загрузка завершена только для последнего пересчёта
            if generation == self._generation:
                self._settled = generation

    async def _update(self, field: str, value: Any) -> AnalyticsResult | None:
        self.filters = self.filters.model_copy(update={field: value})
        log.filter_changed(self.restaurant_name, field, value)
        return await self.refresh()

    async def set_date(self, value: date | None) -> AnalyticsResult | None:
        return await self._update("selected_date", value)

    async def set_start_time(self, value: time | None) -> AnalyticsResult | None:
        return await self._update("start_time", value)

    async def set_end_time(self, value: time | None) -> AnalyticsResult | None:
        return await self._update("end_time", value)

    async def set_status(self, value: StatusBucket | None) -> AnalyticsResult | None:
        return await self._update("status", value)

    async def clear_filters(self) -> AnalyticsResult | None:
        """Сбрасывает все фильтры и пересчитывает"""
        self.filters = self.filters.cleared()
        log.filter_changed(self.restaurant_name, "all", None)
        return await self.refresh()
