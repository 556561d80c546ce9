"""Модуль структурированного логирования аналитики ресторанов."""

import logging
import sys
from datetime import datetime
from typing import Any

from analytics.config import settings


class AnalyticsFormatter(logging.Formatter):
    """Форматтер для структурированных логов аналитики."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname

        restaurant_part = ""
        if getattr(record, "restaurant", None):
            restaurant_part = f" [RES:{record.restaurant}]"

        action_part = ""
        if getattr(record, "action", None):
            action_part = f" [{record.action}]"

        context_part = ""
        ctx = getattr(record, "context", None)
        if isinstance(ctx, dict) and ctx:
            pairs = [f'{k}={repr(v) if isinstance(v, str) else v}' for k, v in ctx.items()]
            context_part = " {" + ", ".join(pairs) + "}"

        message = record.getMessage()
        return f"[{timestamp}] [{level}]{restaurant_part}{action_part} {message}{context_part}"


class AnalyticsLogger:
    """
    Структурированный логгер сессий аналитики.

    Использование:
        from analytics.logger import log
        log.filter_changed("Cafe A", "status", "pending")
        log.stale_result_dropped("Cafe A", generation=3, latest=4)
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger("restaurant_analytics")
        self._setup_logging()

    def _setup_logging(self) -> None:
        """Настраивает handlers и formatters."""
        self._logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
        self._logger.handlers.clear()
        self._logger.propagate = False

        formatter = AnalyticsFormatter()

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        self._logger.addHandler(console_handler)

        if settings.log_to_file:
            settings.log_dir.mkdir(parents=True, exist_ok=True)

            # analytics.log — все логи
            main_handler = logging.FileHandler(settings.log_dir / "analytics.log", encoding="utf-8")
            main_handler.setFormatter(formatter)
            self._logger.addHandler(main_handler)

            # errors.log — ERROR+
            error_handler = logging.FileHandler(settings.log_dir / "errors.log", encoding="utf-8")
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(formatter)
            self._logger.addHandler(error_handler)

    def _log(
        self,
        level: int,
        message: str,
        restaurant: str | None = None,
        action: str | None = None,
        **context: Any,
    ) -> None:
        """Базовый метод логирования с контекстом."""
        extra = {
            "restaurant": restaurant,
            "action": action,
            "context": context if context else None,
        }
        self._logger.log(level, message, extra=extra)

    def filter_changed(self, restaurant: str, field: str, value: Any) -> None:
        """
        Логирует изменение фильтра.

        Пример:
            log.filter_changed("Cafe A", "date", "2026-02-01")
        """
        msg = f"Фильтр {field} = {value if value is not None else '—'}"
        self._log(logging.INFO, msg, restaurant=restaurant, action="FILTER")

    def fetch_started(self, restaurant: str, generation: int) -> None:
        self._log(
            logging.DEBUG,
            "Загрузка заказов",
            restaurant=restaurant,
            action="FETCH",
            generation=generation,
        )

    def result_published(self, restaurant: str, generation: int, **context: Any) -> None:
        self._log(
            logging.INFO,
            "Статистика обновлена",
            restaurant=restaurant,
            action="RESULT",
            generation=generation,
            **context,
        )

    def stale_result_dropped(self, restaurant: str, generation: int, latest: int) -> None:
        """
        Логирует отброшенный устаревший результат.

        Пример:
            log.stale_result_dropped("Cafe A", generation=3, latest=4)
        """
        self._log(
            logging.DEBUG,
            "Устаревший результат отброшен",
            restaurant=restaurant,
            action="STALE",
            generation=generation,
            latest=latest,
        )

    def error(
        self,
        restaurant: str | None,
        action: str,
        error: Exception,
        **context: Any,
    ) -> None:
        """
        Логирует ошибку с полным контекстом.

        Пример:
            log.error("Cafe A", "fetch_orders", exc, generation=2)
        """
        error_name = type(error).__name__
        msg = f"{error_name}: {error}"
        self._log(logging.ERROR, msg, restaurant=restaurant, action=action, **context)


log = AnalyticsLogger()
