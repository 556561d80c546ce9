#!/usr/bin/env python3
"""
Точка входа для отчёта по ресторану.

Запуск: source venv/bin/activate && python run.py "Cafe A" --date 2026-02-01
"""
import asyncio
import sys


def check_venv() -> None:
    """Проверяет что venv активирован."""
    try:
        import aiosqlite  # noqa: F401
        import pydantic_settings  # noqa: F401
    except ImportError:
        sys.exit(
            "❌ Зависимости не найдены.\n"
            "   Запусти: source venv/bin/activate && pip install -e . && python run.py"
        )


if __name__ == "__main__":
    check_venv()

    from analytics.main import main
    sys.exit(asyncio.run(main()))
