import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from analytics.config import settings
from analytics.ingest import VALID_STATUSES

logger = logging.getLogger(__name__)


DB_PATH: Path = settings.db_path

# Одно переиспользуемое соединение вместо открытия нового на каждый запрос
_pool: aiosqlite.Connection | None = None
_pool_lock = asyncio.Lock()


async def get_db() -> aiosqlite.Connection:
    """Возвращает переиспользуемое соединение с БД."""
    global _pool
    if _pool is None:
        async with _pool_lock:
            if _pool is None:  # Double-check после lock
                _pool = await aiosqlite.connect(DB_PATH)
                _pool.row_factory = aiosqlite.Row
    return _pool


async def close_db() -> None:
    """Закрывает соединение с БД."""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None


# Коллекция документов заказов: id документа + тело в JSON
SCHEMA = """
CREATE TABLE IF NOT EXISTS orders (
    id TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


async def ensure_tables() -> None:
    """Создает таблицы, если не существуют (idempotent)"""
    db = await get_db()
    await db.executescript(SCHEMA)
    await db.commit()


def _to_millis(value: Any) -> Any:
    if isinstance(value, datetime):
        # наивные значения — UTC, как при разборе в ingest
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp() * 1000)
    return value


async def add_order(order_id: str, document: dict[str, Any]) -> None:
    """
    Сохраняет документ заказа (перезаписывает существующий с тем же id).
    datetime в createdAt сохраняется как epoch в миллисекундах.
    """
    data = dict(document)
    data.pop("id", None)
    if "createdAt" in data:
        data["createdAt"] = _to_millis(data["createdAt"])

    db = await get_db()
    await db.execute(
        "INSERT OR REPLACE INTO orders (id, data) VALUES (?, ?)",
        (order_id, json.dumps(data, ensure_ascii=False, default=str))
    )
    await db.commit()
    logger.debug("order_saved", extra={"order_id": order_id})


async def fetch_orders() -> list[dict[str, Any]]:
    """
    Все документы заказов с допустимым статусом.

    Документы с битым JSON пропускаются. Ошибки БД (aiosqlite.Error)
    пробрасываются вызывающему.
    """
    db = await get_db()
    cursor = await db.execute("SELECT id, data FROM orders ORDER BY rowid")
    rows = await cursor.fetchall()

    documents = []
    for order_id, data in rows:
        try:
            document = json.loads(data)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("parse_order_failed", extra={"order_id": order_id, "error": str(e)})
            continue
        if not isinstance(document, dict):
            continue
        if document.get("orderStatus") not in VALID_STATUSES:
            continue
        document["id"] = order_id
        documents.append(document)

    logger.info("orders_fetched", extra={"count": len(documents)})
    return documents
