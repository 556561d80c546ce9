"""
Инициализация базы заказов для аналитики.
Загружает демо-заказы из data/orders.json:
    python init_db.py
"""
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from analytics.config import settings
from analytics.database import SCHEMA


ORDERS_JSON = Path(__file__).parent / "data" / "orders.json"


def load_orders_from_json() -> list[dict]:
    """Загрузка документов заказов из data/orders.json"""
    with open(ORDERS_JSON, encoding="utf-8") as f:
        data = json.load(f)
    return data["orders"]


def to_millis(value: str | int) -> int:
    """createdAt в JSON может быть ISO-строкой или epoch в миллисекундах"""
    if isinstance(value, int):
        return value
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def init_db() -> None:
    conn = sqlite3.connect(settings.db_path)
    cursor = conn.cursor()
    cursor.executescript(SCHEMA)

    cursor.execute("SELECT COUNT(*) FROM orders")
    if cursor.fetchone()[0] > 0:
        print("Заказы уже загружены, пропускаю")
        conn.close()
        return

    orders = load_orders_from_json()
    for order in orders:
        document = {k: v for k, v in order.items() if k != "id"}
        if "createdAt" in document:
            document["createdAt"] = to_millis(document["createdAt"])
        cursor.execute(
            "INSERT INTO orders (id, data) VALUES (?, ?)",
            (order["id"], json.dumps(document, ensure_ascii=False))
        )

    conn.commit()
    conn.close()
    print(f"БД инициализирована: {settings.db_path}")
    print(f"Добавлено {len(orders)} заказов из {ORDERS_JSON}")


if __name__ == "__main__":
    init_db()
