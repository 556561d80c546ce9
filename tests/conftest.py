"""Pytest фикстуры для тестов аналитики ресторанов."""
import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable

import aiosqlite
import pytest
import pytest_asyncio

from analytics.models import LineItem, Order, OrderStatus


# Зона без перехода на летнее время, как Asia/Dhaka
TZ = timezone(timedelta(hours=6))


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Путь к временной БД."""
    return tmp_path / "test_orders.db"


@pytest_asyncio.fixture
async def test_db(temp_db_path: Path, monkeypatch):
    """
    Создаёт временную тестовую БД с таблицей заказов.
    Патчит DB_PATH и сбрасывает общее соединение.
    """
    from analytics import database as db

    await db.close_db()
    monkeypatch.setattr("analytics.database.DB_PATH", temp_db_path)

    async with aiosqlite.connect(temp_db_path) as conn:
        await conn.executescript(db.SCHEMA)
        await conn.commit()

    yield temp_db_path

    await db.close_db()
    if temp_db_path.exists():
        temp_db_path.unlink()


@pytest.fixture
def make_order() -> Callable[..., Order]:
    """
    Фабрика заказов.

    Использование:
        order = make_order("o1", [("Cafe A", "Tea", 2, 50)], status="Delivered")
    """
    def _make(
        order_id: str,
        items: list[tuple[str, str, int, Any]],
        status: str = "Delivered",
        created_at: datetime | None = None,
    ) -> Order:
        if created_at is None:
            created_at = datetime(2026, 2, 1, 12, 0, tzinfo=TZ)
        return Order(
            id=order_id,
            items=[
                LineItem(
                    restaurant_name=restaurant,
                    item_name=name,
                    quantity=quantity,
                    price=Decimal(str(price)),
                )
                for restaurant, name, quantity, price in items
            ],
            status=OrderStatus(status),
            created_at=created_at,
        )
    return _make


@pytest.fixture
def sample_orders(make_order) -> list[Order]:
    """Заказы двух ресторанов за два дня, все пять статусов."""
    return [
        make_order(
            "o1",
            [("Cafe A", "Tea", 2, 50), ("Cafe A", "Samosa", 4, 25)],
            status="Delivered",
            created_at=datetime(2026, 2, 1, 9, 15, tzinfo=TZ),
        ),
        make_order(
            "o2",
            [("Cafe A", "Biryani", 1, 320), ("Burger Point", "Burger", 2, 250)],
            status="Preparing",
            created_at=datetime(2026, 2, 1, 12, 40, tzinfo=TZ),
        ),
        make_order(
            "o3",
            [("cafe a", "Tea", 3, 50)],
            status="Pending",
            created_at=datetime(2026, 2, 1, 19, 5, tzinfo=TZ),
        ),
        make_order(
            "o4",
            [("Cafe A", "Biryani", 2, 320), ("Cafe A", "Borhani", 2, "60.5")],
            status="On the way",
            created_at=datetime(2026, 2, 2, 13, 20, tzinfo=TZ),
        ),
        make_order(
            "o5",
            [("Burger Point", "Fries", 1, 120)],
            status="Accepted",
            created_at=datetime(2026, 2, 2, 20, 10, tzinfo=TZ),
        ),
    ]


@pytest.fixture
def sample_documents() -> list[dict]:
    """Сырые документы заказов в формате хранилища."""
    return [
        {
            "id": "o1",
            "orderStatus": "Delivered",
            "createdAt": datetime(2026, 2, 1, 9, 15, tzinfo=TZ),
            "items": [
                {"miniResName": "Cafe A", "itemName": "Tea", "quantity": 2, "price": 50},
            ],
        },
        {
            "id": "o2",
            "orderStatus": "Pending",
            "createdAt": datetime(2026, 2, 1, 10, 0, tzinfo=TZ),
            "items": [
                {"miniResName": "Cafe A", "itemName": "Tea", "quantity": 1, "price": 50},
            ],
        },
        {
            "id": "o3",
            "orderStatus": "Accepted",
            "createdAt": datetime(2026, 2, 2, 11, 0, tzinfo=TZ),
            "items": [
                {"miniResName": "Cafe A", "itemName": "Tea", "quantity": 3, "price": 50},
            ],
        },
    ]


# Вспомогательные функции для тестов

async def insert_order(db_path: Path, order_id: str, document: dict) -> None:
    """Вставляет документ заказа в БД как есть (createdAt — в миллисекундах)."""
    data = {k: v for k, v in document.items() if k != "id"}
    if isinstance(data.get("createdAt"), datetime):
        data["createdAt"] = int(data["createdAt"].timestamp() * 1000)

    async with aiosqlite.connect(db_path) as conn:
        await conn.execute(
            "INSERT INTO orders (id, data) VALUES (?, ?)",
            (order_id, json.dumps(data, ensure_ascii=False))
        )
        await conn.commit()


async def insert_raw(db_path: Path, order_id: str, data: str) -> None:
    """Вставляет произвольный текст в поле data (для битых документов)."""
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute(
            "INSERT INTO orders (id, data) VALUES (?, ?)",
            (order_id, data)
        )
        await conn.commit()
