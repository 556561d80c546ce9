import argparse
import asyncio
import json
import logging
import sys
from datetime import date, datetime, time

from analytics.config import settings
from analytics.database import close_db, ensure_tables
from analytics.formatting import format_report
from analytics.models import StatusBucket
from analytics.service import AnalyticsSession


def setup_logging():
    """Настройка логирования: JSON в prod, text в dev"""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        class JsonFormatter(logging.Formatter):
            def format(self, record):
                log_obj = {
                    "timestamp": self.formatTime(record, "%H:%M:%S"),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                }
                # Structured context
                for attr in ("restaurant", "order_id", "reason", "count", "orders", "revenue"):
                    if hasattr(record, attr):
                        log_obj[attr] = getattr(record, attr)
                if record.exc_info:
                    log_obj["exception"] = self.formatException(record.exc_info)
                return json.dumps(log_obj, ensure_ascii=False, default=str)
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        )

    # stderr: stdout занят отчётом
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # aiosqlite шумит на DEBUG
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def _parse_time(value: str) -> time:
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"ожидается ЧЧ:ММ, получено {value!r}") from e


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"ожидается ГГГГ-ММ-ДД, получено {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Статистика заказов ресторана")
    parser.add_argument("restaurant", help="отображаемое имя ресторана")
    parser.add_argument("--date", type=_parse_date, dest="selected_date")
    parser.add_argument("--from", type=_parse_time, dest="start_time")
    parser.add_argument("--to", type=_parse_time, dest="end_time")
    parser.add_argument(
        "--status",
        choices=[bucket.value for bucket in StatusBucket],
        help="без параметра — все заказы",
    )
    return parser


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings.check_required()
    setup_logging()
    await ensure_tables()

    session = AnalyticsSession(args.restaurant)
    session.filters = session.filters.model_copy(update={
        "selected_date": args.selected_date,
        "start_time": args.start_time,
        "end_time": args.end_time,
        "status": StatusBucket(args.status) if args.status else None,
    })

    try:
        await session.refresh()
    finally:
        await close_db()

    if session.error:
        print(f"❌ {session.error}", file=sys.stderr)
        return 1

    print(format_report(session.restaurant_name, session.result, session.filters))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
