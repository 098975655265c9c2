"""Shared pytest fixtures for pizzastore tests."""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterable

import pytest

from pizzastore.accounts import AccountManager, SessionState
from pizzastore.database import DatabaseManager
from pizzastore.orders import OrderManager
from pizzastore.session import MenuSession


class ScriptedInput:
    """Input source that replays a fixed list of lines, then reports end of stream."""

    def __init__(self, lines: Iterable[str]) -> None:
        self.lines = list(lines)
        self.prompts: list[str] = []

    def read_line(self, prompt: str = "") -> str | None:
        self.prompts.append(prompt)
        if not self.lines:
            return None
        return self.lines.pop(0)


class RecordingOutput:
    """Output sink that keeps every line with its colour."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str | None, list[str] | None]] = []

    def write_line(
        self, text: str = "", color: str | None = None, attrs: list[str] | None = None
    ) -> None:
        self.records.append((text, color, attrs))

    @property
    def lines(self) -> list[str]:
        return [text for text, _, _ in self.records]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def count(self, fragment: str) -> int:
        return sum(fragment in line for line in self.lines)


@pytest.fixture
def output() -> RecordingOutput:
    """Create a recording output sink."""
    return RecordingOutput()


@pytest.fixture
def db() -> Generator[DatabaseManager]:
    """Create a seeded in-memory database."""
    manager = DatabaseManager(":memory:")
    yield manager
    manager.close()


@pytest.fixture
def make_menu(output: RecordingOutput) -> Callable[..., MenuSession]:
    """Build a menu session fed by the given input lines."""

    def factory(*lines: str) -> MenuSession:
        return MenuSession(ScriptedInput(lines), output)

    return factory


@pytest.fixture
def add_user(db: DatabaseManager) -> Callable[..., None]:
    """Insert a user row directly."""

    def factory(login: str, role: str = "customer", password: str = "pw") -> None:
        db.execute_update(
            "INSERT INTO users(login, password, role, phone_num) VALUES (?,?,?,?);",
            (login, password, role, "5550000"),
        )

    return factory


@pytest.fixture
def add_order(db: DatabaseManager) -> Callable[..., int]:
    """Insert an order row (plus one Margherita) directly."""

    def factory(login: str, store_id: int = 1, total: float = 9.5) -> int:
        order_id = db.execute_insert(
            "INSERT INTO food_orders(login, store_id, total_price) VALUES (?,?,?);",
            (login, store_id, total),
        )
        db.execute_update(
            "INSERT INTO items_in_order(order_id, item_name, quantity) VALUES (?,?,?);",
            (order_id, "Margherita", 1),
        )
        return order_id

    return factory


@pytest.fixture
def handlers(
    db: DatabaseManager, make_menu: Callable[..., MenuSession]
) -> Callable[..., tuple[AccountManager, OrderManager]]:
    """Account + order handlers logged in as ``login`` with ``role``, reading ``lines``."""

    def factory(
        *lines: str, login: str | None = None, role: str | None = None
    ) -> tuple[AccountManager, OrderManager]:
        menu = make_menu(*lines)
        accounts = AccountManager(db, menu)
        accounts.state = SessionState(login, role)
        return accounts, OrderManager(db, accounts, menu)

    return factory
