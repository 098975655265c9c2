"""sqlite-backed database collaborator: schema, seed data, statement execution"""

import sqlite3
from contextlib import contextmanager
from typing import Iterator, Sequence

from .session import CollaboratorFailure, ConnectionLost

DB_PATH = "pizza-store.db"

# role tags stored in users.role
CUSTOMER = "customer"
DRIVER = "driver"
MANAGER = "manager"
ROLES = (CUSTOMER, DRIVER, MANAGER)

DEFAULT_MANAGER = ("admin", "admin")

SEED_ITEMS = [
    ("Margherita", "tomato,mozzarella,basil", "entree", 9.50, "the classic"),
    ("Pepperoni", "tomato,mozzarella,pepperoni", "entree", 11.00, "spicy salami"),
    ("Hawaiian", "tomato,mozzarella,ham,pineapple", "entree", 11.50, "yes, pineapple"),
    ("Veg Supreme", "tomato,mozzarella,capsicum,olives,mushroom", "entree", 12.00, "all the veg"),
    ("Garlic Bread", "bread,garlic,butter", "side", 4.50, ""),
    ("Coke", "", "drinks", 2.50, "375ml can"),
]

SEED_STORES = [
    (1, "12 Crust Lane", "Riverside", "CA", "yes", 4.5),
    (2, "301 Oven Road", "Irvine", "CA", "yes", 4.1),
    (3, "7 Dough Street", "Corona", "CA", "no", 3.8),
]

# sqlite primary result codes that mean the database itself is unusable
_FATAL_CODES = {
    sqlite3.SQLITE_IOERR,
    sqlite3.SQLITE_CORRUPT,
    sqlite3.SQLITE_CANTOPEN,
    sqlite3.SQLITE_NOTADB,
}

def _cell(value) -> str:
    return "" if value is None else str(value)

def _translate(e: sqlite3.Error) -> CollaboratorFailure:
    """map a driver error onto the collaborator taxonomy"""
    if isinstance(e, sqlite3.ProgrammingError) and "closed" in str(e).lower():
        return ConnectionLost(str(e))
    code = getattr(e, "sqlite_errorcode", None)
    if code is not None and (code & 0xFF) in _FATAL_CODES:
        return ConnectionLost(str(e))
    return CollaboratorFailure(str(e))

class DatabaseManager:
    """manage the sqlite connection and schema; every driver error leaves as a CollaboratorFailure"""
    def __init__(self, path: str = DB_PATH, seed: bool = True):
        self.path = path
        try:
            self.conn = sqlite3.connect(path)
        except sqlite3.Error as e:
            raise ConnectionLost(f"unable to open {path}: {e}") from e
        self.conn.autocommit = True
        self.execute_update("PRAGMA foreign_keys=ON;")
        self._create_schema()
        if seed:
            self._seed()

    def _create_schema(self):
        """create tables / triggers if missing"""
        try:
            self.conn.executescript(
                """--sql
                CREATE TABLE IF NOT EXISTS users (
                    login TEXT PRIMARY KEY,
                    password TEXT NOT NULL, -- plain text, same as the store's legacy data
                    role TEXT NOT NULL DEFAULT 'customer',
                    favorite_items TEXT NOT NULL DEFAULT '',
                    phone_num TEXT NOT NULL DEFAULT ''
                );
                CREATE TABLE IF NOT EXISTS items (
                    item_name TEXT PRIMARY KEY,
                    ingredients TEXT NOT NULL DEFAULT '',
                    type_of_item TEXT NOT NULL,
                    price REAL NOT NULL,
                    description TEXT NOT NULL DEFAULT ''
                );
                CREATE TABLE IF NOT EXISTS stores (
                    store_id INTEGER PRIMARY KEY,
                    address TEXT NOT NULL,
                    city TEXT NOT NULL,
                    state TEXT NOT NULL,
                    is_open TEXT NOT NULL DEFAULT 'yes',
                    review_score REAL
                );
                CREATE TABLE IF NOT EXISTS food_orders (
                    order_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    login TEXT NOT NULL REFERENCES users(login) ON UPDATE CASCADE,
                    store_id INTEGER NOT NULL REFERENCES stores(store_id),
                    total_price REAL NOT NULL,
                    order_timestamp TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    order_status TEXT NOT NULL DEFAULT 'incomplete'
                );
                CREATE TABLE IF NOT EXISTS items_in_order (
                    order_id INTEGER NOT NULL REFERENCES food_orders(order_id) ON DELETE CASCADE,
                    item_name TEXT NOT NULL REFERENCES items(item_name) ON UPDATE CASCADE,
                    quantity INTEGER NOT NULL CHECK (quantity > 0),
                    PRIMARY KEY (order_id, item_name)
                );
                CREATE TRIGGER IF NOT EXISTS trg_item_price_insert
                BEFORE INSERT ON items
                WHEN NEW.price <= 0
                BEGIN
                    SELECT RAISE(ABORT, 'price must be positive');
                END;
                CREATE TRIGGER IF NOT EXISTS trg_item_price_update
                BEFORE UPDATE ON items
                WHEN NEW.price <= 0
                BEGIN
                    SELECT RAISE(ABORT, 'price must be positive');
                END;
                """
            )
        except sqlite3.Error as e:
            raise _translate(e) from e

    def _seed(self):
        """seed default manager, menu and stores once"""
        login, password = DEFAULT_MANAGER
        self.execute_update(
            "INSERT OR IGNORE INTO users(login, password, role) VALUES (?,?,?);",
            (login, password, MANAGER)
        )
        try:
            self.conn.executemany(
                "INSERT OR IGNORE INTO items VALUES (?,?,?,?,?);", SEED_ITEMS
            )
            self.conn.executemany(
                "INSERT OR IGNORE INTO stores VALUES (?,?,?,?,?,?);", SEED_STORES
            )
        except sqlite3.Error as e:
            raise _translate(e) from e

    def _execute(self, statement: str, params: Sequence = ()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(statement, params)
        except sqlite3.Error as e:
            raise _translate(e) from e
        except OverflowError as e:
            # ints wider than 64 bits never reach sqlite
            raise CollaboratorFailure(str(e)) from e

    # collaborator interface
    def execute_update(self, statement: str, params: Sequence = ()) -> int:
        """run an INSERT / UPDATE / DELETE / DDL statement; returns affected row count"""
        return self._execute(statement, params).rowcount

    def execute_insert(self, statement: str, params: Sequence = ()) -> int:
        """run an INSERT and return the new row id"""
        return self._execute(statement, params).lastrowid

    def execute_query(self, statement: str, params: Sequence = ()) -> list[list[str]]:
        """run a SELECT; every cell comes back as a string (NULL -> "")"""
        cur = self._execute(statement, params)
        try:
            return [[_cell(v) for v in row] for row in cur.fetchall()]
        except sqlite3.Error as e:
            raise _translate(e) from e

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """group statements atomically; rolls back on any exception"""
        self._execute("BEGIN IMMEDIATE;")
        try:
            yield
            self._execute("COMMIT;")
        except BaseException:
            # a failed COMMIT leaves the transaction open too
            if self.conn.in_transaction:
                self.conn.execute("ROLLBACK;")
            raise

    def close(self):
        self.conn.close()
