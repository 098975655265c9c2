"""menu browsing, stores, order placement / history, menu maintenance"""

import math

from .accounts import AccountManager
from .database import DRIVER, MANAGER, DatabaseManager
from .session import MenuChoice, MenuSession, reports_failures
from .table import show_table

RECENT_ORDER_LIMIT = 5
INITIAL_ORDER_STATUS = "incomplete"

ITEM_HEADERS = ["item name", "ingredients", "type", "price", "description"]
STORE_HEADERS = ["store id", "address", "city", "state", "open?", "review score"]
ORDER_HEADERS = ["order id", "placed by", "store id", "total price", "timestamp", "status"]
ORDER_ITEM_HEADERS = ["item name", "quantity", "unit price"]

ITEM_COLUMNS = """item_name, ingredients, type_of_item, printf('%.2f', price), description"""
ORDER_COLUMNS = """order_id, login, store_id, printf('%.2f', total_price), order_timestamp, order_status"""

# sqlite INTEGER range
MAX_ID = 2**63 - 1

# editable item fields -> column
ITEM_FIELDS = {
    "name": "item_name",
    "ingredients": "ingredients",
    "type": "type_of_item",
    "price": "price",
    "description": "description",
}

def parse_price(raw: str) -> float | None:
    """positive float or none"""
    try:
        p = float(raw)
    except ValueError:
        return None
    return p if math.isfinite(p) and p > 0 else None

def parse_id(raw: str) -> int | None:
    """int that fits a sqlite INTEGER, or none"""
    try:
        v = int(raw.strip())
    except ValueError:
        return None
    return v if -MAX_ID - 1 <= v <= MAX_ID else None

class OrderManager:
    """order + item handlers (user menu entries 3-10)"""
    def __init__(self, db: DatabaseManager, accounts: AccountManager, menu: MenuSession):
        self.db = db
        self.accounts = accounts
        self.menu = menu
        self.output = menu.output
        self.sort_order = "ASC"

    # browsing
    def view_menu(self):
        """menu browsing submenu; sort order sticks until flipped"""
        submenu = MenuSession(self.menu.input, self.output, title="MENU")
        submenu.run([
            MenuChoice(1, "View full menu", self.view_all_items),
            MenuChoice(2, "Filter by max price", self.filter_price),
            MenuChoice(3, "Filter by type", self.filter_type),
            MenuChoice(4, "Flip price order", self.flip_order),
            MenuChoice(5, "< Stop viewing"),
        ], exit_key=5)

    def flip_order(self):
        self.sort_order = "DESC" if self.sort_order == "ASC" else "ASC"
        self.output.write_line(f"sorting by price {self.sort_order.lower()}ending", "yellow")

    def _show_items(self, where: str = "", params: tuple = ()):
        rows = self.db.execute_query(
            f"SELECT {ITEM_COLUMNS} FROM items {where} ORDER BY price {self.sort_order}, item_name;",
            params
        )
        show_table(self.output, ITEM_HEADERS, rows)
        if not rows:
            self.output.write_line("no matching items", "yellow")

    @reports_failures
    def view_all_items(self):
        self._show_items()

    @reports_failures
    def filter_price(self):
        price = parse_price(self.menu.read_line("enter max price: ").strip())
        if price is None:
            self.output.write_line("enter a valid price!", "red"); return
        self._show_items("WHERE price <= ?", (price,))

    @reports_failures
    def filter_type(self):
        kind = self.menu.read_line("enter item type: ").strip()
        if not kind:
            self.output.write_line("enter a valid item type!", "red"); return
        self._show_items("WHERE lower(trim(type_of_item)) = lower(?)", (kind,))

    @reports_failures
    def view_stores(self):
        rows = self.db.execute_query(
            "SELECT store_id, address, city, state, is_open, review_score FROM stores ORDER BY store_id;"
        )
        show_table(self.output, STORE_HEADERS, rows)

    # ordering
    def _item_price(self, name: str) -> tuple[str, float] | None:
        """canonical name + price for a case-insensitive item name"""
        rows = self.db.execute_query(
            "SELECT item_name, price FROM items WHERE lower(item_name) = lower(?);", (name,)
        )
        if not rows:
            return None
        return rows[0][0], float(rows[0][1])

    @reports_failures
    def place_order(self):
        """pick a store, add items until a blank line, then write order + items in one go"""
        store_id = parse_id(self.menu.read_line("enter store id: "))
        if store_id is None:
            self.output.write_line("your input is invalid!", "red"); return
        store = self.db.execute_query("SELECT is_open FROM stores WHERE store_id=?;", (store_id,))
        if not store:
            self.output.write_line(f"no store #{store_id}", "red"); return
        if store[0][0].strip().lower() != "yes":
            self.output.write_line(f"store #{store_id} is closed", "red"); return

        basket: dict[str, int] = {}
        prices: dict[str, float] = {}
        while True:
            name = self.menu.read_line("enter item name (blank or 1 to finish): ").strip()
            if name in ("", "1"):
                break
            quantity = parse_id(self.menu.read_line("enter quantity: "))
            if quantity is None or quantity <= 0:
                self.output.write_line("invalid quantity, order cancelled", "red"); return
            found = self._item_price(name)
            if found is None:
                self.output.write_line(f"{name} not found, skipping item", "yellow")
                continue
            item_name, price = found
            basket[item_name] = basket.get(item_name, 0) + quantity
            prices[item_name] = price

        if not basket:
            self.output.write_line("nothing ordered", "yellow"); return
        total = round(sum(prices[n] * q for n, q in basket.items()), 2)

        # the id comes from the autoincrement column inside the transaction,
        # never from reading the current max
        with self.db.transaction():
            order_id = self.db.execute_insert(
                "INSERT INTO food_orders(login, store_id, total_price, order_status) VALUES (?,?,?,?);",
                (self.accounts.state.login, store_id, total, INITIAL_ORDER_STATUS)
            )
            for item_name, quantity in basket.items():
                self.db.execute_update(
                    "INSERT INTO items_in_order(order_id, item_name, quantity) VALUES (?,?,?);",
                    (order_id, item_name, quantity)
                )
        self.output.write_line(f"order placed successfully! your order id is {order_id}", "green")
        self.output.write_line(f"total price: ${total:.2f}", "green")

    # history
    def _visible_orders(self, limit: int | None = None) -> list[list[str]]:
        """own orders for customers, everything for drivers / managers; newest first"""
        limit_clause = f"LIMIT {int(limit)}" if limit else ""
        if self.accounts.can_see_all_orders():
            return self.db.execute_query(
                f"SELECT {ORDER_COLUMNS} FROM food_orders ORDER BY order_timestamp DESC, order_id DESC {limit_clause};"
            )
        return self.db.execute_query(
            f"SELECT {ORDER_COLUMNS} FROM food_orders WHERE login=? ORDER BY order_timestamp DESC, order_id DESC {limit_clause};",
            (self.accounts.state.login,)
        )

    @reports_failures
    def view_all_orders(self):
        rows = self._visible_orders()
        show_table(self.output, ORDER_HEADERS, rows)
        if not rows:
            self.output.write_line("no orders found", "yellow")

    @reports_failures
    def view_recent_orders(self):
        rows = self._visible_orders(RECENT_ORDER_LIMIT)
        show_table(self.output, ORDER_HEADERS, rows)
        if not rows:
            self.output.write_line("no orders found", "yellow")

    @reports_failures
    def view_order_info(self):
        """one order + its items; customers only get their own"""
        order_id = parse_id(self.menu.read_line("enter order id: "))
        if order_id is None:
            self.output.write_line("your input is invalid!", "red"); return
        rows = self.db.execute_query(
            f"SELECT {ORDER_COLUMNS} FROM food_orders WHERE order_id=?;", (order_id,)
        )
        if not rows:
            self.output.write_line(f"no order #{order_id}", "red"); return
        if not self.accounts.can_see_all_orders() and rows[0][1] != self.accounts.state.login:
            self.output.write_line("please only look up your own orders!", "red"); return
        show_table(self.output, ORDER_HEADERS, rows)
        items = self.db.execute_query(
            """--sql
            SELECT o.item_name, o.quantity, printf('%.2f', i.price)
            FROM items_in_order o
            JOIN items i ON i.item_name = o.item_name
            WHERE o.order_id=?
            ORDER BY o.item_name;
            """,
            (order_id,)
        )
        show_table(self.output, ORDER_ITEM_HEADERS, items)

    @reports_failures
    def update_order_status(self):
        """drivers + managers only"""
        if not self.accounts.require_role(DRIVER, MANAGER):
            return
        order_id = parse_id(self.menu.read_line("enter order id: "))
        status = self.menu.read_line("enter new order status: ").strip()
        if order_id is None or not status:
            self.output.write_line("your input is invalid!", "red"); return
        count = self.db.execute_update(
            "UPDATE food_orders SET order_status=? WHERE order_id=?;", (status, order_id)
        )
        if not count:
            self.output.write_line(f"no order #{order_id}", "red"); return
        self.output.write_line(f"order #{order_id} is now {status}", "green")

    # menu maintenance
    def update_menu(self):
        """managers only: item submenu"""
        if not self.accounts.require_role(MANAGER):
            return
        submenu = MenuSession(self.menu.input, self.output, title="UPDATE MENU")
        submenu.run([
            MenuChoice(1, "Create new item", self.create_item),
            MenuChoice(2, "Remove an item", self.remove_item),
            MenuChoice(3, "Modify existing item", self.modify_item),
            MenuChoice(4, "< Back"),
        ], exit_key=4)

    @reports_failures
    def create_item(self):
        name = self.menu.read_line("enter item name: ").strip()
        ingredients = self.menu.read_line("enter ingredients, separated by commas: ").strip()
        kind = self.menu.read_line("enter item type: ").strip()
        price = parse_price(self.menu.read_line("enter item price: ").strip())
        description = self.menu.read_line("enter item description: ").strip()
        if not name or not kind:
            self.output.write_line("item name and type are required", "red"); return
        if price is None:
            self.output.write_line("invalid price", "red"); return
        if self._item_price(name):
            self.output.write_line(f"{name} is already on the menu", "red"); return
        self.db.execute_update(
            "INSERT INTO items(item_name, ingredients, type_of_item, price, description) VALUES (?,?,?,?,?);",
            (name, ingredients, kind, price, description)
        )
        self.output.write_line(f"{name} added to the menu", "green")

    @reports_failures
    def remove_item(self):
        name = self.menu.read_line("enter item name: ").strip()
        count = self.db.execute_update("DELETE FROM items WHERE lower(item_name) = lower(?);", (name,))
        if not count:
            self.output.write_line(f"{name} not found", "red"); return
        self.output.write_line(f"{name} removed", "green")

    @reports_failures
    def modify_item(self):
        name = self.menu.read_line("enter item name: ").strip()
        field = self.menu.read_line(f"enter field to change ({', '.join(ITEM_FIELDS)}): ").strip().lower()
        value = self.menu.read_line("enter new value: ").strip()
        column = ITEM_FIELDS.get(field)
        if column is None:
            self.output.write_line(f"unknown field {field!r}", "red"); return
        if column == "price":
            value = parse_price(value)
            if value is None:
                self.output.write_line("invalid price", "red"); return
        elif column in ("item_name", "type_of_item") and not value:
            self.output.write_line(f"{field} can't be empty", "red"); return
        count = self.db.execute_update(
            f"UPDATE items SET {column}=? WHERE lower(item_name) = lower(?);", (value, name)
        )
        if not count:
            self.output.write_line(f"{name} not found", "red"); return
        self.output.write_line(f"{name} updated", "green")
