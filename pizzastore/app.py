"""application wiring: main menu, user menu, lifecycle"""

import atexit
import signal
import sys

from colorama import just_fix_windows_console as enable_windows_ansi_interpretation

from .accounts import AccountManager
from .database import DB_PATH, DatabaseManager
from .orders import OrderManager
from .session import (
    ConnectionLost,
    ConsoleInput,
    ConsoleOutput,
    InputSource,
    MenuChoice,
    MenuSession,
    OutputSink,
)

MAIN_MENU_EXIT = 9
USER_MENU_EXIT = 20

class Application:
    """bootstrap handlers over a database and run the main menu"""
    def __init__(self, db: DatabaseManager, input_source: InputSource, output: OutputSink):
        self.db = db
        self.output = output
        self.main_menu = MenuSession(input_source, output, title="MAIN MENU")
        self.accounts = AccountManager(db, self.main_menu)
        self.orders = OrderManager(db, self.accounts, self.main_menu)

    def main_choices(self) -> list[MenuChoice]:
        return [
            MenuChoice(1, "Create user", self.accounts.create_user),
            MenuChoice(2, "Log in", self.log_in),
            MenuChoice(MAIN_MENU_EXIT, "< EXIT"),
        ]

    def user_choices(self) -> list[MenuChoice]:
        return [
            MenuChoice(1, "View Profile", self.accounts.view_profile),
            MenuChoice(2, "Update Profile", self.accounts.update_profile),
            MenuChoice(3, "View Menu", self.orders.view_menu),
            MenuChoice(4, "Place Order", self.orders.place_order),
            MenuChoice(5, "View Full Order ID History", self.orders.view_all_orders),
            MenuChoice(6, "View Past 5 Order IDs", self.orders.view_recent_orders),
            MenuChoice(7, "View Order Information", self.orders.view_order_info),
            MenuChoice(8, "View Stores", self.orders.view_stores),
            # drivers + managers
            MenuChoice(9, "Update Order Status", self.orders.update_order_status),
            # managers
            MenuChoice(10, "Update Menu", self.orders.update_menu),
            MenuChoice(11, "Update User", self.accounts.update_user),
            MenuChoice(USER_MENU_EXIT, "Log out"),
        ]

    def log_in(self):
        """main menu entry 2: authenticate, then serve the user menu until logout"""
        if not self.accounts.log_in():
            return
        user_menu = MenuSession(self.main_menu.input, self.output, title="USER MENU")
        user_menu.run(self.user_choices(), exit_key=USER_MENU_EXIT)
        self.accounts.logout()

    def greet(self):
        self.output.write_line("""
*******************************************************
        welcome to the pizza store! 🍕
*******************************************************""", "green", attrs=["bold"])

    def run(self):
        """main loop; a lost connection ends the run instead of a handler"""
        self.greet()
        try:
            self.main_menu.run(self.main_choices(), exit_key=MAIN_MENU_EXIT)
        except ConnectionLost as e:
            self.output.write_line(f"lost the database connection: {e}", "red")
        finally:
            self.shutdown()

    def shutdown(self):
        self.output.write_line("disconnecting from database...", "yellow")
        self.db.close()
        self.output.write_line("done\n\nbye!", "green")

# signal handler
class SignalHandler:
    """custom ctrl+c handler to nag user politely"""
    @staticmethod
    def sigint(_, __):
        """handle ctrl+c"""
        ConsoleOutput().write_line("\nnext time, use the exit option!", "yellow")
        sys.exit(0)

def main():
    """entrypoint wrapper: pizzastore [database file]"""
    args = sys.argv[1:]
    if len(args) > 1:
        ConsoleOutput().write_line("usage: pizzastore [database file]", "red")
        sys.exit(1)
    # fix windows terminal misinterpreting ansi escape sequences
    enable_windows_ansi_interpretation()
    signal.signal(signal.SIGINT, SignalHandler.sigint)
    output = ConsoleOutput()
    db_path = args[0] if args else DB_PATH
    output.write_line(f"connecting to database {db_path}...", "yellow")
    try:
        db = DatabaseManager(db_path)
    except ConnectionLost as e:
        output.write_line(f"error - unable to connect to database: {e}", "red")
        sys.exit(1)
    atexit.register(db.close)
    Application(db, ConsoleInput(), output).run()
