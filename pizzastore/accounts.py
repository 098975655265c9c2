"""accounts: session identity, registration, login, profile + user admin"""

from dataclasses import dataclass

from .database import CUSTOMER, DRIVER, MANAGER, ROLES, DatabaseManager
from .session import MenuChoice, MenuSession, reports_failures
from .table import show_table

PROFILE_HEADERS = ["login", "role", "favorite items", "phone number"]

@dataclass
class SessionState:
    """who is logged in for this run (login None = nobody)"""
    login: str | None = None
    role: str | None = None

    @property
    def authenticated(self) -> bool:
        return self.login is not None

class AccountManager:
    """account handlers; each one reports its own failures"""
    def __init__(self, db: DatabaseManager, menu: MenuSession):
        self.db = db
        self.menu = menu
        self.output = menu.output
        self.state = SessionState()

    # session
    def has_role(self, *roles: str) -> bool:
        return self.state.role in roles

    def require_role(self, *roles: str) -> bool:
        """guard for role-restricted actions"""
        if not self.state.authenticated:
            self.output.write_line("please login first", "red"); return False
        if not self.has_role(*roles):
            self.output.write_line(f"must be {' or '.join(roles)} to do that!", "red"); return False
        return True

    @reports_failures
    def log_in(self) -> bool:
        """interactive credential check; on success the session holds login + role"""
        if self.state.authenticated:
            self.output.write_line(f"already logged in as {self.state.login}", "yellow")
            return True
        login = self.menu.read_line("enter login: ").strip()
        password = self.menu.read_line("enter password: ")
        if not login:
            self.output.write_line("your input is invalid!", "red"); return False
        rows = self.db.execute_query(
            "SELECT login, role FROM users WHERE login=? AND password=?;",
            (login, password)
        )
        if not rows:
            self.output.write_line("invalid login or password", "red"); return False
        self.state.login = rows[0][0]
        self.state.role = rows[0][1].strip().lower()
        prefix = f"{self.state.role}: " if self.state.role != CUSTOMER else ""
        self.output.write_line(f"logged in as {prefix}{self.state.login}", "green")
        return True

    def logout(self):
        """forget the current identity"""
        if not self.state.authenticated:
            self.output.write_line("no user logged in", "red"); return
        self.output.write_line(f"logged out {self.state.login}", "green")
        self.state = SessionState()

    # registration
    @reports_failures
    def create_user(self):
        """register a new customer account"""
        login = self.menu.read_line("enter login: ").strip()
        password = self.menu.read_line("enter password: ")
        phone = self.menu.read_line("enter phone number: ").strip()
        if not login or not password:
            self.output.write_line("login and password are required", "red"); return
        if not phone.isdigit():
            self.output.write_line("phone number must be numeric", "red"); return
        if self.db.execute_query("SELECT 1 FROM users WHERE login=?;", (login,)):
            self.output.write_line("login already taken", "red"); return
        self.db.execute_update(
            "INSERT INTO users(login, password, role, favorite_items, phone_num) VALUES (?,?,?,?,?);",
            (login, password, CUSTOMER, "", phone)
        )
        self.output.write_line(f"account {login} created", "green")

    # profile
    @reports_failures
    def view_profile(self):
        rows = self.db.execute_query(
            "SELECT login, role, favorite_items, phone_num FROM users WHERE login=?;",
            (self.state.login,)
        )
        show_table(self.output, PROFILE_HEADERS, rows)

    def update_profile(self):
        """profile submenu; loops until 'back'"""
        submenu = MenuSession(self.menu.input, self.output, title="UPDATE PROFILE")
        submenu.run([
            MenuChoice(1, "Update phone number", self.update_phone_num),
            MenuChoice(2, "Update password", self.update_password),
            MenuChoice(3, "Update favorite item", self.update_favorite_item),
            MenuChoice(4, "< Back"),
        ], exit_key=4)

    def _update_own(self, column: str, value: str):
        # column comes from the fixed set below, never from input
        self.db.execute_update(f"UPDATE users SET {column}=? WHERE login=?;", (value, self.state.login))
        self.output.write_line("profile updated successfully", "green")

    @reports_failures
    def update_phone_num(self):
        phone = self.menu.read_line("enter new phone number: ").strip()
        if not phone.isdigit():
            self.output.write_line("phone number must be numeric", "red"); return
        self._update_own("phone_num", phone)

    @reports_failures
    def update_password(self):
        password = self.menu.read_line("enter new password: ")
        if not password:
            self.output.write_line("password can't be empty", "red"); return
        self._update_own("password", password)

    @reports_failures
    def update_favorite_item(self):
        item = self.menu.read_line("enter new favorite item: ").strip()
        self._update_own("favorite_items", item)

    # admin
    @reports_failures
    def update_user(self):
        """manager only: change someone's login or role"""
        if not self.require_role(MANAGER):
            return
        target = self.menu.read_line("enter login of user to edit: ").strip()
        field = self.menu.read_line("edit role or login?: ").strip().lower()
        value = self.menu.read_line("enter new login/role: ").strip()
        if target == self.state.login:
            self.output.write_line("can't edit your own account while logged in", "red"); return
        if field not in ("login", "role"):
            self.output.write_line("can only edit 'login' or 'role'", "red"); return
        if not value:
            self.output.write_line("your input is invalid!", "red"); return
        if field == "role":
            value = value.lower()
            if value not in ROLES:
                self.output.write_line(f"role must be one of: {', '.join(ROLES)}", "red"); return
        count = self.db.execute_update(f"UPDATE users SET {field}=? WHERE login=?;", (value, target))
        if not count:
            self.output.write_line(f"no user named {target}", "red"); return
        self.output.write_line(f"updated {field} of {target}", "green")

    def can_see_all_orders(self) -> bool:
        return self.has_role(DRIVER, MANAGER)
