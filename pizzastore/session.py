"""menu-driven interaction loop + the console it talks to"""

import functools
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, Sequence

from termcolor import cprint, colored

DEFAULT_PROMPT = "please make your choice: "
INVALID_INPUT_MESSAGE = "invalid input, please try again."
UNRECOGNIZED_CHOICE_MESSAGE = "Unrecognized choice!"

# error taxonomy
class ParseError(ValueError):
    """menu choice wasn't an integer"""

class UnrecognizedChoice(LookupError):
    """menu choice isn't one of the offered keys"""

class InputExhausted(EOFError):
    """input source hit end of stream"""

class CollaboratorFailure(Exception):
    """the database rejected or failed a statement"""

class ConnectionLost(CollaboratorFailure):
    """the database connection is gone; nothing more can be done this run"""

# i/o contracts
class InputSource(Protocol):
    def read_line(self, prompt: str = "") -> str | None: ...

class OutputSink(Protocol):
    def write_line(self, text: str = "", color: str | None = None, attrs: list[str] | None = None) -> None: ...

class ConsoleInput:
    """stdin via input(); end of stream comes back as None"""
    def read_line(self, prompt: str = "") -> str | None:
        try:
            return input(colored(prompt, "magenta") if prompt else "")
        except EOFError:
            print()
            return None

class ConsoleOutput:
    """stdout via termcolor"""
    def write_line(self, text: str = "", color: str | None = None, attrs: list[str] | None = None) -> None:
        cprint(text, color, attrs=attrs)

def reports_failures(handler: Callable) -> Callable:
    """handler boundary: report database failures as one red line and carry on.

    ConnectionLost is left alone so the application can shut down.
    The wrapped callable must be a method of an object with an ``output`` sink.
    """
    @functools.wraps(handler)
    def wrapper(self, *args, **kwargs):
        try:
            return handler(self, *args, **kwargs)
        except ConnectionLost:
            raise
        except CollaboratorFailure as e:
            self.output.write_line(f"error: {e}", "red")
            return None
    return wrapper

@dataclass
class MenuChoice:
    """numbered menu entry; the exit choice needs no handler"""
    key: int
    label: str
    handler: Callable[[], object] | None = None

class LoopState(Enum):
    ACTIVE = "active"
    TERMINATED = "terminated"

class MenuSession:
    """prompt, parse a number, dispatch, repeat until the exit key or end of input"""
    def __init__(self, input_source: InputSource, output: OutputSink, title: str | None = None):
        self.input = input_source
        self.output = output
        self.title = title
        self.state = LoopState.ACTIVE

    def read_line(self, prompt: str = "") -> str:
        """one raw line for handlers; raises InputExhausted at end of stream"""
        line = self.input.read_line(prompt)
        if line is None:
            raise InputExhausted("end of input")
        return line

    @staticmethod
    def parse_choice(raw: str) -> int:
        try:
            return int(raw.strip())
        except ValueError:
            raise ParseError(f"not a number: {raw!r}") from None

    def read_choice(self, prompt: str = DEFAULT_PROMPT) -> int:
        """keep asking until we get an integer (no retry limit)"""
        while True:
            raw = self.read_line(prompt)
            try:
                return self.parse_choice(raw)
            except ParseError:
                self.output.write_line(INVALID_INPUT_MESSAGE, "red")

    @staticmethod
    def _validate(choices: Sequence[MenuChoice], exit_key: int):
        keys = [c.key for c in choices]
        if len(set(keys)) != len(keys):
            raise ValueError(f"duplicate menu keys: {keys}")
        if exit_key not in keys:
            raise ValueError(f"exit key {exit_key} is not one of the menu keys {keys}")

    def _print_choices(self, choices: Sequence[MenuChoice]):
        if self.title:
            self.output.write_line(self.title, "green", attrs=["bold"])
            self.output.write_line("-" * len(self.title))
        for choice in choices:
            self.output.write_line(f"{choice.key}. {choice.label}")

    def _lookup(self, choices: Sequence[MenuChoice], key: int) -> MenuChoice:
        for choice in choices:
            if choice.key == key:
                return choice
        raise UnrecognizedChoice(key)

    def run(self, choices: Sequence[MenuChoice], prompt: str = DEFAULT_PROMPT, exit_key: int = 9):
        """loop until exit_key is chosen or input runs out"""
        self._validate(choices, exit_key)
        self.state = LoopState.ACTIVE
        try:
            while self.state is LoopState.ACTIVE:
                self._print_choices(choices)
                key = self.read_choice(prompt)
                if key == exit_key:
                    self.state = LoopState.TERMINATED
                    break
                try:
                    choice = self._lookup(choices, key)
                except UnrecognizedChoice:
                    self.output.write_line(UNRECOGNIZED_CHOICE_MESSAGE, "red")
                    continue
                if choice.handler is not None:
                    choice.handler()
        except InputExhausted:
            self.state = LoopState.TERMINATED
