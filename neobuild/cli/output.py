"""Output formats of the CLI, a task line is a state (like OK or FAILED) followed by a
translated message. Human outputs rewrite the current line until the task is finished,
machine outputs print one escaped line per call.
"""

from .lang import get_raw as _raw

import shutil
import sys

from typing import List, Tuple, Optional, TextIO


Row = Optional[Tuple[str, ...]]


class OutputTable:
    """Base class for formatting tables, a row is a tuple of cells or none for a
    separator.
    """

    def __init__(self) -> None:
        self.rows: List[Row] = []

    def add(self, *cells):
        """Add a row to the table, cells are converted to strings.
        """
        self.rows.append(tuple(map(str, cells)))

    def separator(self) -> None:
        self.rows.append(None)

    def column_widths(self) -> List[int]:
        widths: List[int] = []
        for row in self.rows:
            for i, cell in enumerate(row or ()):
                if i < len(widths):
                    widths[i] = max(widths[i], len(cell))
                else:
                    widths.append(len(cell))
        return widths

    def print(self) -> None:
        raise NotImplementedError


class Output:
    """This class is used to abstract the output of the CLI. The implementation differs
    depending on the desired output format.
    """

    def table(self) -> OutputTable:
        """Create a table builder, rows and separators can be added to it before
        printing it.
        """
        raise NotImplementedError

    def task(self, state: Optional[str], key: Optional[str], **kwargs) -> None:
        """Update the current task, or start a new one if the previous one has been
        finished. A none state keeps the state column blank, a none key only prints
        the state.
        """
        raise NotImplementedError

    def finish(self) -> None:
        """Finish the current task, if any.
        """
        raise NotImplementedError


class HumanOutput(Output):

    STATE_WIDTH = 6
    # Brackets and the space after the state.
    HEADER_WIDTH = STATE_WIDTH + 3

    state_colors = {
        "OK": "\033[92m",
        "FAILED": "\033[31m",
        "WARN": "\033[33m",
        "INFO": "\033[34m",
        "HALT": "\033[33m",
    }

    def __init__(self, color: bool, file: Optional[TextIO] = None) -> None:
        self.color = color
        self.file = sys.stdout if file is None else file
        # Length of the message on the current line, none if no task is running.
        self.line_len: Optional[int] = None

    def table(self) -> OutputTable:
        return HumanTable(self.file)

    def header(self, state: Optional[str]) -> str:
        if state is None:
            return " " * self.HEADER_WIDTH
        state = f"{state:^{self.STATE_WIDTH}s}"
        color = self.state_colors.get(state.strip()) if self.color else None
        if color is not None:
            state = f"{color}{state}\033[0m"
        return f"[{state}] "

    def fit(self, msg: str) -> str:
        """Truncate the message if the task line would overflow the terminal.
        """
        max_len = shutil.get_terminal_size().columns - self.HEADER_WIDTH
        if max_len > 10 and len(msg) > max_len:
            return f"{msg[:max_len - 3]}..."
        return msg

    def task(self, state: Optional[str], key: Optional[str], **kwargs) -> None:

        msg = "" if key is None else self.fit(_raw(key, kwargs))
        padding = max(0, (self.line_len or 0) - len(msg))

        self.file.write(f"\r{self.header(state)}{msg}{' ' * padding}")
        self.file.flush()
        self.line_len = len(msg)

    def finish(self) -> None:
        if self.line_len is not None:
            self.file.write("\n")
            self.file.flush()
            self.line_len = None


class HumanTable(OutputTable):

    def __init__(self, file: TextIO) -> None:
        super().__init__()
        self.file = file

    def print(self) -> None:

        widths = self.column_widths()

        def rule(left: str, middle: str, right: str) -> str:
            return left + middle.join("─" * (width + 2) for width in widths) + right

        lines = [rule("┌", "┬", "┐")]
        for row in self.rows:
            if row is None:
                lines.append(rule("├", "┼", "┤"))
            else:
                cells = [*row, *([""] * (len(widths) - len(row)))]
                lines.append("│" + "│".join(f" {cell:{width}s} " for cell, width in zip(cells, widths)) + "│")
        lines.append(rule("└", "┴", "┘"))

        self.file.write("\n".join(lines) + "\n")
        self.file.flush()


class MachineOutput(Output):
    """Print each call as a line `<kind>:<field>,<field>,...`, keyword arguments are
    given as `key=value` fields. Commas and line breaks of fields are escaped with a
    backslash.
    """

    escapes = {",": "\\,", "\n": "\\n", "\r": "\\r"}

    def __init__(self, file: Optional[TextIO] = None) -> None:
        self.file = sys.stdout if file is None else file

    @classmethod
    def escape(cls, field: str) -> str:
        return "".join(cls.escapes.get(c, c) for c in field)

    def line(self, kind: str, *fields: str, **kwargs) -> None:
        all_fields = [*fields, *(f"{k}={v}" for k, v in kwargs.items())]
        self.file.write(f"{kind}:{','.join(map(self.escape, all_fields))}\n")
        self.file.flush()

    def table(self) -> OutputTable:
        return MachineTable(self)

    def task(self, state: Optional[str], key: Optional[str], **kwargs) -> None:
        self.line("task", str(state), str(key), **kwargs)

    def finish(self) -> None:
        pass


class MachineTable(OutputTable):

    def __init__(self, out: MachineOutput) -> None:
        super().__init__()
        self.out = out

    def print(self) -> None:
        self.out.line("table", str(len(self.rows)))
        for row in self.rows:
            if row is None:
                self.out.line("sep")
            else:
                self.out.line("row", *row)
