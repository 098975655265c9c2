"""aligned text tables for query results"""

from typing import Sequence

# spaces after the widest cell of each column
COLUMN_GAP = 2

def column_widths(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[int]:
    """widest of header / cells per column; cells past the header count don't widen anything"""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[:len(widths)]):
            widths[i] = max(widths[i], len(str(cell)))
    return widths

def render_lines(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    """header line + one line per row, in input order"""
    widths = column_widths(headers, rows)

    def line(cells: Sequence[str]) -> str:
        # short rows only render what they have
        return "".join(str(c).ljust(w + COLUMN_GAP) for c, w in zip(cells, widths))

    return [line(headers)] + [line(row) for row in rows]

def render(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """render headers + rows as a left-justified table (always 1 + len(rows) lines)"""
    return "\n".join(render_lines(headers, rows))

def show_table(output, headers: Sequence[str], rows: Sequence[Sequence[str]]):
    """write a rendered table to an output sink, header in bold"""
    header, *body = render_lines(headers, rows)
    output.write_line(header, attrs=["bold"])
    for line in body:
        output.write_line(line)
