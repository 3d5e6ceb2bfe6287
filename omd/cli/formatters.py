"""Rendering of routed payloads for the terminal."""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping, Sequence, TextIO

from pydantic import BaseModel
from rich.box import SIMPLE
from rich.console import Console
from rich.table import Table

Row = Mapping[str, object]


def to_rows(data: Any) -> list[dict[str, Any]]:
    """Turn whatever a provider returned into a flat list of rows.

    Models are dumped in JSON mode, mappings are copied, sequences are
    flattened and anything else becomes ``{"value": data}``.
    """

    if isinstance(data, BaseModel):
        return [data.model_dump(mode="json")]
    if isinstance(data, Mapping):
        return [dict(data)]
    if isinstance(data, (list, tuple)):
        return [row for item in data for row in to_rows(item)]
    return [{"value": data}]


def _columns_for(rows: Sequence[Row], requested: Sequence[str] | None) -> list[str]:
    # 未指定列时按出现顺序合并所有行的键
    if requested:
        return list(requested)
    seen: dict[str, None] = {}
    for row in rows:
        seen.update(dict.fromkeys(row))
    return list(seen)


def _cell(value: object) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        return f"{value:,.4f}".rstrip("0").rstrip(".")
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


class OutputFormatter:
    """Base class: one ``render`` call writes a complete document."""

    name = ""

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None:
        raise NotImplementedError


class TableFormatter(OutputFormatter):
    name = "table"

    def __init__(self, no_color: bool = False) -> None:
        self.no_color = no_color

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None:
        console = Console(file=stream, no_color=self.no_color, color_system=None if self.no_color else "auto")
        if not rows:
            console.print("No data available.")
            return

        table = Table(box=SIMPLE)
        for column in (names := _columns_for(rows, columns)):
            table.add_column(column, header_style="" if self.no_color else "bold")
        for row in rows:
            table.add_row(*[_cell(row.get(column)) for column in names])
        console.print(table)


class JSONFormatter(OutputFormatter):
    name = "json"

    def render(self, rows: Sequence[Row], *, stream: TextIO, columns: Sequence[str] | None = None) -> None:
        document = [dict(row) for row in rows]
        if columns:
            document = [{column: row.get(column) for column in columns} for row in document]
        stream.write(json.dumps(document, ensure_ascii=False, default=str, indent=2) + "\n")
        stream.flush()


_FACTORIES: dict[str, Callable[[bool], OutputFormatter]] = {
    "table": lambda no_color: TableFormatter(no_color=no_color),
    "json": lambda no_color: JSONFormatter(),
}


def create_formatter(name: str, *, no_color: bool = False) -> OutputFormatter:
    """Look up a formatter by name (``table`` or ``json``); raises ``ValueError`` otherwise."""

    factory = _FACTORIES.get(name.strip().lower())
    if factory is None:
        raise ValueError(f"Unsupported format '{name}'. Available formats: {', '.join(_FACTORIES)}.")
    return factory(no_color)


__all__ = ["OutputFormatter", "TableFormatter", "JSONFormatter", "create_formatter", "to_rows"]
