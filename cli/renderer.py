"""
PXF Option Renderer
===================
Formats catalog listings and resolved options for the terminal.

Features:
  - Aligned ASCII tables for catalog listings
  - key: value blocks for a resolved PxfOptions
  - Error rendering with SQLSTATE and HINT for option errors
"""

import sys
from dataclasses import fields
from enum import Enum
from typing import Any, Dict, List, Optional, TextIO

from options.errors import OptionError
from options.option_catalog import Option


class Renderer:

    def __init__(self, output: TextIO = None):
        self.output = output or sys.stdout
        self.show_headers: bool = True
        self.max_col_width: int = 50

    # ─── Public API ─────────────────────────────────────────────────

    def render_rows(self, rows: List[Dict[str, Any]], column_names: Optional[List[str]] = None) -> int:
        """Render a list of dict rows as a table. Returns row count."""
        headers = column_names or (list(rows[0].keys()) if rows else [])
        if headers:
            widths = self._calculate_widths(headers, rows)
            if self.show_headers:
                self._print_table_separator(widths, headers)
                self._print_table_row(widths, headers, {h: h for h in headers})
            self._print_table_separator(widths, headers)
            for row in rows:
                self._print_table_row(widths, headers, row)
            self._print_table_separator(widths, headers)
        self._print(f"({len(rows)} row{'s' if len(rows) != 1 else ''})")
        return len(rows)

    def render_config(self, config) -> None:
        """Render a dataclass (e.g. PxfOptions) as aligned key: value lines."""
        names = [f.name for f in fields(config)]
        width = max(len(n) for n in names)
        for name in names:
            self._print(f"  {name:>{width}}: {self._format_value(getattr(config, name))}")

    def render_message(self, message: str):
        if message:
            self._print(message)

    def render_error(self, error: Exception):
        """Render an error with classification prefix."""
        if isinstance(error, OptionError):
            self._print(f"ERROR:  {error.message} (SQLSTATE {error.sqlstate})")
            if error.hint:
                self._print(f"HINT:  {error.hint}")
            return
        prefix = self._classify_error(type(error).__name__)
        self._print(f"{prefix}: {error}")

    # ─── Table helpers ──────────────────────────────────────────────

    def _calculate_widths(self, headers: List[str], rows: List[Dict]) -> Dict[str, int]:
        widths = {h: len(h) for h in headers}
        for row in rows:
            for h in headers:
                widths[h] = max(widths[h], len(self._format_value(row.get(h))))
        return {h: min(w, self.max_col_width) for h, w in widths.items()}

    def _print_table_separator(self, widths: Dict[str, int], headers: List[str]):
        self._print("+" + "+".join("-" * (widths[h] + 2) for h in headers) + "+")

    def _print_table_row(self, widths: Dict[str, int], headers: List[str], vals: Dict):
        parts = ["|"]
        for h in headers:
            w = widths[h]
            val_str = self._format_value(vals.get(h))
            if len(val_str) > w:
                val_str = val_str[:w - 3] + "..."
            parts.append(f" {val_str:<{w}} |")
        self._print("".join(parts))

    # ─── Helpers ────────────────────────────────────────────────────

    def _format_value(self, value) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, Enum):
            return str(value.value)
        if isinstance(value, Option):
            return f"{value.name} '{value.value}'"
        if isinstance(value, (list, tuple)):
            return ", ".join(self._format_value(v) for v in value)
        return str(value)

    def _classify_error(self, error_type: str) -> str:
        """Map error class name to user-friendly prefix."""
        mapping = {
            "ObjectNotFoundError": "CatalogError",
            "DependentObjectsError": "CatalogError",
            "CatalogError": "CatalogError",
            "ValueError": "ExecutionError",
            "RuntimeError": "ExecutionError",
            "KeyboardInterrupt": "Interrupted",
        }
        return mapping.get(error_type, f"Error[{error_type}]")

    def _print(self, text: str):
        print(text, file=self.output)
