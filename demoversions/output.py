"""
Output module for demoversions.

Provides consistent output formatting across all commands:
- JSONL (default for lists): Newline-delimited JSON for piping
- JSON (single objects): One document, optionally indented
- Pretty: Human-readable tables using Rich

Data always goes to stdout; logs and errors go to stderr.
"""

import json
import sys
from typing import Iterable, Any, Dict, Optional, List

from rich.console import Console
from rich.table import Table


def _to_data(item: Any) -> Any:
    if hasattr(item, 'to_dict'):
        return item.to_dict()
    if isinstance(item, (dict, list, str, int, float, bool)) or item is None:
        return item
    return {'value': str(item)}


def emit(
    items: Iterable[Any],
    pretty: bool = False,
    columns: Optional[List[str]] = None,
    title: Optional[str] = None
) -> None:
    """
    Emit items as JSONL or pretty table.

    Args:
        items: Items to emit (should have to_dict() method or be dicts)
        pretty: If True, render as table. If False, output JSONL
        columns: Column names for table (auto-detected if None)
        title: Optional table title
    """
    if pretty:
        _emit_table(items, columns, title)
    else:
        for item in items:
            print(json.dumps(_to_data(item), ensure_ascii=False), flush=True)


def emit_json(obj: Any, pretty: bool = False) -> None:
    """Emit a single object as one JSON document."""
    indent = 2 if pretty else None
    print(json.dumps(_to_data(obj), indent=indent, ensure_ascii=False), flush=True)


def _emit_table(items: Iterable[Any], columns: Optional[List[str]] = None, title: Optional[str] = None) -> None:
    """Emit items as a Rich table."""
    rows = [_to_data(item) for item in items]
    console = Console()

    if not rows:
        console.print("No results found")
        return

    rows = [row if isinstance(row, dict) else {'value': row} for row in rows]
    if not columns:
        columns = _auto_columns(rows)

    table = Table(show_header=True, header_style="bold", title=title)
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*[_format_value(row.get(col, '')) for col in columns])

    console.print(table)


def _auto_columns(rows: List[Dict]) -> List[str]:
    """Auto-detect columns from rows."""
    preferred = ['tag', 'name', 'version', 'commit', 'date', 'semver_tag', 'is_prerelease']
    all_keys = set(rows[0].keys())

    columns = [col for col in preferred if col in all_keys]
    for key in sorted(all_keys):
        if key not in columns:
            columns.append(key)

    return columns[:8]


def _format_value(value: Any, max_len: int = 50) -> str:
    """Format a value for table display."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    if isinstance(value, list):
        s = ', '.join(str(v) for v in value[:3])
        if len(value) > 3:
            s += f' (+{len(value) - 3} more)'
        return s
    if isinstance(value, dict):
        return '{...}'

    s = str(value)
    if len(s) > max_len:
        return s[:max_len-3] + '...'
    return s


def emit_error(
    error: str,
    type: str = "error",
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Emit error to stderr as JSON.

    Args:
        error: Error message
        type: Error type (e.g., "RepositoryError", "ConfigError")
        context: Additional context dict
    """
    obj = {
        'error': error,
        'type': type
    }
    if context:
        obj['context'] = context

    print(json.dumps(obj, ensure_ascii=False), file=sys.stderr, flush=True)
