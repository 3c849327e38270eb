"""
Output module for newmac.

Provides consistent output formatting:
- JSONL (default): Newline-delimited JSON for piping
- Pretty: Human-readable tables using Rich

Usage:
    from newmac.output import emit, emit_error

    # Stream step results as JSONL (default) or a pretty table
    emit(summary.details, pretty=pretty)

    # Emit error to stderr
    emit_error("Clone failed", type="CloneError", context={"url": url})
"""

import json
import os
import sys
from pathlib import Path
from typing import Iterable, Any, Dict, Optional, List

from rich import box
from rich.console import Console
from rich.table import Table

STATUS_STYLES = {
    'success': 'green',
    'dry_run': 'cyan',
    'skipped': 'dim',
    'failed': 'red',
}

TABLE_COLUMNS = ['step', 'name', 'kind', 'status', 'action', 'present', 'path', 'message', 'error']
MAX_COLUMNS = 8


def _to_dict(item: Any) -> Dict[str, Any]:
    if hasattr(item, 'to_dict'):
        return item.to_dict()
    if isinstance(item, dict):
        return item
    return {'value': str(item)}


def emit(
    items: Iterable[Any],
    pretty: bool = False,
    columns: Optional[List[str]] = None,
    title: Optional[str] = None,
    err: bool = False
) -> None:
    """
    Emit items as JSONL or pretty table.

    Args:
        items: Items to emit (should have to_dict() method or be dicts)
        pretty: If True, render as table. If False, output JSONL
        columns: Column names for table (auto-detected if None)
        title: Table title (pretty mode only)
        err: If True, output to stderr instead of stdout
    """
    stream = sys.stderr if err else sys.stdout

    if pretty:
        _emit_table(items, columns, title, Console(file=stream))
    else:
        _emit_jsonl(items, stream)


def _emit_jsonl(items: Iterable[Any], stream=sys.stdout) -> None:
    """Emit items as JSONL."""
    for item in items:
        print(json.dumps(_to_dict(item), ensure_ascii=False), file=stream, flush=True)


def _emit_table(items: Iterable[Any], columns: Optional[List[str]], title: Optional[str],
                console: Console) -> None:
    """Emit items as a Rich table."""
    rows = [_to_dict(item) for item in items]

    if not rows:
        console.print("[yellow]No results found.[/yellow]")
        return

    if not columns:
        columns = _auto_columns(rows)

    table = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold")
    for col in columns:
        table.add_column(col)

    for row in rows:
        values = []
        for col in columns:
            text = _format_value(row.get(col, ''))
            if col == 'status' and text in STATUS_STYLES:
                text = f"[{STATUS_STYLES[text]}]{text}[/{STATUS_STYLES[text]}]"
            values.append(text)
        table.add_row(*values)

    console.print(table)


def _auto_columns(rows: List[Dict]) -> List[str]:
    """Known step/status columns first, then any extra keys, at most MAX_COLUMNS."""
    seen = {key for row in rows for key in row}
    columns = [col for col in TABLE_COLUMNS if col in seen]
    columns.extend(sorted(seen.difference(columns)))
    return columns[:MAX_COLUMNS]


def _format_value(value: Any, max_len: int = 60) -> str:
    """Render one cell: home-relative paths, Yes/No flags, short lists."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    if isinstance(value, (list, tuple)):
        shown = ', '.join(str(v) for v in value[:3])
        if len(value) > 3:
            shown += f' (+{len(value) - 3} more)'
        return shown

    text = str(value)
    home = str(Path.home())
    if text == home or text.startswith(home + os.sep):
        text = '~' + text[len(home):]
    if len(text) > max_len:
        text = text[:max_len - 3] + '...'
    return text


def emit_error(
    error: str,
    type: str = "error",
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Emit error to stderr as JSON.

    Args:
        error: Error message
        type: Error type (e.g., "CloneError", "ConfigError")
        context: Additional context dict
    """
    obj = {
        'error': error,
        'type': type
    }
    if context:
        obj['context'] = context

    print(json.dumps(obj, ensure_ascii=False), file=sys.stderr, flush=True)
