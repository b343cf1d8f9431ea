"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rxctl.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from rxctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if item.get("id") is not None)
    if result.data.get("id") is not None:
        return str(result.data["id"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "rx.ok"), (f"  {result.op}", "rx.op")))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="rx.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="rx.id")
    elif key.endswith("_date"):
        v = Text(str(value), style="rx.date")
    elif key == "name" or key.endswith("_name"):
        v = Text(str(value), style="rx.name")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _status_text(status: str) -> Text:
    return Text(status.replace("_", " "), style=style_for_status(status))


def _fill_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table of fill views."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Rx #", style="rx.id", no_wrap=True)
    table.add_column("Patient", style="rx.name")
    table.add_column("Medication")
    table.add_column("Qty", justify="right")
    table.add_column("Filled", style="rx.date")
    table.add_column("Next refill", style="rx.date")
    has_status = any("status" in item for item in items)
    if has_status:
        table.add_column("Status")
    if verbose:
        table.add_column("Prescriber", style="dim")
        table.add_column("Sig", style="dim")

    for item in items:
        row: list[Any] = [
            str(item.get("id", "")),
            str(item.get("patient_name") or item.get("patient_id", "")),
            str(item.get("medication_name") or item.get("medication_id", "")),
            str(item.get("quantity", "")),
            str(item.get("fill_date", "")),
            str(item.get("next_refill_date", "")),
        ]
        if has_status:
            row.append(_status_text(str(item.get("status", ""))))
        if verbose:
            row.append(str(item.get("prescriber", "")))
            row.append(str(item.get("sig", "")))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "rx.error"), (f"  {result.op}", "rx.op"), f" — {msg}"))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Fulfillment renderers ─────────────────────────────────────────────


def _render_fill(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render fill/refill results."""
    _status_line(console, result)
    d = result.data
    for key in ("id", "patient_name", "medication_name", "quantity", "days_supply"):
        if d.get(key) is not None:
            _field(console, key, d[key])
    for key in ("fill_date", "next_refill_date", "refills", "stock_remaining"):
        _field(console, key, d.get(key))
    if d.get("refill_of") is not None:
        _field(console, "refill_of", f"Rx #{d['refill_of']}")
    if verbose:
        _field(console, "prescriber", d.get("prescriber"))
        _field(console, "sig", d.get("sig"))
        _render_meta(console, result)


# ── Dashboard renderers ───────────────────────────────────────────────


def _render_stats(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render dashboard counts as a panel."""
    d = result.data
    meta = result.meta or {}
    lines = [
        f"[rx.due.today]Due today[/rx.due.today]    {d.get('due_today_count', 0)}",
        f"[rx.due.soon]Due soon[/rx.due.soon]     {d.get('due_soon_count', 0)}",
        f"[rx.stock.low]Low stock[/rx.stock.low]    {d.get('low_stock_count', 0)}",
        f"Active Rx      {d.get('active_count', 0)}",
    ]
    title = f"Dashboard as of {meta.get('now', '?')}"
    console.print(Panel("\n".join(lines), title=title, border_style="dim", expand=False))
    if verbose:
        _render_meta(console, result)


def _render_fill_list(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render due_list and upcoming results as a table."""
    items = result.data.get("items", [])
    if not items:
        console.print("No refills found.")
        return
    console.print(_fill_table(items, verbose=verbose))
    label = result.data.get("filter")
    suffix = f" ({label})" if label else ""
    console.print(f"\n{result.data.get('count', len(items))} refills{suffix}")


def _render_history(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a pair's refill chain, oldest first, marking the current record."""
    d = result.data
    items = d.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("", no_wrap=True)
    table.add_column("Rx #", style="rx.id", no_wrap=True)
    table.add_column("Filled", style="rx.date")
    table.add_column("Qty", justify="right")
    table.add_column("Refills", justify="right")
    table.add_column("Next refill", style="rx.date")
    if verbose:
        table.add_column("Prescriber", style="dim")
    for item in items:
        row = [
            Text("*", style="rx.ok") if item.get("current") else "",
            str(item.get("id", "")),
            str(item.get("fill_date", "")),
            str(item.get("quantity", "")),
            str(item.get("refills", "")),
            str(item.get("next_refill_date", "")),
        ]
        if verbose:
            row.append(str(item.get("prescriber", "")))
        table.add_row(*row)

    first = items[0] if items else {}
    patient = first.get("patient_name") or d.get("patient_id")
    medication = first.get("medication_name") or d.get("medication_id")
    console.print(f"Refill history for [rx.name]{patient}[/rx.name] / {medication}")
    console.print(table)
    console.print(f"\nCurrent: [rx.id]Rx #{d.get('current_id')}[/rx.id]")


def _render_patient_history(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render every fill for one patient with due status, marking current records."""
    d = result.data
    items = d.get("items", [])
    console.print(f"Prescription history for [rx.name]{d.get('patient_name')}[/rx.name]")
    if not items:
        console.print("No prescription history found.")
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("", no_wrap=True)
    table.add_column("Rx #", style="rx.id", no_wrap=True)
    table.add_column("Filled", style="rx.date")
    table.add_column("Medication")
    table.add_column("Qty", justify="right")
    table.add_column("Next refill", style="rx.date")
    table.add_column("Status")
    if verbose:
        table.add_column("Sig", style="dim")
        table.add_column("Prescriber", style="dim")
    for item in items:
        row: list[Any] = [
            Text("*", style="rx.ok") if item.get("current") else "",
            str(item.get("id", "")),
            str(item.get("fill_date", "")),
            str(item.get("medication_name") or item.get("medication_id", "")),
            str(item.get("quantity", "")),
            str(item.get("next_refill_date", "")),
            _status_text(str(item.get("status", ""))),
        ]
        if verbose:
            row.append(str(item.get("sig", "")))
            row.append(str(item.get("prescriber", "")))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{d.get('count', len(items))} fills, {d.get('current_count', 0)} current (*)")


# ── Directory renderers ───────────────────────────────────────────────


def _render_patients(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="rx.id", no_wrap=True)
    table.add_column("Name", style="rx.name")
    table.add_column("Birth date", style="rx.date")
    table.add_column("Phone")
    if verbose:
        table.add_column("Allergies")
        table.add_column("Insurance", style="dim")
    for item in items:
        row = [
            str(item.get("id", "")),
            str(item.get("name", "")),
            str(item.get("birth_date", "")),
            str(item.get("phone", "")),
        ]
        if verbose:
            row.append(str(item.get("allergies") or ""))
            row.append(str(item.get("insurance_provider") or ""))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} patients")


def _render_medications(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="rx.id", no_wrap=True)
    table.add_column("Name", style="rx.name")
    table.add_column("DIN")
    table.add_column("Stock", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Expires", style="rx.date")
    if verbose:
        table.add_column("Description", style="dim")
    for item in items:
        stock = str(item.get("stock", ""))
        row: list[Any] = [
            str(item.get("id", "")),
            str(item.get("name", "")),
            str(item.get("din", "")),
            Text(stock, style="rx.stock.low") if item.get("low_stock") else stock,
            f"{float(item.get('price') or 0):.2f}",
            str(item.get("expiration", "")),
        ]
        if verbose:
            row.append(str(item.get("description") or ""))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} medications")


def _render_record(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_patient/get_medication results as a panel."""
    d = result.data
    lines = [f"{key}: {value}" for key, value in d.items() if key not in ("id", "name")]
    title = f"{d.get('id', '?')} — {d.get('name', 'Unnamed')}"
    console.print(Panel("\n".join(lines), title=title, border_style="dim", expand=False))


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render add_patient/add_medication/update_medication results."""
    _status_line(console, result)
    for key in ("id", "name", "din", "stock", "price", "description"):
        if key in result.data:
            _field(console, key, result.data[key])
    if "fields_changed" in result.data:
        _field(console, "fields_changed", ", ".join(result.data["fields_changed"]))
    if verbose:
        _render_meta(console, result)


# ── Audit / init renderers ────────────────────────────────────────────


def _render_audit(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print("No audit entries.")
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("When", style="rx.date", no_wrap=True)
    table.add_column("User", style="rx.name")
    table.add_column("Action", style="rx.op")
    table.add_column("Details")
    for item in items:
        table.add_row(
            str(item.get("timestamp", "")),
            str(item.get("user", "")),
            str(item.get("action", "")),
            str(item.get("details") or ""),
        )
    console.print(table)


def _render_init(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "data_root", d.get("data_root"))
    _field(console, "database", d.get("database"))
    seeded = d.get("seeded") or {}
    if any(seeded.values()):
        _field(console, "seeded", ", ".join(f"{n} {table}" for table, n in seeded.items()))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Fulfillment
    "fill": _render_fill,
    "refill": _render_fill,
    # Dashboard
    "dashboard_stats": _render_stats,
    "due_list": _render_fill_list,
    "upcoming": _render_fill_list,
    "history": _render_history,
    "patient_history": _render_patient_history,
    # Directory
    "add_patient": _render_mutation,
    "list_patients": _render_patients,
    "get_patient": _render_record,
    "add_medication": _render_mutation,
    "list_medications": _render_medications,
    "get_medication": _render_record,
    "update_medication": _render_mutation,
    # Audit / init
    "audit_log": _render_audit,
    "init": _render_init,
}
