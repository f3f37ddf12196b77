"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.

Human and quiet output of ``build`` and ``deploy_dev`` ends with an
unindented ``Installed Version: <version>`` line: parent builds scrape it
from stdout.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from bldctl.infrastructure.nested import format_installed_version
from bldctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from bldctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
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

    if result.op == "print_version":
        return str(result.data["version"])
    if result.op in _REPORTS_VERSION:
        return format_installed_version(result.data["version"])
    if result.op == "resolve":
        return "\n".join(f"{d['name']} {d['version']}" for d in result.data.get("dependencies", []))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="bld.ok")
    op = Text(f"  {result.op}", style="bld.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="bld.key")
    if key == "project":
        v = Text(str(value), style="bld.project")
    elif key == "version":
        v = Text(str(value), style="bld.version")
    elif key in ("root", "artifact"):
        v = Text(str(value), style="bld.path")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _installed_version(console: Console, version: str) -> None:
    console.print(Text(format_installed_version(version)), soft_wrap=True)


def _dependency_table(dependencies: list[dict[str, Any]]) -> Table:
    """Build a Rich Table of resolved coordinates."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Dependency", style="bld.project", no_wrap=True)
    table.add_column("Version", style="bld.version", no_wrap=True)
    table.add_column("Scope")
    for dep in dependencies:
        scope = dep.get("scope") or ""
        table.add_row(
            str(dep.get("name", "")),
            str(dep.get("version", "")),
            Text(scope, style=f"bld.scope.{scope}" if scope == "test" else ""),
        )
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="bld.error")
    op = Text(f"  {result.op}", style="bld.op")
    code = Text(f" [{err.code}]" if err else "", style="bld.key")
    sep = Text(" — ")
    console.print(label, op, code, sep, Text(msg), soft_wrap=True)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            if isinstance(v, (dict, list)):
                v = _json.dumps(v, separators=(",", ":"))
            console.print(Text(f"    {k}: {v}"), soft_wrap=True)


# ── Operation renderers ───────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "project", result.data.get("project", ""))
    for name in result.data.get("checks", []):
        console.print(Text("  ✓ ", style="bld.ok"), Text(name.replace("_", " ")), end="")
        console.print()


def _render_resolve(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "project", d.get("project", ""))
    _field(console, "count", d.get("count", 0))
    deps = d.get("dependencies", [])
    if deps:
        console.print()
        console.print(_dependency_table(deps))
    if verbose:
        _field(console, "resource_paths", ", ".join(d.get("resource_paths", [])))
        _field(console, "source_paths", ", ".join(d.get("source_paths", [])))


def _render_paths(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    for path in result.data.get("resource_paths", []):
        console.print(Text(path, style="bld.path"), soft_wrap=True)


def _render_version(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _installed_version(console, result.data["version"])


def _render_status(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("root", "branch", "commit_count", "short_hash"):
        if key in d:
            _field(console, key, d[key])
    clean = d.get("clean")
    style = "bld.ok" if clean else "bld.warning"
    console.print(Text("  clean: ", style="bld.key"), Text(str(clean).lower(), style=style), end="")
    console.print()


def _render_build(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in ("project", "version", "artifact", "repository"):
        if d.get(key):
            _field(console, key, d[key])
    if verbose and d.get("dependencies"):
        console.print()
        console.print(_dependency_table(d["dependencies"]))
    _installed_version(console, d["version"])


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_REPORTS_VERSION = frozenset({"build", "deploy_dev"})

_OP_RENDERERS: dict[str, Any] = {
    "check": _render_check,
    "resolve": _render_resolve,
    "resource_paths": _render_paths,
    "print_version": _render_version,
    "status": _render_status,
    "build": _render_build,
    "deploy_dev": _render_build,
}
