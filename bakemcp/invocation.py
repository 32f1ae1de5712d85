"""Render the async execute function for one tool.

The generated function builds the URL from BASE_URL and the operation
path, percent-encodes every path placeholder, appends defined query
parameters, sends the JSON body (if any) with fetch and returns the raw
response text. Non-2xx responses throw with status and body.

Header parameters are part of the tool's validator but are not sent.
"""

from __future__ import annotations

import re
from typing import Callable

from .js import JS_RESERVED_WORDS, is_identifier, js_string, member, property_key, template_text
from .models import Parameter, Tool

_PLACEHOLDER = re.compile(r"\{([^}]+)\}")

# Names the generated function body declares or calls
_EXECUTOR_LOCALS = frozenset({
    "args", "bodyArgs", "url", "qp", "qs", "res", "body",
    "BASE_URL", "JSON", "String", "URLSearchParams", "encodeURIComponent",
    "fetch", "Error",
})


def path_placeholders(path: str) -> list[str]:
    """Placeholder names in *path*, in order of appearance."""
    return _PLACEHOLDER.findall(path)


def _is_safe_local(name: str) -> bool:
    return is_identifier(name) and name not in JS_RESERVED_WORDS and name not in _EXECUTOR_LOCALS


def _local_bindings(names: list[str]) -> dict[str, str]:
    """Local variable per destructured argument; unsafe names get __pN aliases."""
    taken = set(names)
    bindings: dict[str, str] = {}
    alias = 0
    for name in names:
        if _is_safe_local(name):
            bindings[name] = name
            continue
        while f"__p{alias}" in taken:
            alias += 1
        bindings[name] = f"__p{alias}"
        taken.add(bindings[name])
        alias += 1
    return bindings


def _destructure_pattern(bindings: dict[str, str]) -> str:
    entries = [
        name if local == name else f"{property_key(name)}: {local}"
        for name, local in bindings.items()
    ]
    return ", ".join(entries)


def build_url_expr(path: str, value_of: Callable[[str], str]) -> str:
    """URL expression: BASE_URL + "/path" or a template literal with encoded placeholders."""
    if not _PLACEHOLDER.search(path):
        return f"BASE_URL + {js_string(path)}"

    parts = []
    last = 0
    for match in _PLACEHOLDER.finditer(path):
        parts.append(template_text(path[last:match.start()]))
        parts.append(f"${{encodeURIComponent({value_of(match.group(1))})}}")
        last = match.end()
    parts.append(template_text(path[last:]))
    return "`${BASE_URL}" + "".join(parts) + "`"


def _unique_names(params: list[Parameter]) -> list[str]:
    return list(dict.fromkeys(p.name for p in params))


def build_execute_fn(tool: Tool) -> str:
    """Render `async (args) => { ... }` for *tool*."""
    path_params = tool.params_in("path")
    query_params = tool.params_in("query")
    placeholders = path_placeholders(tool.path)
    has_body = tool.body is not None
    has_non_body_params = bool(path_params or query_params)
    needs_args = has_body or has_non_body_params or bool(placeholders)

    lines: list[str] = []

    # Destructure path/query params out of the body when both are present
    use_destructuring = has_body and has_non_body_params
    bindings: dict[str, str] = {}
    if use_destructuring:
        bindings = _local_bindings(_unique_names(path_params + query_params))
        lines.append(f"    const {{ {_destructure_pattern(bindings)}, ...bodyArgs }} = args;")

    def value_of(name: str) -> str:
        if name in bindings:
            return bindings[name]
        return member("args", name)

    url_expr = build_url_expr(tool.path, value_of)
    uses_url_var = bool(query_params or path_params or placeholders)
    if uses_url_var:
        lines.append(f"    let url = {url_expr};")

    if query_params:
        lines.append("    const qp = new URLSearchParams();")
        for name in _unique_names(query_params):
            ref = value_of(name)
            lines.append(f"    if ({ref} !== undefined) qp.append({js_string(name)}, String({ref}));")
        lines.append("    const qs = qp.toString();")
        lines.append('    if (qs) url += "?" + qs;')

    fetch_url = "url" if uses_url_var else url_expr
    method = js_string(tool.method.upper())

    if has_body:
        payload = "bodyArgs" if use_destructuring else "args"
        lines.append(f"    const res = await fetch({fetch_url}, {{")
        lines.append(f"      method: {method},")
        lines.append('      headers: { "Content-Type": "application/json" },')
        lines.append(f"      body: JSON.stringify({payload}),")
        lines.append("    });")
    else:
        lines.append(f"    const res = await fetch({fetch_url}, {{ method: {method} }});")

    lines.append("    const body = await res.text();")
    lines.append('    if (!res.ok) throw new Error("HTTP " + res.status + ": " + body);')
    lines.append("    return body;")

    signature = "(args)" if needs_args else "()"
    body = "\n".join(lines)
    return f"async {signature} => {{\n{body}\n  }}"
