"""Rendering of stored email templates.

Templates use ``{{name}}`` placeholders and ``{{#if name}}...{{/if}}``
conditional blocks. Values are inserted verbatim (no HTML escaping).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Final

_CONDITIONAL_BLOCK: Final[re.Pattern[str]] = re.compile(
    r"\{\{#if\s+([\w.]+)\s*\}\}((?:(?!\{\{#if\s).)*?)\{\{/if\}\}",
    re.DOTALL,
)
_PLACEHOLDER: Final[re.Pattern[str]] = re.compile(r"\{\{([\w.]+)\}\}")


def render_template(template: str | None, variables: Mapping[str, Any]) -> str:
    """Return ``template`` with conditional blocks resolved and placeholders filled.

    A conditional block is kept (without its markers) only when its variable
    is truthy; otherwise the whole block is dropped. Blocks are resolved
    innermost first until none remain, so sequential and nested blocks are
    both handled.
    Placeholders whose variable is missing or ``None`` stay in the output
    untouched.
    """

    if not template:
        return ""

    output = template
    while True:
        match = _CONDITIONAL_BLOCK.search(output)
        if match is None:
            break
        name, inner = match.group(1), match.group(2)
        replacement = inner if variables.get(name) else ""
        output = output[: match.start()] + replacement + output[match.end() :]

    def _substitute(placeholder: re.Match[str]) -> str:
        value = variables.get(placeholder.group(1))
        if value is None:
            return placeholder.group(0)
        return _stringify(value)

    return _PLACEHOLDER.sub(_substitute, output)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = ["render_template"]
