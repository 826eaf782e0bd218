"""Rewrite ``:name`` placeholders into PyMySQL's ``%(name)s`` pyformat."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

_TOKEN = re.compile(
    r"""
      '(?:[^'\\]|\\.|'')*'
    | "(?:[^"\\]|\\.|"")*"
    | `(?:[^`]|``)*`
    | ::
    | :(?P<name>[A-Za-z_][A-Za-z0-9_]*)
    | %
    """,
    re.VERBOSE | re.DOTALL,
)


def placeholder_names(sql: str) -> List[str]:
    """Return placeholder names in order of appearance (duplicates kept)."""
    return [m.group("name") for m in _TOKEN.finditer(sql) if m.group("name")]


def compile_named(sql: str, params: Optional[Mapping[str, Any]] = None) -> Tuple[str, Dict[str, Any]]:
    """
    Convert ``:name`` placeholders to pyformat and bind their values.

    Quoted strings and backtick identifiers are copied verbatim apart from
    ``%`` doubling, which every literal ``%`` needs once the statement goes
    through ``query % args``. ``::`` is kept as is. Placeholders absent from
    ``params`` bind ``None`` (SQL ``NULL``).

    Returns:
        tuple: The rewritten statement and the mapping of bound values.
    """
    params = params or {}
    bound: Dict[str, Any] = {}

    def _replace(match: "re.Match[str]") -> str:
        name = match.group("name")
        if name is not None:
            bound[name] = params.get(name)
            return f"%({name})s"
        return match.group(0).replace("%", "%%")

    return _TOKEN.sub(_replace, sql), bound
