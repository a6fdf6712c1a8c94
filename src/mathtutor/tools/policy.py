"""
Code Policy Validator

Static allow/deny policy applied to every snippet before it may reach
the sandbox. This is a coarse lexical filter, not a parser: denied
substrings are matched anywhere in the text, including comments and
string literals, and false positives are the accepted failure mode.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

ALLOWED_MODULES = (
    "math",
    "numpy",
    "statistics",
    "random",
    "decimal",
    "fractions",
    "operator",
)

DENIED_SUBSTRINGS = (
    # filesystem
    "open",
    "file",
    # process / host access
    "subprocess",
    "os.",
    "sys.",
    # dynamic evaluation
    "exec",
    "eval",
    "compile(",
    # dynamic import and reflection
    "__import__",
    "__builtins__",
    "globals(",
    "breakpoint(",
    # interactive input
    "input(",
)

REJECTION_MESSAGE = "Invalid or unauthorized Python code"

_NAME = r"[A-Za-z_][\w.]*"
_CONTINUATION = re.compile(r"\\\r?\n")
_FROM_IMPORT = re.compile(rf"\bfrom\s+(\.*{_NAME}|\.+)\s+import\b(?:\s*\([^)]*\)|[^\n;]*)")
_IMPORT_KEYWORD = re.compile(r"\bimport\b")
_IMPORT = re.compile(rf"import\s+({_NAME}(?:\s+as\s+\w+)?(?:\s*,\s*{_NAME}(?:\s+as\s+\w+)?)*)")


def imported_modules(code: str) -> list[str]:
    """Return the root module name of every import declaration in code.

    Backslash continuations are folded first, so a declaration split
    over several lines is read as one. Relative imports, and any
    `import` keyword not followed by a readable name list, yield an
    empty root, which no allow-set contains.
    """
    code = _CONTINUATION.sub(" ", code)
    modules: list[str] = []
    for match in _FROM_IMPORT.finditer(code):
        modules.append(_root(match.group(1)))

    remainder = _FROM_IMPORT.sub(" ", code)
    for keyword in _IMPORT_KEYWORD.finditer(remainder):
        match = _IMPORT.match(remainder, keyword.start())
        if match is None:
            modules.append("")
            continue
        for clause in match.group(1).split(","):
            name = clause.strip().split()[0]
            modules.append(_root(name))
    return modules


def _root(name: str) -> str:
    if name.startswith("."):
        return ""
    return name.split(".")[0]


def find_violation(
    code: str,
    allowed_modules: Iterable[str] = ALLOWED_MODULES,
    denied_substrings: Iterable[str] = DENIED_SUBSTRINGS,
) -> str | None:
    """Return a description of the first policy violation, or None."""
    allowed = set(allowed_modules)
    for module in imported_modules(code):
        if not module:
            return "relative or unreadable import"
        if module not in allowed:
            return f"import of '{module}' is not allowlisted"

    for term in denied_substrings:
        if term in code:
            return f"denied term '{term}'"
    return None


def validate(
    code: str,
    allowed_modules: Iterable[str] = ALLOWED_MODULES,
    denied_substrings: Iterable[str] = DENIED_SUBSTRINGS,
) -> bool:
    """Accept or reject a snippet. Snippets without imports are valid."""
    return find_violation(code, allowed_modules, denied_substrings) is None
