"""ECMA-262 pattern checking.

OpenAPI `pattern` values are ECMA-262 regular expressions, which Python's re
module does not implement faithfully (lookbehind rules, \\u escapes, Unicode
classes and named group syntax all differ). Patterns are compiled with the
regress engine instead.
"""

from __future__ import annotations

from functools import lru_cache

import regress


@lru_cache(maxsize=2048)
def check_pattern(pattern: str) -> str | None:
    """Compile a pattern as ECMA-262.

    Returns:
        The compile error text, or None when the pattern is valid.
    """
    try:
        regress.Regex(pattern)
    except regress.RegressError as e:
        return str(e) or "invalid regular expression"
    return None
