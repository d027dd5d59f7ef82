"""``${VAR}`` macro substitution for script text.

Only the braced form is recognised: ``$1``, ``$HOME`` and other shell
expansions in the script are left for the interpreter.  Placeholders with no
value in the snapshot are kept verbatim.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

_MACRO_RE = re.compile(r"\$\{([A-Za-z0-9_.]+)\}")


def replace_macro(text: str, variables: Mapping[str, str]) -> str:
    """Return *text* with every known ``${NAME}`` replaced by its value.

    Usage::

        replace_macro("echo ${FOO} ${BAR}", {"FOO": "bar"})
        # 'echo bar ${BAR}'
    """

    def _substitute(match: re.Match[str]) -> str:
        value = variables.get(match.group(1))
        if value is None:
            return match.group(0)
        return value

    return _MACRO_RE.sub(_substitute, text)
