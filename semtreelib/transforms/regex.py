"""Regular-expression replacement transform."""

import re
from typing import Optional, Tuple, Union

from . import Transform, apply_to_primitives
from ..core.node import Primitive
from ..errors import ValidationError

# "/body/flags" pattern literals; anything else is matched as plain text
_LITERAL = re.compile(r"^/(.+)/([gimsuxy]*)$", re.DOTALL)

_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,
    "y": 0,
}


def regex(pattern: Union[str, "re.Pattern"],
          replacement: str,
          transform_value: bool = True,
          transform_attributes: bool = True) -> Transform:
    """Create a transform rewriting string values with re.sub().

    ``pattern`` may be:

    - a compiled pattern, used as-is (every match is replaced)
    - a string of the form ``"/body/flags"``, compiled from body with
      flags ``i``, ``m``, ``s``, ``x`` (``u`` and ``y`` are accepted and
      ignored); without the ``g`` flag only the first match is replaced
    - any other string, matched literally (every occurrence is replaced),
      so ``"/usr/bin"`` is plain text

    ``replacement`` uses re.sub() syntax (``\\1``, ``\\g<name>``). Only
    string values are rewritten.

    Raises:
        ValidationError: If the pattern is not a string or compiled
            pattern, or does not compile
    """
    compiled, count = _compile(pattern)

    def _convert(value: Primitive) -> Optional[str]:
        if not isinstance(value, str):
            return None
        return compiled.sub(replacement, value, count=count)

    def _transform(node):
        return apply_to_primitives(node, _convert, transform_value, transform_attributes)

    return _transform


def _compile(pattern) -> Tuple["re.Pattern", int]:
    """Return the compiled pattern and the re.sub() count to use."""
    if isinstance(pattern, re.Pattern):
        return pattern, 0

    if not isinstance(pattern, str):
        raise ValidationError(
            f"Pattern must be a compiled pattern or string, got: {type(pattern).__name__}"
        )

    literal = _LITERAL.match(pattern)
    if literal is None:
        return re.compile(re.escape(pattern)), 0

    body, flag_chars = literal.groups()
    flags = 0
    for char in flag_chars.replace("g", ""):
        flags |= _FLAGS[char]

    try:
        compiled = re.compile(body, flags)
    except re.error as e:
        raise ValidationError(f"Invalid regex pattern: {pattern} - {e}") from e

    return compiled, 0 if "g" in flag_chars else 1
