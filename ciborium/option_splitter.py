"""Tokenization of user-supplied option lists.

Configuration stores the environment allowlist and the extra docker options
as single strings. They are split here with shell-style quoting, so
``--label "team=build tools"`` stays one token after the flag.
"""

from __future__ import annotations

import shlex

from ciborium.exceptions import ValidationError

WHITESPACE = " \t\r\n"


def tokenize(text: str | None, separators: str = WHITESPACE) -> list[str]:
    """Split a serialized option list into tokens.

    Args:
        text: Raw string from configuration, may be None
        separators: Characters that separate tokens outside quotes

    Returns:
        Ordered list of tokens; empty for None or blank input

    Raises:
        ValidationError: If quotes are unbalanced
    """
    if text is None or not text.strip():
        return []

    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace = separators
    lexer.whitespace_split = True
    lexer.commenters = ""

    try:
        return [token for token in lexer if token]
    except ValueError as e:
        raise ValidationError(f"Cannot tokenize option list: {e}", details={"text": text}) from e


def tokenize_names(text: str | None) -> list[str]:
    """Split an environment allowlist, accepting commas as separators too."""
    return tokenize(text, separators=WHITESPACE + ",")
