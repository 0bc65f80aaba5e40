"""Command parsing — decide whether a message is tracked and pull out its payload.

A tracked message starts with the command, optionally addressed to the
bot as in Telegram groups, and is followed by whitespace or nothing:

    /bytecode ```python
    def foo():
        return 1
    ```

    /bytecode@my_bot `x = 1`
"""

import re

DEFAULT_COMMAND = "/bytecode"

# Fenced block (optionally tagged python/py) first, then an inline span
_CODE_BLOCK_RE = re.compile(
    r"```(?:(?:python|py)?[ \t]*\n)?([\s\S]+?)```|``?([^`]+)``?",
)


def _command_re(command: str) -> re.Pattern:
    return re.compile(rf"^{re.escape(command)}(?:@\w+)?(?=\s|$)")


def is_tracked_form(content: str, command: str = DEFAULT_COMMAND) -> bool:
    """Return True if content is an invocation of command."""
    if not content:
        return False
    return _command_re(command).match(content) is not None


def extract_payload(content: str, command: str = DEFAULT_COMMAND) -> str:
    """Strip the command and return the code it carries.

    Uses the first fenced block or inline code span when there is one,
    otherwise the remaining text stripped of surrounding whitespace.
    """
    body = _command_re(command).sub("", content, count=1)

    m = _CODE_BLOCK_RE.search(body)
    if m:
        return m.group(1) if m.group(1) is not None else m.group(2)

    return body.strip()
