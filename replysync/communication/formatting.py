"""Markdown to Telegram HTML converter.

Replies are plain text with fenced code blocks. Telegram's HTML subset
renders those as:
  <pre>code block</pre>, <code>inline code</code>

Everything outside code is HTML-escaped. Telegram counts the rendered
text against its length limit, so markup added here never pushes a
message over it.
"""

import re
import html as _html

_INLINE_CODE_RE = re.compile(r'`([^`]+)`')


def _escape(text: str) -> str:
    """Escape HTML special characters in plain text segments."""
    return _html.escape(text, quote=False)


def markdown_to_telegram_html(text: str) -> str:
    """Convert fenced and inline code in text to Telegram-safe HTML.

    An unterminated fence runs to the end of the text.
    """
    if not text:
        return text

    result = []
    lines = text.split('\n')
    i = 0

    while i < len(lines):
        line = lines[i]

        # Code block: ```...```
        if line.strip().startswith('```'):
            code_lines = []
            # Skip opening ```(optional language)
            i += 1
            while i < len(lines) and not lines[i].strip().startswith('```'):
                code_lines.append(lines[i])
                i += 1
            # Skip closing ```
            if i < len(lines):
                i += 1
            code_content = _escape('\n'.join(code_lines))
            result.append(f'<pre>{code_content}</pre>')
            continue

        result.append(_format_inline(line))
        i += 1

    return '\n'.join(result)


def _format_inline(text: str) -> str:
    """Escape a single line, turning `spans` into <code>."""
    parts = []
    last_end = 0

    for match in _INLINE_CODE_RE.finditer(text):
        if match.start() > last_end:
            parts.append(_escape(text[last_end:match.start()]))
        parts.append(f'<code>{_escape(match.group(1))}</code>')
        last_end = match.end()

    if last_end < len(text):
        parts.append(_escape(text[last_end:]))

    return ''.join(parts)
