"""Communication sub-core — channel-agnostic reply handling.

- Segmenter: line-aligned message splitting, code block wrapping
- Transport: delivery contract and TransportError
- Errors: user-facing classification of delivery failures
- Formatting: markdown code → Telegram HTML
- Telegram: Bot-backed transport
"""

from .segmenter import CODE_BLOCK_OVERHEAD, split_lines, wrap_code_block
from .transport import Transport, TransportError

__all__ = [
    # Segmenter
    "CODE_BLOCK_OVERHEAD",
    "split_lines",
    "wrap_code_block",
    # Transport
    "Transport",
    "TransportError",
]
