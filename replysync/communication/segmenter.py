"""Message segmenting — split long output into line-aligned chunks.

Every chunk is made of whole lines so code listings never break in the
middle of an instruction. The joining newline between two lines of the
same chunk counts towards its length.
"""

CODE_BLOCK_OPENING = "```\n"
CODE_BLOCK_CLOSING = "\n```"
CODE_BLOCK_OVERHEAD = len(CODE_BLOCK_OPENING) + len(CODE_BLOCK_CLOSING)


def wrap_code_block(text: str) -> str:
    """Surround text with a fenced code block."""
    return f"{CODE_BLOCK_OPENING}{text}{CODE_BLOCK_CLOSING}"


def split_lines(text: str, max_length: int) -> list[str]:
    """Split text into chunks of whole lines, each at most max_length long.

    A single line longer than max_length is kept intact as its own chunk
    rather than being cut. Trailing empty lines are dropped.

    Args:
        text: Text to split
        max_length: Maximum length per chunk (must be positive)

    Returns:
        List of chunks in original order; empty for empty text
    """
    if max_length <= 0:
        raise ValueError(f"max_length must be positive, got {max_length}")

    lines = text.split("\n")
    while lines and not lines[-1]:
        lines.pop()

    chunks = []
    buffer: list[str] = []
    current = 0

    for line in lines:
        # +1 for the newline that joins this line to the buffer
        added = len(line) + (1 if buffer else 0)
        if buffer and current + added > max_length:
            chunks.append("\n".join(buffer))
            buffer = []
            current = 0
            added = len(line)

        buffer.append(line)
        current += added

    if buffer:
        chunks.append("\n".join(buffer))

    return chunks
