"""Processors — turn a command payload into text to send back.

A processor never raises: unexpected failures come back as FatalError,
expected ones (bad input) as Failure, and output as Success.
"""

import dis
import io
import logging
import traceback
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

logger = logging.getLogger("replysync.processor")


@dataclass(frozen=True)
class Success:
    """Processing succeeded; text is the output to show."""
    text: str


@dataclass(frozen=True)
class Failure:
    """Input was processed but rejected; diagnostics explain why."""
    diagnostics: str


@dataclass(frozen=True)
class FatalError:
    """Processing itself broke; message is shown to the user as is."""
    message: str


ProcessorResult = Union[Success, Failure, FatalError]


class Processor(ABC):
    """Abstract base class for processors."""

    name = "processor"

    def process(self, raw: str) -> ProcessorResult:
        """Run the processor, converting any stray exception into FatalError."""
        try:
            return self._process(raw)
        except Exception as e:
            logger.error(f"{self.name} crashed: {e}", exc_info=True)
            return FatalError(f"A fatal error has occurred in {self.name}. {e}")

    @abstractmethod
    def _process(self, raw: str) -> ProcessorResult:
        ...


class BytecodeProcessor(Processor):
    """Compile Python source and disassemble the resulting code object.

    Syntax errors are reported as Failure with the interpreter's own
    message. Anything else going wrong during compile or disassembly is a
    FatalError naming the stage.
    """

    name = "bytecode"

    def __init__(self, filename: str = "<snippet>"):
        self.filename = filename

    def _process(self, raw: str) -> ProcessorResult:
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                code = compile(raw, self.filename, "exec", dont_inherit=True)
        except SyntaxError as e:
            diagnostics = "".join(traceback.format_exception_only(type(e), e))
            return Failure(diagnostics.rstrip())
        except (ValueError, MemoryError, RecursionError) as e:
            return FatalError(f"A fatal error has occurred during compilation. {e}")

        try:
            out = io.StringIO()
            dis.dis(code, file=out)
        except Exception as e:
            return FatalError(f"A fatal error has occurred during disassembly. {e}")

        return Success(out.getvalue().rstrip())
