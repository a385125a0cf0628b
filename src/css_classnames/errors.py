# src/css_classnames/errors.py
from pathlib import Path
from typing import Optional, Sequence


class ExtractionError(Exception):
    """Base class for everything the extractor reports to the user."""


class UsageError(ExtractionError):
    """A required command line argument is missing."""


class ProcessingError(ExtractionError):
    """Reading, parsing, import resolution or scoping failed."""


class CssSyntaxError(ProcessingError):
    def __init__(self, reason: str, source: Optional[Path] = None, line: int = 0, column: int = 0):
        self.reason = reason
        self.source = source
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        where = str(self.source) if self.source else "<css input>"
        if self.line:
            where = f"{where}:{self.line}:{self.column}"
        return f"{where}: {self.reason}"


class ImportResolutionError(ProcessingError):
    """An @import target could not be found or understood."""


class CyclicImportError(ImportResolutionError):
    def __init__(self, chain: Sequence[Path]):
        self.chain = list(chain)
        names = " -> ".join(str(p) for p in self.chain)
        super().__init__(f"Cyclic @import detected: {names}")
