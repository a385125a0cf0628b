# src/css_classnames/models.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from css_classnames.config import OUTPUT_SEPARATOR

# Local class identifier -> generated scoped identifier.
ClassNameMapping = Dict[str, str]


@dataclass(frozen=True)
class SourceDocument:
    """Immutable text of one stylesheet, identified by its resolved path."""
    path: Path
    text: str


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one extraction: the exported names and the files that were read."""
    mapping: ClassNameMapping = field(default_factory=dict)
    sources: Tuple[Path, ...] = ()

    @property
    def class_names(self) -> List[str]:
        return sorted(self.mapping)

    def serialize(self) -> str:
        return OUTPUT_SEPARATOR.join(self.class_names)
