"""Domain model - the indexed document.

The document is a value object: a changed file is never mutated in place,
its old entry is removed and a new one is appended to the index.
"""

from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic.dataclasses import dataclass


@dataclass(frozen=True)
class Document:
    """A single indexed file.

    ``path`` is the unique key; ``name`` is the display name shown in results.
    """

    path: Annotated[str, Field(min_length=1)]
    name: str
    content: str
    mod_time: float

    @classmethod
    def from_file(cls, path: str, content: str, mod_time: float) -> "Document":
        """Build a document using the file basename as display name."""
        return cls(path=path, name=Path(path).name, content=content, mod_time=mod_time)
