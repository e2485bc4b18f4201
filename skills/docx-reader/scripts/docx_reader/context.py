"""Read-only lookup tables threaded through one document conversion."""

from dataclasses import dataclass, field
from typing import Optional

from .comments import CommentTable
from .common import Diagnostics
from .numbering import NumberingTable
from .styles import DocumentDefaults, StyleTable


@dataclass(frozen=True)
class ResolutionContext:
    """
    Everything the paragraph, run and table normalizers consult.

    Built once per load from that document's own parts and discarded with
    the result; never shared between documents.
    """

    styles: StyleTable = field(default_factory=StyleTable.empty)
    numbering: NumberingTable = field(default_factory=NumberingTable.empty)
    comments: CommentTable = field(default_factory=CommentTable.empty)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def defaults(self) -> Optional[DocumentDefaults]:
        return self.styles.defaults
