from pydantic import BaseModel, Field
from typing import List, Optional

from bugduck.mutation.kinds import BugKind


class DiffRange(BaseModel):
    """
    Inclusive, 1-indexed line span that differs between two buffers, plus
    the matching line slices of each buffer.
    """
    start_line: int
    end_line: int
    before_snippet: str
    after_snippet: str

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


class InjectionResult(BaseModel):
    """
    Outcome of one mutation run over a buffer.

    ``applied`` is in application order. An empty list means nothing was
    found to break, in which case ``code`` is the untouched original.
    """
    code: str
    applied: List[BugKind] = Field(default_factory=list)
    diff: Optional[DiffRange] = None
    language: str = "tsx"

    @property
    def nothing_to_break(self) -> bool:
        return not self.applied


class HistoryEntry(BaseModel):
    """
    One persisted injection, as consumed by the history ledger.
    """
    id: str
    timestamp: float
    file_path: str
    file_uri: str
    bugs: List[BugKind]
    start_line: int
    end_line: int
    before_snippet: str
    after_snippet: str
