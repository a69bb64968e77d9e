from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import StoreError


@dataclass(frozen=True)
class WriteOutcome:
    """Result of a single store write, delete, or undo.

    Attributes:
        saved: Whether the row is present in the store after the call
        id: Row id the call targeted
        error: Store-reported reason when the call failed
        error_code: StoreError code (e.g. "permission_denied", "timeout")
    """

    saved: bool
    id: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def ok(cls, id: str) -> "WriteOutcome":
        return cls(saved=True, id=id)

    @classmethod
    def removed(cls, id: str) -> "WriteOutcome":
        return cls(saved=False, id=id)

    @classmethod
    def from_error(cls, err: StoreError, *, id: Optional[str] = None, saved: bool = False):
        return cls(saved=saved, id=id, error=str(err) or err.code, error_code=err.code)

    def as_dict(self) -> dict:
        out: dict = {"saved": self.saved}
        if self.id is not None:
            out["id"] = self.id
        if self.error is not None:
            out["error"] = self.error
            out["errorCode"] = self.error_code
        return out
