from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ConsistencyPolicy(str, Enum):
    """What to do with the primary write when the secondary write fails."""

    REQUIRED = "required"  # undo the primary write
    BEST_EFFORT = "best_effort"  # keep the primary write, report the divergence


STRICT_ENVIRONMENTS = frozenset({"production"})


class PolicyResolver:
    """Resolves the consistency policy from deployment configuration.

    An explicit ``strict`` flag always wins. Without one, strict environments
    (production) get REQUIRED and everything else gets BEST_EFFORT.

    Example:
        resolver = PolicyResolver(strict=None, environment="production")
        resolver.resolve()  # ConsistencyPolicy.REQUIRED
    """

    def __init__(self, strict: Optional[bool] = None, environment: str = "development"):
        self._strict = strict
        self._environment = environment.lower()

    @property
    def environment(self) -> str:
        return self._environment

    def resolve(self, context: Any = None) -> ConsistencyPolicy:
        """Pure function of configuration; ``context`` is accepted but not consulted."""
        strict = self._strict
        if strict is None:
            strict = self._environment in STRICT_ENVIRONMENTS
        return ConsistencyPolicy.REQUIRED if strict else ConsistencyPolicy.BEST_EFFORT

    @classmethod
    def fixed(cls, policy: ConsistencyPolicy) -> "PolicyResolver":
        return cls(strict=policy is ConsistencyPolicy.REQUIRED)
