"""Directory entry classification: what to descend into, record, or skip."""

from __future__ import annotations

import enum
from collections.abc import Iterable

from diskscope.config import DEFAULT_EXCLUDED_DIRS, EngineConfig


class Decision(enum.Enum):
    DESCEND = "descend"
    RECORD = "record"
    SKIP = "skip"


class PathClassifier:
    """Holds the exclusion policy for every traversal.

    Symlinks are never followed.  Hidden entries (names starting with
    ``hidden_prefix``) are skipped when ``skip_hidden`` is set, and
    directories named in ``excluded_dir_names`` are never entered.
    Regular files that pass these checks are recorded.
    """

    def __init__(
        self,
        excluded_dir_names: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
        skip_hidden: bool = True,
        hidden_prefix: str = ".",
    ) -> None:
        self.excluded_dir_names = frozenset(excluded_dir_names)
        self.skip_hidden = skip_hidden
        self.hidden_prefix = hidden_prefix

    @classmethod
    def from_config(cls, config: EngineConfig) -> PathClassifier:
        return cls(excluded_dir_names=config.excluded_dir_names, skip_hidden=config.skip_hidden)

    def classify(self, name: str, is_dir: bool, is_symlink: bool = False) -> Decision:
        if is_symlink:
            return Decision.SKIP
        if self.skip_hidden and self.hidden_prefix and name.startswith(self.hidden_prefix):
            return Decision.SKIP
        if is_dir:
            if name in self.excluded_dir_names:
                return Decision.SKIP
            return Decision.DESCEND
        return Decision.RECORD
