"""
Front end configuration.

Options shared by the lexer, the parser and the command line driver.
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


class CommentPolicy(Enum):
    """Where comment tokens may appear in the token stream."""
    BOUNDARIES = "boundaries"   # Only where a program item, class item or statement may start
    ANYWHERE = "anywhere"       # Skipped transparently between any two tokens


_TRUE_VALUES = {"1", "true", "yes", "on"}

# Python frames reserved for the caller and the test runner
_RESERVED_FRAMES = 200


def nesting_ceiling() -> int:
    """Largest max_nesting the interpreter's recursion limit can carry.

    The parser uses up to about three Python frames per open rule when
    rules nest through declarations and blocks.
    """
    return max(1, (sys.getrecursionlimit() - _RESERVED_FRAMES) // 3)


@dataclass(frozen=True)
class FrontEndOptions:
    """Feature flags for tokenizing and parsing."""
    record_matches: bool = False
    comment_policy: CommentPolicy = CommentPolicy.BOUNDARIES
    encoding: str = "utf-8"
    show_file_info: bool = False
    max_nesting: int = 200      # Deepest rule nesting before the parser stops descending

    def __post_init__(self):
        ceiling = nesting_ceiling()
        if not 1 <= self.max_nesting <= ceiling:
            raise ValueError(f"max_nesting must be between 1 and {ceiling}, got {self.max_nesting}")

    @property
    def comments_anywhere(self) -> bool:
        return self.comment_policy == CommentPolicy.ANYWHERE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FrontEndOptions":
        """Build options from ``PR1C_*`` environment variables.

        Raises:
            ValueError: If PR1C_COMMENT_POLICY names an unknown policy, or
                PR1C_MAX_NESTING is not an integer within range
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            record_matches=env.get("PR1C_RECORD_MATCHES", "0").lower() in _TRUE_VALUES,
            comment_policy=CommentPolicy(
                env.get("PR1C_COMMENT_POLICY", defaults.comment_policy.value).lower()
            ),
            encoding=env.get("PR1C_ENCODING", defaults.encoding),
            show_file_info=env.get("PR1C_SHOW_FILES", "0").lower() in _TRUE_VALUES,
            max_nesting=int(env.get("PR1C_MAX_NESTING", defaults.max_nesting)),
        )


DEFAULT_OPTIONS = FrontEndOptions()
