"""Image tag comparison with release-candidate tolerance.

A rollout may ask for promotion of ``X-rc.N`` while the registry has
already normalised the default to the release tag ``X``.  Only the
*expected* side is stripped, so ``matches("0.1", "0.1-rc.1")`` holds but
``matches("0.1-rc.1", "0.1")`` does not.
"""

from __future__ import annotations

import re

_RC_SUFFIX = re.compile(r"-rc\.\d+\Z")


def strip_rc_suffix(tag: str) -> str:
    """Return *tag* without a trailing ``-rc.<digits>`` segment."""
    return _RC_SUFFIX.sub("", tag)


def matches(observed: str, expected: str) -> bool:
    """Return whether *observed* satisfies *expected*.

    True when the tags are identical, or when *expected* with its
    ``-rc.<digits>`` suffix removed equals *observed*.
    """
    if observed == expected:
        return True
    return strip_rc_suffix(expected) == observed
