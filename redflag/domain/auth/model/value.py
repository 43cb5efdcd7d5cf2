"""Value objects for the auth domain."""

import re
import secrets
import time

from redflag.domain.shared.model.value import Identifier

GUEST_LABEL_PATTERN = re.compile(r"^guest-\d+$")
"""Reserved label shape for system-provisioned anonymous users."""


class UserId(Identifier):
    """Unique identifier for a User."""


def is_guest_label(label: str | None) -> bool:
    """True if the label is in the reserved guest namespace."""
    return label is not None and GUEST_LABEL_PATTERN.match(label) is not None


def make_guest_label() -> str:
    """Build a fresh guest label: millisecond clock followed by random digits."""
    return f"guest-{time.time_ns() // 1_000_000}{secrets.randbelow(1_000_000):06d}"
