"""Request identity derived from a validated session."""

from dataclasses import dataclass

from redflag.domain.auth.model.value import UserId, is_guest_label


@dataclass(frozen=True)
class SessionIdentity:
    """Summary of a validated session: who, and whether they are a guest.

    Never carries the raw credential.
    """

    user_id: UserId
    label: str

    @property
    def is_guest(self) -> bool:
        return is_guest_label(self.label)
