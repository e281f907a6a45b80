"""Administrator credential.

A privileged operation takes the credential explicitly; the engine checks
it by identity against the credential id it was created with. Nothing is
authorized ambiently.
"""

import uuid
from dataclasses import dataclass, field

from oft_engine.core.errors import Unauthorized


@dataclass(frozen=True)
class AdminCap:
    cap_id: str = field(default_factory=lambda: uuid.uuid4().hex)


def assert_admin(cap: object, expected_cap_id: str) -> None:
    """
    Raises:
        Unauthorized: If ``cap`` is not the credential bound to the instance
    """
    if not isinstance(cap, AdminCap) or cap.cap_id != expected_cap_id:
        raise Unauthorized("admin credential is not bound to this instance")
