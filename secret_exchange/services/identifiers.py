from __future__ import annotations

import secrets
import uuid
from typing import Callable

from ..errors import RandomSourceExhausted


ID_BYTES = 16
TOKEN_BYTES = 32


class IdentifierGenerator:
    """
    Mints the private id, the exchange (public) id, organizer tokens and event ids.

    `randbytes(n)` must return n bytes from a secure source. Tests pass
    `random.Random(seed).randbytes` for reproducible output.
    """

    def __init__(self, randbytes: Callable[[int], bytes] = secrets.token_bytes):
        self._randbytes = randbytes

    def _draw(self, n: int) -> bytes:
        try:
            raw = self._randbytes(n)
        except (OSError, NotImplementedError) as e:
            raise RandomSourceExhausted() from e
        if len(raw) != n:
            raise RandomSourceExhausted(f"Random source returned {len(raw)} of {n} bytes")
        return raw

    def _hex_id(self) -> str:
        # Private and exchange ids share this path: no tag distinguishes them.
        return self._draw(ID_BYTES).hex()

    def new_private_id(self) -> str:
        return self._hex_id()

    def new_public_id(self) -> str:
        return self._hex_id()

    def new_capability_token(self) -> str:
        return self._draw(TOKEN_BYTES).hex()

    def new_event_id(self) -> str:
        return str(uuid.UUID(bytes=self._draw(ID_BYTES), version=4))
