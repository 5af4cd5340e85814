from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from passlib.context import CryptContext

from ..errors import MalformedInput


T = TypeVar("T")


# ---------------------------------------------------------------------------
# Contact-address hashing
#
# Every hash embeds its own random salt, so the same address hashes to a
# different string on each call. Equality can only be decided by re-hashing
# with the stored salt: looking up a participant by address is always a scan
# over every stored hash of the event.
#
# Do NOT add a deterministic digest or a database index on contact_hash to
# speed this up. Equal stored values would then reveal equal addresses.
# ---------------------------------------------------------------------------


def _encode(address) -> bytes:
    if isinstance(address, bytes):
        try:
            address.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInput("Contact address is not valid UTF-8") from e
        return address
    if not isinstance(address, str):
        raise MalformedInput("Contact address must be text")
    try:
        return address.encode("utf-8")
    except UnicodeEncodeError as e:
        raise MalformedInput("Contact address is not valid UTF-8") from e


class ContactMatcher:
    def __init__(self, rounds: int = 3, memory_cost: int = 65536):
        self.rounds = rounds
        self.memory_cost = memory_cost
        self._context = CryptContext(
            schemes=["argon2"],
            deprecated="auto",
            argon2__rounds=rounds,
            argon2__memory_cost=memory_cost,
        )

    def hash(self, address) -> str:
        """Salted argon2 hash of the UTF-8 bytes of `address`."""
        return self._context.hash(_encode(address))

    def matches(self, address, candidate: str) -> bool:
        secret = _encode(address)
        try:
            return self._context.verify(secret, candidate)
        except (ValueError, TypeError) as e:
            raise MalformedInput("Stored contact hash is malformed") from e

    def find_match(
        self,
        address,
        candidates: Iterable[T],
        key: Callable[[T], str] = lambda c: c,
    ) -> T | None:
        """
        Returns the first candidate whose hash (via `key`) matches `address`.

        Linear in the number of candidates; each step costs one full hash.
        """
        secret = _encode(address)
        for candidate in candidates:
            if self.matches(secret, key(candidate)):
                return candidate
        return None

    def is_registered(self, address, hashes: Iterable[str]) -> bool:
        return self.find_match(address, hashes) is not None
