"""
Hashing for stored secrets. Session tokens are stored as fast checksums, so
that a token from a cookie can be looked up directly; passwords are stored as
salted scrypt digests.
"""

import hashlib
import hmac
import secrets
from typing import Callable

import xxhash


class UnsupportedHashAlgorithm(Exception):
    pass


def match_name_to_algorithm(name: str) -> Callable[..., xxhash.xxh3_64]:
    match name:
        case "xxh3":
            return xxhash.xxh3_64
        case _:
            raise UnsupportedHashAlgorithm(f"Algorithm {name} not supported")


def checksum(content: str | bytes, hash_algorithm: str) -> str:
    """
    Checksum of a session token, as stored in the database. The algorithm
    name usually comes from `settings.token_hash_algorithm`.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    algorithm = match_name_to_algorithm(hash_algorithm)

    return algorithm(content).hexdigest()


def hash_password(password: str, hash_algorithm: str) -> str:
    """
    Hash a password for storage. The salt is stored alongside the digest
    as ``salt$digest``.
    """
    match hash_algorithm:
        case "scrypt":
            salt = secrets.token_hex(16)
            digest = hashlib.scrypt(
                password.encode("utf-8"), salt=salt.encode("utf-8"), n=2**14, r=8, p=1
            )
            return f"{salt}${digest.hex()}"
        case _:
            raise UnsupportedHashAlgorithm(f"Algorithm {hash_algorithm} not supported")


def verify_password(password: str, stored: str, hash_algorithm: str) -> bool:
    match hash_algorithm:
        case "scrypt":
            salt, _, expected = stored.partition("$")
            digest = hashlib.scrypt(
                password.encode("utf-8"), salt=salt.encode("utf-8"), n=2**14, r=8, p=1
            )
            return hmac.compare_digest(digest.hex(), expected)
        case _:
            raise UnsupportedHashAlgorithm(f"Algorithm {hash_algorithm} not supported")
