"""Hash, random and template primitives behind the filename strategies.

Every helper keeps the *last* ``length`` hex characters of its digest or
random bytes.
"""

from __future__ import annotations

import hashlib
import secrets
from typing import Any, Callable, Mapping

from ghost_gcs.storage.sanitize import TEMPLATE_KEY

CHUNK_SIZE = 64 * 1024
RANDOM_SIZE = 32


def _digest_file(path: str, algorithm: str):
    digest = hashlib.new(algorithm)
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest


def content_digest(path: str, algorithm: str = "md5", length: int = 16) -> str:
    """Hex digest of the file contents, streamed in chunks."""
    return _digest_file(path, algorithm).hexdigest()[-length:]


def content_digest_with_salt(
    path: str,
    algorithm: str = "md5",
    length: int = 16,
    salt_size: int = RANDOM_SIZE,
) -> str:
    """Like ``content_digest`` but mixes random bytes in after the contents.

    Identical files get different names.
    """
    digest = _digest_file(path, algorithm)
    digest.update(secrets.token_bytes(salt_size))
    return digest.hexdigest()[-length:]


def random_hex(length: int = 16, size: int = RANDOM_SIZE) -> str:
    return secrets.token_hex(size)[-length:]


def template_keys(template: str) -> set[str]:
    return set(TEMPLATE_KEY.findall(template))


def render_template(
    template: str,
    record: Mapping[str, Any],
    *,
    hash_value: str | None = None,
    random_value: Callable[[], str] = random_hex,
) -> str:
    """Expand ``[key]`` placeholders.

    ``[hash]`` renders ``hash_value``, ``[random]`` draws fresh random hex for
    each occurrence, any other key reads ``record``. Unknown keys render empty.
    """

    def replace(match) -> str:
        key = match.group(1)
        if key == "hash":
            return hash_value or ""
        if key == "random":
            return random_value()
        value = record.get(key)
        return "" if value is None else str(value)

    return TEMPLATE_KEY.sub(replace, template)


__all__ = [
    "content_digest",
    "content_digest_with_salt",
    "random_hex",
    "render_template",
    "template_keys",
]
