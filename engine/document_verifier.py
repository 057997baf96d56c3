"""Document authenticity check.

A registered document carries the digest of its original bytes.  Verifying an
upload recomputes the digest and compares it with the stored one:

    idle ──select_file──▶ verifying ──▶ authentic | tampered ──close──▶ idle

``AuthenticityDialog`` owns one dialog session; closing it from any state
resets it to ``idle``.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import secrets

from config import settings
from schemas.response import DocumentRecord, VerificationStatus

logger = logging.getLogger("proofchain.engine.document_verifier")

ALLOWED_TRANSITIONS: dict[VerificationStatus, set[VerificationStatus]] = {
    VerificationStatus.IDLE: {VerificationStatus.VERIFYING},
    VerificationStatus.VERIFYING: {
        VerificationStatus.AUTHENTIC,
        VerificationStatus.TAMPERED,
        VerificationStatus.IDLE,
    },
    VerificationStatus.AUTHENTIC: {VerificationStatus.IDLE},
    VerificationStatus.TAMPERED: {VerificationStatus.IDLE},
}


class VerificationStateError(Exception):
    """Raised on a transition the dialog does not allow."""


class UnsupportedDigestError(ValueError):
    """Raised when a stored digest names a hash algorithm this service cannot compute."""


def resolve_algorithm(name: str | None = None) -> str:
    """Validate *name* (or the configured default) as a fixed-length hashlib algorithm."""
    algorithm = (name or settings.document_hash_algorithm).strip().lower()
    if algorithm not in hashlib.algorithms_available or algorithm.startswith("shake_"):
        raise UnsupportedDigestError(f"unsupported digest algorithm: {algorithm}")
    return algorithm


def compute_content_hash(data: bytes, algorithm: str | None = None) -> str:
    """Hex digest of *data* with the configured algorithm (SHA-256 by default)."""
    digest = hashlib.new(resolve_algorithm(algorithm))
    digest.update(data)
    return digest.hexdigest()


def split_digest(value: str) -> tuple[str | None, str]:
    """Split ``"sha512:<hex>"`` into ``("sha512", "<hex>")``; unprefixed digests give ``(None, hex)``."""
    value = value.strip().lower()
    prefix, sep, rest = value.partition(":")
    if sep:
        return prefix, rest
    return None, value


def stored_algorithm(stored: str) -> str:
    """Algorithm a stored digest was made with: its ``algo:`` prefix, else the configured default."""
    prefix, _ = split_digest(stored)
    return resolve_algorithm(prefix)


def hashes_match(computed: str, stored: str) -> bool:
    """Constant-time comparison of two hex digests (case insensitive).

    When both carry an ``algo:`` prefix the algorithms must agree too.
    """
    computed_algo, computed_hex = split_digest(computed)
    stored_algo, stored_hex = split_digest(stored)
    if computed_algo and stored_algo and computed_algo != stored_algo:
        return False
    return secrets.compare_digest(
        computed_hex.encode("ascii", "replace"),
        stored_hex.encode("ascii", "replace"),
    )


def check_authenticity(record: DocumentRecord, data: bytes) -> VerificationStatus:
    """AUTHENTIC when *data* hashes to ``record.hash``, TAMPERED otherwise.

    The digest is recomputed with the algorithm the record was hashed with.
    """
    computed = compute_content_hash(data, stored_algorithm(record.hash))
    if hashes_match(computed, record.hash):
        return VerificationStatus.AUTHENTIC
    return VerificationStatus.TAMPERED


class AuthenticityDialog:
    def __init__(
        self,
        record: DocumentRecord,
        *,
        verification_delay: float | None = None,
        auto_close_delay: float | None = None,
    ) -> None:
        self.record = record
        self.verification_delay = (
            settings.document_verification_delay_seconds if verification_delay is None else verification_delay
        )
        self.auto_close_delay = (
            settings.document_auto_close_seconds if auto_close_delay is None else auto_close_delay
        )
        self.status = VerificationStatus.IDLE
        self.is_open = False
        self.last_hash: str | None = None
        self._session = 0
        self._auto_close_task: asyncio.Task[None] | None = None

    @property
    def is_verifying(self) -> bool:
        return self.status is VerificationStatus.VERIFYING

    @property
    def upload_enabled(self) -> bool:
        return self.is_open and self.status is VerificationStatus.IDLE

    def _transition(self, target: VerificationStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise VerificationStateError(f"disallowed transition {self.status.value} -> {target.value}")
        logger.debug("Document %s: %s -> %s", self.record.id, self.status.value, target.value)
        self.status = target

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        """Close the dialog and reset to ``idle``, discarding any in-flight check."""
        task = self._auto_close_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        self._auto_close_task = None
        self._session += 1
        self.is_open = False
        if self.status is not VerificationStatus.IDLE:
            self._transition(VerificationStatus.IDLE)

    async def select_file(self, data: bytes | None, *, auto_close: bool = True) -> VerificationStatus:
        """Verify an uploaded file.  ``None`` means no file was chosen and leaves the state unchanged."""
        if data is None:
            return self.status
        if not self.upload_enabled:
            raise VerificationStateError(
                f"upload disabled (open={self.is_open}, status={self.status.value})"
            )

        algorithm = stored_algorithm(self.record.hash)
        session = self._session
        self._transition(VerificationStatus.VERIFYING)

        if self.verification_delay > 0:
            await asyncio.sleep(self.verification_delay)
        if session != self._session:
            # closed while verifying
            return self.status

        self.last_hash = compute_content_hash(data, algorithm)
        outcome = (
            VerificationStatus.AUTHENTIC
            if hashes_match(self.last_hash, self.record.hash)
            else VerificationStatus.TAMPERED
        )
        self._transition(outcome)
        logger.info("Document %s verified: %s", self.record.id, outcome.value)

        if auto_close:
            self._auto_close_task = asyncio.create_task(self._close_after(self.auto_close_delay))
        return outcome

    async def _close_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self.close()

    async def wait_closed(self) -> None:
        """Wait for a pending auto-close, if any."""
        task = self._auto_close_task
        if task is not None:
            await asyncio.wait({task})
