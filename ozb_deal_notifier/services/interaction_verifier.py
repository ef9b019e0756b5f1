"""
Signature verification for inbound Discord interactions.

Discord signs every interaction request with Ed25519 over the
X-Signature-Timestamp header followed by the raw request body.
"""

import logging
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

logger = logging.getLogger(__name__)


class InteractionVerifier:
    """Verifies interaction signatures against the application public key."""

    def __init__(self, public_key_hex: str):
        """
        Initialize verifier.

        Args:
            public_key_hex: Application public key as a hex string

        Raises:
            ValueError: If the key is not valid hex of the right length
        """
        self.public_key = Ed25519PublicKey.from_public_bytes(
            bytes.fromhex(public_key_hex.strip())
        )

    def verify(
        self, signature_hex: Optional[str], timestamp: Optional[str], body: bytes
    ) -> bool:
        """
        Check a request signature.

        Args:
            signature_hex: X-Signature-Ed25519 header value
            timestamp: X-Signature-Timestamp header value
            body: Raw request body

        Returns:
            True only for a well-formed, valid signature
        """
        if not signature_hex or not timestamp:
            return False

        try:
            signature = bytes.fromhex(signature_hex.strip())
        except ValueError:
            logger.debug("Interaction signature is not valid hex")
            return False

        try:
            self.public_key.verify(signature, timestamp.encode() + body)
        except (InvalidSignature, ValueError):
            return False
        return True
