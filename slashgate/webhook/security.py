from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


def verify_signature(body: bytes, timestamp: str, signature: str, public_key: str) -> bool:
    """Validate an Ed25519 signature over ``timestamp + body`` from Discord.

    ``signature`` and ``public_key`` are hex encoded. Malformed input is
    reported as an invalid signature.
    """
    try:
        verify_key = VerifyKey(bytes.fromhex(public_key))
        verify_key.verify(timestamp.encode() + body, bytes.fromhex(signature))
    except (BadSignatureError, ValueError, TypeError):
        return False
    return True
