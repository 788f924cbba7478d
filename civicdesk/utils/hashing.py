"""
Hashing utilities for one-time codes and challenge tokens
"""

import hashlib
import hmac
import secrets
import string


class TokenHasher:
    """Keyed hashing for short-lived secrets stored at rest"""

    @staticmethod
    def hash_code(code: str, key: str) -> str:
        """HMAC-SHA256 digest of a one-time code"""
        return hmac.new(key.encode('utf-8'), code.strip().encode('utf-8'), hashlib.sha256).hexdigest()

    @staticmethod
    def verify_code(code: str, digest: str, key: str) -> bool:
        """Constant-time comparison of a code against its stored digest"""
        return hmac.compare_digest(TokenHasher.hash_code(code, key), digest)

    @staticmethod
    def generate_numeric_code(length: int = 6) -> str:
        """Numeric code without a leading zero"""
        low = 10 ** (length - 1)
        return str(low + secrets.randbelow(9 * low))

    @staticmethod
    def generate_challenge_text(length: int = 5) -> str:
        """Challenge text excluding the easily confused O and 0"""
        alphabet = ''.join(ch for ch in string.ascii_uppercase + string.digits if ch not in 'O0')
        return ''.join(secrets.choice(alphabet) for _ in range(length))
