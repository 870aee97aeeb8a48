"""
Symmetric encryption for secrets we must keep but never display,
such as account credentials submitted with a reset request.
"""
import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from django.conf import settings


class EncryptionManager:
    """
    Fernet wrapper keyed from Django's SECRET_KEY.
    The derived key is computed once per instance.
    """

    salt = b'license_store_credentials'
    iterations = 100000

    def __init__(self, secret=None):
        self._secret = (secret or settings.SECRET_KEY).encode()
        self._fernet = None

    def _get_fernet(self):
        if self._fernet is None:
            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA256(),
                length=32,
                salt=self.salt,
                iterations=self.iterations,
            )
            key = base64.urlsafe_b64encode(kdf.derive(self._secret))
            self._fernet = Fernet(key)
        return self._fernet

    def encrypt(self, plaintext):
        """Return a URL-safe text token for ``plaintext``."""
        return self._get_fernet().encrypt(plaintext.encode()).decode()

    def decrypt(self, token):
        """Return the plaintext, or None when the token is not ours."""
        try:
            return self._get_fernet().decrypt(token.encode()).decode()
        except InvalidToken:
            return None
