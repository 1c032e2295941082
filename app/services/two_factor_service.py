# app/services/two_factor_service.py
# TOTP (RFC 6238) codes, QR provisioning and single-use backup codes

import base64
import hashlib
import hmac
import io
import logging
import secrets
import struct
import time
from typing import List, Optional
from urllib.parse import quote, urlencode

import qrcode
from qrcode.constants import ERROR_CORRECT_L

from app.utils.constants import (
    BACKUP_CODE_ALPHABET,
    BACKUP_CODE_LENGTH,
    BACKUP_CODES_COUNT,
    TOTP_DIGITS,
    TOTP_PERIOD_SECONDS,
    TOTP_SECRET_BYTES,
)
from app.utils.validators import validate_totp_code

logger = logging.getLogger(__name__)


def _decode_secret(secret: str) -> bytes:
    padded = secret.strip().upper()
    padded += "=" * ((8 - len(padded) % 8) % 8)
    return base64.b32decode(padded)


def hotp(secret: str, counter: int, digits: int = TOTP_DIGITS) -> str:
    """HMAC-SHA1 one-time password for a counter value (RFC 4226)."""
    digest = hmac.new(_decode_secret(secret), struct.pack(">Q", counter), hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    code = struct.unpack(">I", digest[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(code % 10 ** digits).zfill(digits)


class TwoFactorService:
    """Generates and checks second factors. Holds no per-user state."""

    def __init__(self, issuer: str = "YowyobFeedback", valid_window: int = 1):
        self.issuer = issuer
        # Number of adjacent 30s steps accepted on each side for clock skew
        self.valid_window = valid_window

    def generate_secret(self) -> str:
        """Random 160-bit secret, base32 without padding."""
        return base64.b32encode(secrets.token_bytes(TOTP_SECRET_BYTES)).decode("ascii").rstrip("=")

    def get_provisioning_uri(self, secret: str, account_label: str) -> str:
        """otpauth:// URI understood by authenticator apps."""
        params = {
            "secret": secret,
            "issuer": self.issuer,
            "algorithm": "SHA1",
            "digits": str(TOTP_DIGITS),
            "period": str(TOTP_PERIOD_SECONDS),
        }
        label = quote(f"{self.issuer}:{account_label}")
        return f"otpauth://totp/{label}?{urlencode(params)}"

    def generate_qr_payload(self, secret: str, account_label: str) -> str:
        """PNG QR code of the provisioning URI, as a data URL."""
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_L,
            box_size=10,
            border=4,
        )
        qr.add_data(self.get_provisioning_uri(secret, account_label))
        qr.make(fit=True)
        image = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")

    def generate_code(self, secret: str, timestamp: Optional[float] = None) -> str:
        if timestamp is None:
            timestamp = time.time()
        return hotp(secret, int(timestamp // TOTP_PERIOD_SECONDS))

    def verify_code(self, secret: Optional[str], code: Optional[str], timestamp: Optional[float] = None) -> bool:
        """Accept the code for the current step or up to valid_window steps either side."""
        if not secret or not validate_totp_code(code):
            return False
        if timestamp is None:
            timestamp = time.time()
        counter = int(timestamp // TOTP_PERIOD_SECONDS)
        try:
            for drift in range(-self.valid_window, self.valid_window + 1):
                if counter + drift < 0:
                    continue
                if hmac.compare_digest(hotp(secret, counter + drift), code):
                    return True
        except (ValueError, TypeError):
            # binascii.Error is a ValueError
            logger.warning("Stored TOTP secret could not be decoded")
            return False
        return False

    def generate_backup_codes(self) -> List[str]:
        return [
            "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(BACKUP_CODE_LENGTH))
            for _ in range(BACKUP_CODES_COUNT)
        ]

    def verify_backup_code(self, backup_codes: Optional[List[str]], provided_code: Optional[str]) -> bool:
        if backup_codes is None or provided_code is None:
            return False
        return provided_code.strip().upper() in backup_codes

    def remove_backup_code(self, backup_codes: List[str], used_code: str) -> List[str]:
        used = used_code.strip().upper()
        return [code for code in backup_codes if code != used]
