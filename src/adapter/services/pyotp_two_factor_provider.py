import base64
import hashlib
import io
from urllib.parse import quote, urlencode

import pyotp
import qrcode
from qrcode.constants import ERROR_CORRECT_M

from src.app.services.two_factor_provider import ITwoFactorProvider, TwoFactorKey

SECRET_SIZE = 20  # bytes
DIGITS = 6
PERIOD = 30  # seconds
ALGORITHM = "SHA1"
VALID_WINDOW = 1  # one step of clock skew either side


class PyOTPTwoFactorProvider(ITwoFactorProvider):
    """RFC 6238 TOTP via pyotp; QR codes via qrcode"""

    def __init__(self, issuer: str):
        self.issuer = issuer

    @property
    def period_seconds(self) -> int:
        return PERIOD

    def generate(self, account_name: str) -> TwoFactorKey:
        # 20 random bytes -> 32 base32 characters
        secret = pyotp.random_base32(length=SECRET_SIZE * 8 // 5)
        return TwoFactorKey(
            secret=secret,
            provisioning_uri=self.provisioning_uri(secret, account_name),
        )

    def provisioning_uri(self, secret: str, account_name: str) -> str:
        label = f"{quote(self.issuer, safe='')}:{quote(account_name, safe='')}"
        query = urlencode(
            {
                "secret": secret,
                "issuer": self.issuer,
                "algorithm": ALGORITHM,
                "digits": DIGITS,
                "period": PERIOD,
            }
        )
        return f"otpauth://totp/{label}?{query}"

    def validate(self, code: str, secret: str) -> bool:
        totp = pyotp.TOTP(secret, digits=DIGITS, digest=hashlib.sha1, interval=PERIOD)
        return totp.verify(code, valid_window=VALID_WINDOW)

    def qr_code(self, provisioning_uri: str) -> str:
        qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=8, border=4)
        qr.add_data(provisioning_uri)
        qr.make(fit=True)

        buffer = io.BytesIO()
        qr.make_image().save(buffer)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
