from abc import ABC, abstractmethod

from pydantic import BaseModel


class TwoFactorKey(BaseModel):
    secret: str
    provisioning_uri: str


class ITwoFactorProvider(ABC):
    """Time-based one-time password primitive (RFC 6238)"""

    @abstractmethod
    def generate(self, account_name: str) -> TwoFactorKey:
        """New random secret plus its otpauth:// URI"""
        pass

    @abstractmethod
    def validate(self, code: str, secret: str) -> bool:
        """Check code against the current time step, with skew tolerance"""
        pass

    @abstractmethod
    def qr_code(self, provisioning_uri: str) -> str:
        """PNG of the URI as a data: URI"""
        pass

    @property
    @abstractmethod
    def period_seconds(self) -> int:
        pass
