# gencert/common/errors.py
"""
Error taxonomy for certificate generation.

Every failure raised by the core derives from GenCertError so the outermost
caller can decide how to terminate. The underlying library exception, when
there is one, is kept as __cause__.
"""


class GenCertError(Exception):
    """Base class for all generation failures."""


class UsageError(GenCertError, ValueError):
    """Issuer key supplied while self-signing, or missing for a subordinate."""


class EntropyError(GenCertError):
    """Randomness needed for a serial number or key pair was unavailable."""


class SerialNumberError(EntropyError):
    pass


class KeyGenerationError(EntropyError):
    pass


class SigningError(GenCertError):
    """Certificate construction or its signature failed."""


class EncodingError(GenCertError):
    """A certificate or key was produced but could not be encoded."""
