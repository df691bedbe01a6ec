# gencert/crypto/verify.py

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from typing import List, Tuple

from gencert.crypto.pki import CertificateMaterial


def load_material_certificate(material: CertificateMaterial) -> x509.Certificate:
    """Load the PEM certificate of `material` as an x509.Certificate object."""
    return x509.load_pem_x509_certificate(material.certificate_pem)


def load_material_key(material: CertificateMaterial):
    """Load the PKCS#8 private key of `material` (no password)."""
    return serialization.load_pem_private_key(material.private_key_pem, password=None)


def verify_signed_by(cert: x509.Certificate, issuer_public_key) -> None:
    """
    Verify the ECDSA signature on `cert` with `issuer_public_key`.
    Raises cryptography.exceptions.InvalidSignature on mismatch.
    """
    issuer_public_key.verify(
        cert.signature,
        cert.tbs_certificate_bytes,
        ec.ECDSA(cert.signature_hash_algorithm),
    )


def verify_chain_link(cert: x509.Certificate, issuer_cert: x509.Certificate) -> None:
    """
    Verify that `cert` was issued by `issuer_cert`.

    Raises:
      - ValueError if issuer does not match the issuer's subject
      - InvalidSignature if the signature does not verify
    """
    if cert.issuer != issuer_cert.subject:
        raise ValueError("certificate issuer does not match issuer subject")
    verify_signed_by(cert, issuer_cert.public_key())


def cert_fingerprint_hex(cert: x509.Certificate) -> str:
    """Return the SHA-256 fingerprint of the certificate as a hex string."""
    return cert.fingerprint(hashes.SHA256()).hex()


def extended_key_usage(cert: x509.Certificate) -> List[x509.ObjectIdentifier]:
    return list(cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value)


def subject_alternative_names(cert: x509.Certificate) -> Tuple[list, list]:
    """Return (dns_names, ip_addresses); both empty when the extension is absent."""
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return [], []
    return san.get_values_for_type(x509.DNSName), san.get_values_for_type(x509.IPAddress)
