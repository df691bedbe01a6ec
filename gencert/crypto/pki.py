# gencert/crypto/pki.py
"""
Key/certificate signer.

Provides:
 - build_template(role, organization, not_before, not_after, hosts)
 - sign_certificate(subject, issuer, issuer_key, self_signed) -> (material, key)
 - classify_hosts(hosts) -> (dns_names, ip_addresses)
 - encode_certificate(cert) / encode_private_key(key) -> (der, pem)

Every call to sign_certificate generates a fresh P-256 key for the subject.
Nothing here touches the filesystem or the network.
"""
import datetime
import ipaddress
import logging
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID
from pydantic import BaseModel, ConfigDict, IPvAnyAddress, model_validator

from gencert.common.errors import (
    EncodingError,
    KeyGenerationError,
    SerialNumberError,
    SigningError,
    UsageError,
)

log = logging.getLogger(__name__)

CURVE = ec.SECP256R1
CERTIFICATE_LABEL = "CERTIFICATE"
PRIVATE_KEY_LABEL = "PRIVATE KEY"


class Role(str, Enum):
    ROOT = "root"
    INTERMEDIATE = "intermediate"
    SERVER = "server"
    CLIENT = "client"


class KeyPurpose(str, Enum):
    SERVER_AUTH = "serverAuth"
    CLIENT_AUTH = "clientAuth"


_PURPOSE_OIDS = {
    KeyPurpose.SERVER_AUTH: ExtendedKeyUsageOID.SERVER_AUTH,
    KeyPurpose.CLIENT_AUTH: ExtendedKeyUsageOID.CLIENT_AUTH,
}

_DEFAULT_PURPOSES = {
    Role.ROOT: [KeyPurpose.SERVER_AUTH, KeyPurpose.CLIENT_AUTH],
    Role.INTERMEDIATE: [KeyPurpose.SERVER_AUTH, KeyPurpose.CLIENT_AUTH],
    Role.SERVER: [KeyPurpose.SERVER_AUTH],
    Role.CLIENT: [KeyPurpose.CLIENT_AUTH],
}


class CertificateTemplate(BaseModel):
    """Everything that gets signed into one certificate."""
    model_config = ConfigDict(frozen=True)

    role: Role
    is_authority: bool
    serial_number: int
    organization: str
    not_before: datetime.datetime
    not_after: datetime.datetime
    key_cert_sign: bool
    extended_key_usage: List[KeyPurpose]
    dns_names: List[str] = []
    ip_addresses: List[IPvAnyAddress] = []
    path_length: Optional[int] = None

    @model_validator(mode="after")
    def _check_window(self):
        if self.not_after <= self.not_before:
            raise ValueError("not_after must be later than not_before")
        if self.serial_number <= 0:
            raise ValueError("serial number must be positive")
        return self

    @property
    def subject_serial_attribute(self) -> str:
        return str(self.serial_number)

    def subject_name(self) -> x509.Name:
        return x509.Name([
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, self.organization),
            x509.NameAttribute(NameOID.SERIAL_NUMBER, self.subject_serial_attribute),
        ])


class CertificateMaterial(BaseModel):
    """Encoded certificate and private key for one subject."""
    model_config = ConfigDict(frozen=True)

    role: Role
    serial_number: int
    certificate_der: bytes
    certificate_pem: bytes
    private_key_der: bytes
    private_key_pem: bytes


def new_serial_number() -> int:
    """Random positive serial (159 bits of entropy)."""
    try:
        return x509.random_serial_number()
    except OSError as e:
        raise SerialNumberError(f"failed to generate serial number: {e}") from e


def classify_hosts(hosts: Sequence[str]) -> Tuple[List[str], list]:
    """
    Split hosts into (dns_names, ip_addresses). Anything that parses as a
    literal IPv4/IPv6 address is an IP; everything else is a DNS name.
    Zone-scoped IPv6 literals (fe80::1%eth0) are not IPs: the zone cannot be
    encoded in a certificate.
    """
    dns_names, ip_addresses = [], []
    for h in hosts:
        try:
            ip = ipaddress.ip_address(h)
        except ValueError:
            dns_names.append(h)
            continue
        if getattr(ip, "scope_id", None) is not None:
            dns_names.append(h)
        else:
            ip_addresses.append(ip)
    return dns_names, ip_addresses


def build_template(
    role: Role,
    organization: str,
    not_before: datetime.datetime,
    not_after: datetime.datetime,
    hosts: Sequence[str] = (),
    purposes: Optional[Sequence[KeyPurpose]] = None,
    path_length: Optional[int] = None,
) -> CertificateTemplate:
    """Build the template for `role`, drawing a new serial number."""
    is_authority = role in (Role.ROOT, Role.INTERMEDIATE)
    if role == Role.ROOT and hosts:
        raise UsageError("root certificate carries no subject alternative names")
    if role == Role.INTERMEDIATE and path_length is None:
        path_length = 0
    if not is_authority and path_length is not None:
        raise UsageError("path length only applies to authorities")
    dns_names, ip_addresses = classify_hosts(hosts)
    return CertificateTemplate(
        role=role,
        is_authority=is_authority,
        serial_number=new_serial_number(),
        organization=organization,
        not_before=not_before,
        not_after=not_after,
        key_cert_sign=is_authority,
        extended_key_usage=list(purposes or _DEFAULT_PURPOSES[role]),
        dns_names=dns_names,
        ip_addresses=ip_addresses,
        path_length=path_length,
    )


def generate_key() -> ec.EllipticCurvePrivateKey:
    try:
        return ec.generate_private_key(CURVE())
    except (OSError, ValueError, UnsupportedAlgorithm) as e:
        raise KeyGenerationError(f"failed to generate key pair: {e}") from e


def encode_certificate(cert: x509.Certificate) -> Tuple[bytes, bytes]:
    """Return (DER, PEM) encodings of `cert`."""
    try:
        return (
            cert.public_bytes(serialization.Encoding.DER),
            cert.public_bytes(serialization.Encoding.PEM),
        )
    except (ValueError, TypeError) as e:
        raise EncodingError(f"failed to encode certificate: {e}") from e


def encode_private_key(key) -> Tuple[bytes, bytes]:
    """Return (DER, PEM) encodings of `key` as unencrypted PKCS#8."""
    try:
        return tuple(
            key.private_bytes(
                encoding=encoding,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
            for encoding in (serialization.Encoding.DER, serialization.Encoding.PEM)
        )
    except (ValueError, TypeError) as e:
        raise EncodingError(f"unable to marshal private key: {e}") from e


def _extensions(template: CertificateTemplate) -> list:
    # (extension, critical)
    exts = [
        (x509.BasicConstraints(
            ca=template.is_authority,
            path_length=template.path_length if template.is_authority else None,
        ), True),
        (x509.KeyUsage(
            digital_signature=True,
            content_commitment=False,
            key_encipherment=False,
            data_encipherment=False,
            key_agreement=False,
            key_cert_sign=template.key_cert_sign,
            crl_sign=False,
            encipher_only=False,
            decipher_only=False,
        ), True),
        (x509.ExtendedKeyUsage(
            [_PURPOSE_OIDS[p] for p in template.extended_key_usage]
        ), False),
    ]
    sans = [x509.DNSName(n) for n in template.dns_names]
    sans += [x509.IPAddress(ip) for ip in template.ip_addresses]
    if sans:
        exts.append((x509.SubjectAlternativeName(sans), False))
    return exts


def sign_certificate(
    subject: CertificateTemplate,
    issuer: Optional[CertificateTemplate] = None,
    issuer_key: Optional[ec.EllipticCurvePrivateKey] = None,
    self_signed: bool = False,
) -> Tuple[CertificateMaterial, ec.EllipticCurvePrivateKey]:
    """
    Issue a certificate for `subject`.

    self_signed=True: no issuer key may be given; the subject's new key signs
    its own certificate and the issuer defaults to the subject.
    self_signed=False: `issuer` and `issuer_key` are both required; the
    issuer key signs while the subject's new public key is embedded.

    Returns (material, subject_private_key).
    Raises UsageError before any key generation on a bad combination.
    """
    if self_signed:
        if issuer_key is not None:
            raise UsageError("signing key must be absent when self-signing")
        if issuer is not None and issuer != subject:
            raise UsageError("a self-signed certificate is its own issuer")
        issuer = subject
    else:
        if issuer_key is None or issuer is None:
            raise UsageError("issuer template and key are required for a subordinate certificate")

    key = generate_key()
    signing_key = key if self_signed else issuer_key
    public_key = key.public_key()

    try:
        builder = (
            x509.CertificateBuilder()
            .subject_name(subject.subject_name())
            .issuer_name(issuer.subject_name())
            .public_key(public_key)
            .serial_number(subject.serial_number)
            .not_valid_before(subject.not_before)
            .not_valid_after(subject.not_after)
        )
        for ext, critical in _extensions(subject):
            builder = builder.add_extension(ext, critical=critical)
        builder = builder.add_extension(
            x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False
        )
        if not self_signed:
            builder = builder.add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_key.public_key()),
                critical=False,
            )
        cert = builder.sign(signing_key, hashes.SHA256())
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise SigningError(f"failed to create certificate: {e}") from e

    cert_der, cert_pem = encode_certificate(cert)
    key_der, key_pem = encode_private_key(key)
    log.debug("issued %s certificate serial=%s", subject.role.value, subject.serial_number)
    material = CertificateMaterial(
        role=subject.role,
        serial_number=subject.serial_number,
        certificate_der=cert_der,
        certificate_pem=cert_pem,
        private_key_der=key_der,
        private_key_pem=key_pem,
    )
    return material, key
