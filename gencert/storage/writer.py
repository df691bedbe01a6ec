# gencert/storage/writer.py
"""
Persist generated material.

<name>.pem holds the certificate (world readable), <name>.key the PKCS#8
private key (owner only).
"""
import os
from typing import Iterable, List, Tuple

from gencert.crypto.pki import CertificateMaterial

CERT_MODE = 0o644
KEY_MODE = 0o600


def _write(path: str, data: bytes, mode: int) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    # O_CREAT leaves the mode of an existing file alone; tighten before writing
    os.fchmod(fd, mode)
    with os.fdopen(fd, "wb") as f:
        f.write(data)


def write_material(material: CertificateMaterial, name: str, out_dir: str) -> Tuple[str, str]:
    os.makedirs(out_dir, exist_ok=True)
    cert_path = os.path.join(out_dir, f"{name}.pem")
    key_path = os.path.join(out_dir, f"{name}.key")
    _write(cert_path, material.certificate_pem, CERT_MODE)
    _write(key_path, material.private_key_pem, KEY_MODE)
    return cert_path, key_path


def write_all(items: Iterable[Tuple[str, CertificateMaterial]], out_dir: str) -> List[str]:
    """Write every (name, material) pair; returns the paths written, in order."""
    paths = []
    for name, material in items:
        paths.extend(write_material(material, name, out_dir))
    return paths
