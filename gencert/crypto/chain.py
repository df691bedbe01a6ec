# gencert/crypto/chain.py
"""
Chain assembly on top of the signer.

Exports:
 - ChainAssembler: one validity window, issues root / intermediate / leaf
 - generate(config) -> CertificateChain (root, leaf, client)
 - generate_tiered(config) -> TieredChain (root, two intermediates, leaves)

Each certificate is signed by its immediate issuer's key. The first failure
propagates out and nothing is returned for the run.
"""
import datetime
import logging
from typing import Callable, Dict, Iterator, NamedTuple, Optional, Sequence, Tuple

from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel, ConfigDict

from gencert.common.config import GenerationConfig, TieredConfig, check_valid_for
from gencert.common.errors import UsageError
from gencert.common.utils import format_duration
from gencert.crypto.pki import (
    CertificateMaterial,
    CertificateTemplate,
    KeyPurpose,
    Role,
    build_template,
    sign_certificate,
)

log = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class IssuingAuthority(NamedTuple):
    """A CA that can sign further certificates."""
    template: CertificateTemplate
    key: ec.EllipticCurvePrivateKey
    material: CertificateMaterial


class CertificateChain(BaseModel):
    model_config = ConfigDict(frozen=True)

    root: CertificateMaterial
    leaf: CertificateMaterial
    client: CertificateMaterial

    def items(self) -> Iterator[Tuple[str, CertificateMaterial]]:
        yield "root", self.root
        yield "leaf", self.leaf
        yield "client", self.client


class TieredChain(BaseModel):
    model_config = ConfigDict(frozen=True)

    root: CertificateMaterial
    server_intermediate: CertificateMaterial
    client_intermediate: CertificateMaterial
    servers: Dict[str, CertificateMaterial]
    clients: Dict[str, CertificateMaterial]

    def items(self) -> Iterator[Tuple[str, CertificateMaterial]]:
        yield "root", self.root
        yield "intermediate-server", self.server_intermediate
        yield "intermediate-client", self.client_intermediate
        yield from self.servers.items()
        yield from self.clients.items()


class ChainAssembler:
    """
    Issues certificates that all share one validity window, computed once
    when the assembler is created.
    """

    def __init__(
        self,
        organization: str,
        valid_for: datetime.timedelta,
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ):
        try:
            check_valid_for(valid_for)
        except ValueError as e:
            raise UsageError(str(e)) from e
        self.organization = organization
        # certificates encode times at second precision
        self.not_before = (clock or _utcnow)().replace(microsecond=0)
        self.not_after = self.not_before + valid_for
        log.debug("validity window %s .. %s (%s)",
                  self.not_before, self.not_after, format_duration(valid_for))

    def _template(self, role: Role, hosts: Sequence[str] = (), purposes=None) -> CertificateTemplate:
        return build_template(
            role,
            self.organization,
            self.not_before,
            self.not_after,
            hosts=hosts,
            purposes=purposes,
        )

    def issue_root(self) -> IssuingAuthority:
        template = self._template(Role.ROOT)
        material, key = sign_certificate(template, self_signed=True)
        return IssuingAuthority(template, key, material)

    def issue_intermediate(
        self, parent: IssuingAuthority, purposes: Sequence[KeyPurpose]
    ) -> IssuingAuthority:
        template = self._template(Role.INTERMEDIATE, purposes=purposes)
        material, key = sign_certificate(template, parent.template, parent.key)
        return IssuingAuthority(template, key, material)

    def issue_leaf(
        self, parent: IssuingAuthority, role: Role, hosts: Sequence[str]
    ) -> CertificateMaterial:
        if role not in (Role.SERVER, Role.CLIENT):
            raise UsageError(f"{role.value} is not a leaf role")
        template = self._template(role, hosts=hosts)
        material, _ = sign_certificate(template, parent.template, parent.key)
        return material


def generate(
    config: GenerationConfig,
    clock: Optional[Callable[[], datetime.datetime]] = None,
) -> CertificateChain:
    """Root, then a server leaf and a client leaf both signed by the root."""
    assembler = ChainAssembler(config.organization, config.valid_for, clock)
    root = assembler.issue_root()
    leaf = assembler.issue_leaf(root, Role.SERVER, config.hosts)
    client = assembler.issue_leaf(root, Role.CLIENT, config.hosts)
    log.info("generated root, leaf and client for %s", ",".join(config.hosts) or "<no hosts>")
    return CertificateChain(root=root.material, leaf=leaf, client=client)


def generate_tiered(
    config: TieredConfig,
    clock: Optional[Callable[[], datetime.datetime]] = None,
) -> TieredChain:
    """
    Root, a server and a client intermediate under it, then one leaf per
    name under the matching intermediate. Each leaf's only SAN is its name.
    """
    assembler = ChainAssembler(config.organization, config.valid_for, clock)
    root = assembler.issue_root()
    server_ca = assembler.issue_intermediate(root, [KeyPurpose.SERVER_AUTH])
    client_ca = assembler.issue_intermediate(root, [KeyPurpose.CLIENT_AUTH])

    servers = {
        name: assembler.issue_leaf(server_ca, Role.SERVER, [name])
        for name in config.server_names
    }
    clients = {
        name: assembler.issue_leaf(client_ca, Role.CLIENT, [name])
        for name in config.client_names
    }
    log.info("generated tiered chain: %d servers, %d clients", len(servers), len(clients))
    return TieredChain(
        root=root.material,
        server_intermediate=server_ca.material,
        client_intermediate=client_ca.material,
        servers=servers,
        clients=clients,
    )
