# gencert/cli.py
"""
Command line entry points.

  generate-cert --host localhost,127.0.0.1 [--duration 8760h] [--organization "Acme Co"] [--out .]
  generate-cert-tiered [--servers 3] [--clients 3] [--out temp]

All certificates are generated before anything is written, so a failed run
leaves no files behind.
"""
import argparse
import sys

from pydantic import ValidationError

from gencert.common.config import VERSION, GenerationConfig, TieredConfig
from gencert.common.errors import GenCertError
from gencert.common.logging_config import LOGGER, configure_logging
from gencert.common.utils import parse_duration, split_hosts
from gencert.crypto import chain as chainmod
from gencert.crypto.verify import cert_fingerprint_hex, load_material_certificate
from gencert.storage import writer


def _common_args(parser: argparse.ArgumentParser, organization: str, out: str) -> None:
    parser.add_argument("--duration", type=parse_duration, default="8760h",
                        help="How long the certificates are valid for (default: 8760h)")
    parser.add_argument("--organization", default=organization,
                        help=f"Organization to issue the certificates to (default: {organization})")
    parser.add_argument("--out", default=out,
                        help=f"Output directory (default: {out})")
    parser.add_argument("--version", action="version",
                        version=f"generate-cert version {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def _write(chain, out_dir: str) -> None:
    for name, material in chain.items():
        cert = load_material_certificate(material)
        LOGGER.info("%s: serial=%s sha256=%s", name, material.serial_number,
                    cert_fingerprint_hex(cert))
    for path in writer.write_all(chain.items(), out_dir):
        LOGGER.info("Wrote %s", path)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="generate-cert",
        description="Generate a root CA plus a server and a client certificate signed by it",
    )
    parser.add_argument("--host", required=True, type=split_hosts,
                        help="Comma-separated hostnames and IPs to generate a certificate for")
    _common_args(parser, "Acme Co", ".")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = GenerationConfig(hosts=args.host, organization=args.organization,
                                  valid_for=args.duration)
        chain = chainmod.generate(config)
        _write(chain, args.out)
    except (GenCertError, ValidationError, OSError) as e:
        LOGGER.error("generation failed: %s", e)
        return 1
    return 0


def main_tiered(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="generate-cert-tiered",
        description="Generate a root CA, server and client intermediates, and per-name leaves",
    )
    parser.add_argument("--servers", type=int, default=3, help="Number of server certificates")
    parser.add_argument("--clients", type=int, default=3, help="Number of client certificates")
    _common_args(parser, "ACME Company", "temp")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = TieredConfig(
            organization=args.organization,
            valid_for=args.duration,
            server_names=[f"server{i}.local" for i in range(1, args.servers + 1)],
            client_names=[f"client{i}" for i in range(1, args.clients + 1)],
        )
        chain = chainmod.generate_tiered(config)
        _write(chain, args.out)
    except (GenCertError, ValidationError, OSError) as e:
        LOGGER.error("generation failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
