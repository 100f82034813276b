"""
PEM helpers: CSR text wrapping and X.509 bundle parsing.

Usage:
    from kvrotator.pem import parse_pem_certificates, wrap_csr

    text = wrap_csr(operation.csr)                    # for the operator to get signed
    chain = parse_pem_certificates(trust_chain + issued)
"""

from __future__ import annotations

import base64

from cryptography import x509

CSR_HEADER = "-----BEGIN CERTIFICATE REQUEST-----"
CSR_FOOTER = "-----END CERTIFICATE REQUEST-----"
CERTIFICATE_FOOTER = "-----END CERTIFICATE-----"


def wrap_csr(csr: bytes | None) -> str:
    """Base64-encode raw CSR bytes inside CERTIFICATE REQUEST armor.

    Returns an empty string when there is no CSR.
    """
    if not csr:
        return ""
    encoded = base64.b64encode(csr).decode("ascii")
    return f"{CSR_HEADER}\n{encoded}\n{CSR_FOOTER}"


def split_pem_bundle(content: str) -> list[str]:
    """Split concatenated PEM certificates into individually terminated blocks.

    Accepts CRLF or LF line endings; blank fragments are dropped.
    """
    if not content:
        return []
    normalized = content.replace("\r\n", "\n")
    blocks = []
    for fragment in normalized.split(CERTIFICATE_FOOTER):
        fragment = fragment.strip()
        if not fragment:
            continue
        blocks.append(f"{fragment}\n{CERTIFICATE_FOOTER}\n")
    return blocks


def parse_pem_certificates(content: str) -> list[x509.Certificate]:
    """Parse a PEM bundle into certificates, in bundle order.

    Raises:
        ValueError: a fragment is not a valid PEM certificate.
    """
    return [x509.load_pem_x509_certificate(b.encode("ascii")) for b in split_pem_bundle(content)]
