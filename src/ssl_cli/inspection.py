"""Read back certificates produced by openssl to report what was issued."""

import os
from typing import List

from cryptography import x509
from cryptography.hazmat.primitives import hashes

from .response import ResponseWrapper, ResponseType, ErrorKind


def _dns_names(cert: x509.Certificate) -> List[str]:
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return san.value.get_values_for_type(x509.DNSName)


def _is_ca(cert: x509.Certificate) -> bool:
    try:
        constraints = cert.extensions.get_extension_for_class(x509.BasicConstraints)
    except x509.ExtensionNotFound:
        # v1 self-signed roots carry no extensions
        return cert.issuer == cert.subject
    return constraints.value.ca


def inspect_certificate(cert_path: str) -> ResponseType:
    """Summarize a PEM certificate.

    Args:
        cert_path: Path to the PEM encoded certificate

    Returns:
        SuccessResponse whose data holds subject, issuer, serial, validity
        window, SHA-256 fingerprint, DNS subject alternative names and the CA flag
    """
    if not os.path.exists(cert_path):
        return ResponseWrapper.error_response(
            f"Certificate {os.path.basename(cert_path)} does not exist",
            kind=ErrorKind.PRECONDITION_UNMET)
    try:
        with open(cert_path, "rb") as f:
            cert = x509.load_pem_x509_certificate(f.read())
    except (OSError, ValueError) as e:
        return ResponseWrapper.error_response(
            f"Could not read certificate {cert_path}: {e}", kind=ErrorKind.VALIDATION_FAILURE)

    fingerprint = cert.fingerprint(hashes.SHA256()).hex().upper()
    return ResponseWrapper.success_response(
        f"Certificate {os.path.basename(cert_path)}",
        {
            "subject": cert.subject.rfc4514_string(),
            "issuer": cert.issuer.rfc4514_string(),
            "serial_number": format(cert.serial_number, "X"),
            "not_before": cert.not_valid_before_utc.isoformat(),
            "not_after": cert.not_valid_after_utc.isoformat(),
            "fingerprint_sha256": ":".join(fingerprint[i:i + 2] for i in range(0, len(fingerprint), 2)),
            "dns_names": _dns_names(cert),
            "is_ca": _is_ca(cert),
        }
    )
