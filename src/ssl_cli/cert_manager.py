import os
import logging
from typing import Dict, Any, List
from pydantic import BaseModel, ConfigDict, ValidationError
from .response import ResponseWrapper, ResponseType, ErrorKind
from .utils import CommandRunner, run_command, ensure_directory_exists, remove_files, first_validation_error
from .models import CertificateAuthority, DomainCertificateRequest, Command
from .commands import OpenSSLCommandBuilder
from .inspection import inspect_certificate
from .prompts import ConfirmationProvider

logger = logging.getLogger(__name__)


class CertificateManager(BaseModel):
    """Local CA bootstrap and CA-signed domain certificates under ``storage_dir``."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    storage_dir: str
    runner: CommandRunner = run_command

    @property
    def certificate_authority(self) -> CertificateAuthority:
        return CertificateAuthority(storage_dir=self.storage_dir)

    def is_toolkit_available(self) -> bool:
        """True iff ``openssl version`` exits successfully."""
        result = self.runner(OpenSSLCommandBuilder.build_version_command())
        return result.success

    def toolkit_version(self) -> ResponseType:
        return self.runner(OpenSSLCommandBuilder.build_version_command())

    def ensure_storage_dir(self) -> ResponseType:
        return ensure_directory_exists(self.storage_dir)

    def _run_step(self, step: str, command: Command) -> ResponseType:
        result = self.runner(command)
        if not result.success:
            result.error = f"Failed to {step}: {result.error}"
            return result.at_stage(step)
        logger.info("Completed: %s", step)
        return result

    def _summarize(self, cert_path: str, warnings: List[str]) -> Dict[str, Any]:
        summary = inspect_certificate(cert_path)
        if not summary.success:
            warnings.append(f"Could not inspect {os.path.basename(cert_path)}: {summary.error}")
            return {}
        return summary.data

    def create_ca(self, prompts: ConfirmationProvider) -> ResponseType:
        """Generate (or regenerate) the local CA key and self-signed certificate.

        Assumes openssl is available and the storage directory exists.

        Args:
            prompts: Asked for confirmation before overwriting an existing CA

        Returns:
            SuccessResponse with the CA paths and certificate summary, a
            cancelled SuccessResponse if the operator keeps the existing CA,
            or the ErrorResponse of the failing step
        """
        ca = self.certificate_authority

        # Existing CA is only replaced on explicit confirmation
        if ca.exists:
            if not prompts.confirm("CA files already exist. Do you want to overwrite them?", default=False):
                return ResponseWrapper.cancelled_response("Operation cancelled. Using existing CA files.")

        result = self._run_step("generate CA private key", OpenSSLCommandBuilder.build_ca_key_command(ca))
        if not result.success:
            return result

        result = self._run_step("generate CA certificate", OpenSSLCommandBuilder.build_ca_certificate_command(ca))
        if not result.success:
            return result

        warnings: List[str] = []
        certificate = self._summarize(ca.cert_path, warnings)
        return ResponseWrapper.success_response(
            "Local Certificate Authority created successfully!",
            {"key_path": ca.key_path, "cert_path": ca.cert_path, "certificate": certificate},
            warnings=warnings
        )

    def write_san_extension(self, request: DomainCertificateRequest) -> ResponseType:
        try:
            with open(request.ext_path, "w", encoding="utf-8") as f:
                f.write(request.san_extension())
        except OSError as e:
            return ResponseWrapper.error_response(
                f"Failed to create config file: {e}", kind=ErrorKind.PERMISSION_DENIED,
                stage="SAN extension file")
        return ResponseWrapper.success_response("Configuration file created!", {"ext_path": request.ext_path})

    def cleanup_temp_files(self, request: DomainCertificateRequest) -> ResponseType:
        """Remove the CSR and extension file; failure is only ever a warning."""
        error = remove_files(*request.temporary_paths)
        if error:
            message = f"Failed to clean up temporary files: {error}"
            logger.warning(message)
            return ResponseWrapper.success_response(message, {"removed": False}, warnings=[message])
        return ResponseWrapper.success_response(
            f"Temporary files for {request.domain} cleaned up", {"removed": True})

    def issue_domain_certificate(self, domain: str, prompts: ConfirmationProvider) -> ResponseType:
        """Issue a certificate for ``domain`` signed by the local CA.

        Args:
            domain: Domain name placed in the single DNS subject alternative name
            prompts: Asked before overwriting existing domain files and before
                removing the temporary CSR and extension file

        Returns:
            SuccessResponse with the key and certificate paths, a cancelled
            SuccessResponse when the operator keeps an existing certificate,
            or the ErrorResponse of the failing step
        """
        try:
            request = DomainCertificateRequest(domain=domain, ca=self.certificate_authority)
        except ValidationError as e:
            return ResponseWrapper.error_response(
                first_validation_error(e), kind=ErrorKind.VALIDATION_FAILURE, stage="domain input")

        # Check if CA files exist
        if not request.ca.readable:
            return ResponseWrapper.error_response(
                'CA files do not exist. Please run "ssl-cli create-local-ca" first.',
                kind=ErrorKind.PRECONDITION_UNMET, stage="CA lookup")

        if request.exists:
            if not prompts.confirm(
                    f"Certificate for {request.domain} already exists. Do you want to overwrite it?",
                    default=False):
                return ResponseWrapper.cancelled_response(
                    f"Operation cancelled. Using existing certificate for {request.domain}.")

        result = self._run_step(
            "generate private key", OpenSSLCommandBuilder.build_domain_key_command(request))
        if not result.success:
            return result

        result = self._run_step("create CSR", OpenSSLCommandBuilder.build_csr_command(request))
        if not result.success:
            return result

        result = self.write_san_extension(request)
        if not result.success:
            return result

        result = self._run_step("create certificate", OpenSSLCommandBuilder.build_sign_command(request))
        if not result.success:
            return result

        warnings: List[str] = []
        certificate = self._summarize(request.cert_path, warnings)

        removed = False
        if prompts.confirm("Do you want to clean up temporary files (CSR and EXT)?", default=True):
            cleanup = self.cleanup_temp_files(request)
            removed = cleanup.data["removed"]
            warnings.extend(cleanup.warnings)

        return ResponseWrapper.success_response(
            f"Certificate for {request.domain} created successfully!",
            {
                "domain": request.domain,
                "key_path": request.key_path,
                "cert_path": request.cert_path,
                "temporary_files": request.temporary_paths,
                "temporary_files_removed": removed,
                "certificate": certificate,
            },
            warnings=warnings
        )
