import logging
from typing import Callable, List, Optional
from .config import Settings
from .response import ResponseWrapper, ResponseType, ErrorKind
from .utils import CommandRunner, run_command
from .models import HostProfile, validate_domain_name
from .cert_manager import CertificateManager
from .nginx import NginxManager
from .issuance import CertbotIssuer
from .host import detect_host_profile
from .guidance import ca_install_instructions, web_server_stanzas, post_setup_notes, OPENSSL_INSTALL_HELP
from .prompts import ConfirmationProvider

logger = logging.getLogger(__name__)


def domain_problem(value: str) -> Optional[str]:
    if not value:
        return "Domain name is required"
    try:
        validate_domain_name(value)
    except ValueError as e:
        return str(e)
    return None


def port_problem(value: str) -> Optional[str]:
    if not (value.isascii() and value.isdigit()):
        return "Port must be a number"
    if not 0 < int(value) <= 65535:
        return "Port must be between 1 and 65535"
    return None


class Orchestrator:
    """Sequences the local and production flows for one invocation.

    Every stage failure ends the invocation; nothing is retried or resumed.
    State is re-derived from the filesystem and the host on each call.
    """

    def __init__(self, settings: Settings, prompts: ConfirmationProvider,
                 runner: CommandRunner = run_command,
                 host_detector: Optional[Callable[[], HostProfile]] = None):
        self.settings = settings
        self.prompts = prompts
        self.host_detector = host_detector or (lambda: detect_host_profile(runner))
        self.cert_manager = CertificateManager(storage_dir=settings.certs_dir, runner=runner)
        self.nginx = NginxManager(
            sites_available=settings.nginx_sites_available,
            sites_enabled=settings.nginx_sites_enabled,
            runner=runner
        )
        self.issuer = CertbotIssuer(runner=runner)

    def _require_toolkit(self) -> Optional[ResponseType]:
        if self.cert_manager.is_toolkit_available():
            return None
        return ResponseWrapper.error_response(
            "OpenSSL is not installed or not in PATH. Please install OpenSSL first.",
            kind=ErrorKind.TOOL_MISSING, stage="openssl check")

    def _stage_storage(self) -> ResponseType:
        staged = self.cert_manager.ensure_storage_dir()
        if not staged.success:
            return staged.at_stage("certs directory")
        if staged.data["created"]:
            self.prompts.notify(staged.output, "success")
        return staged

    def check_openssl(self) -> ResponseType:
        version = self.cert_manager.toolkit_version()
        if not version.success:
            return ResponseWrapper.error_response(
                f"OpenSSL is not installed or not in PATH\n\nPlease install OpenSSL:\n{OPENSSL_INSTALL_HELP}",
                kind=ErrorKind.TOOL_MISSING, stage="openssl check")
        return ResponseWrapper.success_response(
            "OpenSSL is installed and working correctly", {"version": version.output})

    def create_local_ca(self) -> ResponseType:
        missing = self._require_toolkit()
        if missing:
            return missing

        staged = self._stage_storage()
        if not staged.success:
            return staged

        result = self.cert_manager.create_ca(self.prompts)
        if result.success and not result.cancelled:
            result.data["install_instructions"] = ca_install_instructions(result.data["cert_path"])
        return result

    def create_cert(self, domain: Optional[str] = None) -> ResponseType:
        missing = self._require_toolkit()
        if missing:
            return missing

        if domain is None:
            domain = self.prompts.ask("Enter the domain name (e.g., mysite.test):", validate=domain_problem)
        else:
            domain = domain.strip()
            problem = domain_problem(domain)
            if problem:
                return ResponseWrapper.error_response(
                    problem, kind=ErrorKind.VALIDATION_FAILURE, stage="domain input")

        staged = self._stage_storage()
        if not staged.success:
            return staged

        result = self.cert_manager.issue_domain_certificate(domain, self.prompts)
        if result.success and not result.cancelled:
            data = result.data
            data["server_config"] = web_server_stanzas(data["domain"], data["cert_path"], data["key_path"])
        return result

    def setup_nginx(self) -> ResponseType:
        profile = self.host_detector()
        warnings: List[str] = []

        provisioned = self.nginx.ensure_proxy_and_issuance_client(profile, self.prompts)
        if not provisioned.success or provisioned.cancelled:
            return provisioned
        warnings.extend(provisioned.warnings)

        domain = self.prompts.ask("Enter domain name (e.g., staging.example.com):", validate=domain_problem)
        port = self.prompts.ask("Enter application port (e.g., 7000):", validate=port_problem)

        configured = self.nginx.configure_proxy(domain, port, profile)
        if not configured.success:
            return configured
        warnings.extend(configured.warnings)
        self.prompts.notify(configured.output, "success")

        issued = self.issuer.run_issuance(domain, self.prompts, profile)
        if not issued.success:
            return issued
        issued.warnings = warnings + issued.warnings
        if issued.cancelled:
            return issued

        issued.output = "Configuration completed successfully!"
        issued.data.update({
            "site_path": configured.data["site_path"],
            "upstream": configured.data["upstream"],
            "notes": post_setup_notes(domain),
        })
        return issued
