import os
import logging
from typing import List, Union
from pydantic import BaseModel, ConfigDict, ValidationError
from .response import ResponseWrapper, ResponseType, ErrorKind
from .utils import CommandRunner, run_command, first_validation_error
from .models import HostProfile, ProxySiteConfig, PACKAGE_MANAGER_PREFERENCE
from .commands import HostCommandBuilder, NginxCommandBuilder, CertbotCommandBuilder
from .guidance import SUPPORTED_DISTRIBUTIONS, reload_remediation
from .prompts import ConfirmationProvider

logger = logging.getLogger(__name__)

NGINX_PACKAGES = ["nginx"]
CERTBOT_PACKAGES = ["certbot", "python3-certbot-nginx"]


class NginxManager(BaseModel):
    """Installs nginx and certbot, and manages per-domain nginx site files."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    sites_available: str = "/etc/nginx/sites-available"
    sites_enabled: str = "/etc/nginx/sites-enabled"
    runner: CommandRunner = run_command

    def check_host(self, profile: HostProfile) -> ResponseType:
        if not profile.supported:
            return ResponseWrapper.error_response(
                "This command is only supported on Linux systems. Supported distributions: "
                + ", ".join(SUPPORTED_DISTRIBUTIONS),
                kind=ErrorKind.PRECONDITION_UNMET, stage="platform check")
        if not profile.privileged:
            return ResponseWrapper.error_response(
                "This command requires root privileges. Please run with sudo: sudo ssl-cli setup-nginx",
                kind=ErrorKind.PERMISSION_DENIED, stage="privilege check")
        return ResponseWrapper.success_response("Host supported")

    def is_nginx_installed(self) -> bool:
        return self.runner(NginxCommandBuilder.build_version_command()).success

    def is_certbot_installed(self) -> bool:
        return self.runner(CertbotCommandBuilder.build_version_command()).success

    def install_packages(self, profile: HostProfile, name: str, packages: List[str]) -> ResponseType:
        stage = f"install {name}"
        if profile.package_manager is None:
            return ResponseWrapper.error_response(
                "Could not detect package manager (looked for "
                + ", ".join(m.value for m in PACKAGE_MANAGER_PREFERENCE) + ")",
                kind=ErrorKind.TOOL_MISSING, stage=stage)

        commands = [HostCommandBuilder.build_package_index_command(profile)]
        commands.extend(HostCommandBuilder.build_install_commands(profile, packages))
        for command in commands:
            result = self.runner(command)
            if not result.success:
                result.error = f"Failed to install {name}: {result.error}"
                return result.at_stage(stage)
        return ResponseWrapper.success_response(f"{name} installed successfully")

    def reload(self, profile: HostProfile) -> ResponseType:
        """Reload the nginx service. A failed reload is a warning, never an error."""
        result = self.runner(NginxCommandBuilder.build_reload_command(profile))
        if result.success:
            return ResponseWrapper.success_response("Nginx reloaded", {"reloaded": True})
        warnings = ["Warning: Could not reload Nginx service automatically"] + reload_remediation(profile.is_wsl)
        for line in warnings:
            logger.warning(line)
        return ResponseWrapper.success_response(warnings[0], {"reloaded": False}, warnings=warnings)

    def ensure_proxy_and_issuance_client(self, profile: HostProfile,
                                         prompts: ConfirmationProvider) -> ResponseType:
        """Make sure nginx and certbot are installed, offering to install each.

        Args:
            profile: Resolved host profile (platform, privileges, package manager)
            prompts: Asked for consent before each installation

        Returns:
            SuccessResponse (possibly cancelled, possibly with reload warnings)
            or the ErrorResponse of the failing check or installation
        """
        result = self.check_host(profile)
        if not result.success:
            return result

        warnings: List[str] = []
        installed: List[str] = []
        tools = [
            ("Nginx", self.is_nginx_installed, NGINX_PACKAGES),
            ("certbot", self.is_certbot_installed, CERTBOT_PACKAGES),
        ]
        for name, probe, packages in tools:
            if probe():
                prompts.notify(f"{name} is installed", "success")
                continue
            if not prompts.confirm(f"{name} is not installed. Would you like to install it?", default=True):
                return ResponseWrapper.cancelled_response(f"{name} installation is required to proceed")

            result = self.install_packages(profile, name, packages)
            if not result.success:
                return result
            installed.append(name)
            prompts.notify(result.output, "success")

            if name == "Nginx":
                reload = self.reload(profile)
                warnings.extend(reload.warnings)

        return ResponseWrapper.success_response(
            "Nginx and certbot are available", {"installed": installed}, warnings=warnings)

    def configure_proxy(self, domain: str, port: Union[int, str], profile: HostProfile) -> ResponseType:
        """Write, enable, validate and reload the nginx site for ``domain``.

        Args:
            domain: Public host name served by the site
            port: Local port of the upstream application
            profile: Resolved host profile

        Returns:
            SuccessResponse with the site and link paths, or an ErrorResponse.
            When ``nginx -t`` rejects the configuration the checker's output is
            returned as a ValidationFailure and no reload is attempted.
        """
        try:
            site = ProxySiteConfig(domain=domain, port=port)
        except ValidationError as e:
            return ResponseWrapper.error_response(
                first_validation_error(e), kind=ErrorKind.VALIDATION_FAILURE, stage="proxy input")

        site_path = os.path.join(self.sites_available, site.file_name)
        link_path = os.path.join(self.sites_enabled, site.file_name)

        steps = [("write site configuration",
                  NginxCommandBuilder.build_write_site_command(profile, site_path, site.render()))]
        # Recreate the enablement link so it always points at the fresh file
        if os.path.lexists(link_path):
            steps.append(("remove site link", NginxCommandBuilder.build_unlink_command(profile, link_path)))
        steps.append(("enable site", NginxCommandBuilder.build_link_command(profile, site_path, link_path)))

        for stage, command in steps:
            result = self.runner(command)
            if not result.success:
                result.error = f"Failed to configure Nginx: {result.error}"
                return result.at_stage(stage)

        test = self.runner(NginxCommandBuilder.build_test_command(profile))
        if not test.success:
            kind = ErrorKind.TOOL_MISSING if test.kind == ErrorKind.TOOL_MISSING else ErrorKind.VALIDATION_FAILURE
            return ResponseWrapper.error_response(
                test.error, kind=kind, stage="validate configuration")

        reload = self.reload(profile)
        return ResponseWrapper.success_response(
            "Nginx configuration created and reloaded!" if reload.data["reloaded"]
            else "Nginx configuration created",
            {
                "site_path": site_path,
                "link_path": link_path,
                "upstream": site.upstream,
                "reloaded": reload.data["reloaded"],
            },
            warnings=reload.warnings
        )
