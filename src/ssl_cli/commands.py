from typing import List
from .models import (
    Command, CertificateAuthority, DomainCertificateRequest,
    HostProfile, PackageManager, DIGEST
)


class OpenSSLCommandBuilder:
    @staticmethod
    def build_version_command() -> Command:
        return Command(command="openssl", args=["version"])

    @staticmethod
    def build_ca_key_command(ca: CertificateAuthority) -> Command:
        # -des3 makes openssl prompt for the CA passphrase
        return Command(
            command="openssl",
            args=["genrsa", "-des3", "-out", ca.key_path, str(ca.key_size)],
            interactive=True
        )

    @staticmethod
    def build_ca_certificate_command(ca: CertificateAuthority) -> Command:
        return Command(
            command="openssl",
            args=[
                "req",
                "-x509",
                "-new",
                "-nodes",
                "-key", ca.key_path,
                f"-{DIGEST}",
                "-days", str(ca.days),
                "-out", ca.cert_path
            ],
            interactive=True
        )

    @staticmethod
    def build_domain_key_command(request: DomainCertificateRequest) -> Command:
        return Command(
            command="openssl",
            args=["genrsa", "-out", request.key_path, str(request.key_size)]
        )

    @staticmethod
    def build_csr_command(request: DomainCertificateRequest) -> Command:
        return Command(
            command="openssl",
            args=[
                "req",
                "-new",
                "-key", request.key_path,
                "-out", request.csr_path
            ],
            interactive=True
        )

    @staticmethod
    def build_sign_command(request: DomainCertificateRequest) -> Command:
        ca = request.ca
        return Command(
            command="openssl",
            args=[
                "x509",
                "-req",
                "-in", request.csr_path,
                "-CA", ca.cert_path,
                "-CAkey", ca.key_path,
                "-CAcreateserial",
                "-out", request.cert_path,
                "-days", str(request.days),
                f"-{DIGEST}",
                "-extfile", request.ext_path
            ],
            interactive=True
        )


class HostCommandBuilder:
    """Commands that probe or change host-level state (packages, services)."""

    @staticmethod
    def build_privilege_probe_command() -> Command:
        return Command(command="sudo", args=["-n", "true"])

    @staticmethod
    def build_package_index_command(profile: HostProfile) -> Command:
        manager = profile.package_manager
        if manager == PackageManager.APT:
            args = ["update"]
        else:
            args = ["makecache"]
        return _privileged(profile, manager.value, args)

    @staticmethod
    def build_install_commands(profile: HostProfile, packages: List[str]) -> List[Command]:
        manager = profile.package_manager
        commands = []
        if manager == PackageManager.YUM and "nginx" in packages:
            # nginx lives in EPEL on yum-based distributions
            commands.append(_privileged(profile, manager.value, ["install", "-y", "epel-release"]))
        commands.append(_privileged(profile, manager.value, ["install", "-y"] + list(packages)))
        return commands


class NginxCommandBuilder:
    @staticmethod
    def build_version_command() -> Command:
        return Command(command="nginx", args=["-v"])

    @staticmethod
    def build_write_site_command(profile: HostProfile, path: str, content: str) -> Command:
        command = _privileged(profile, "tee", [path])
        command.input = content
        return command

    @staticmethod
    def build_unlink_command(profile: HostProfile, link_path: str) -> Command:
        return _privileged(profile, "rm", ["-f", link_path])

    @staticmethod
    def build_link_command(profile: HostProfile, target: str, link_path: str) -> Command:
        return _privileged(profile, "ln", ["-s", target, link_path])

    @staticmethod
    def build_test_command(profile: HostProfile) -> Command:
        return _privileged(profile, "nginx", ["-t"])

    @staticmethod
    def build_reload_command(profile: HostProfile) -> Command:
        if profile.is_wsl:
            return _privileged(profile, "service", ["nginx", "reload"])
        return _privileged(profile, "systemctl", ["reload", "nginx"])


class CertbotCommandBuilder:
    @staticmethod
    def build_version_command() -> Command:
        return Command(command="certbot", args=["--version"])

    @staticmethod
    def build_manual_dns_command(profile: HostProfile, domain: str, email: str) -> Command:
        command = _privileged(profile, "certbot", [
            "certonly",
            "--manual",
            "--preferred-challenges", "dns",
            "-d", domain,
            "--email", email,
            "--agree-tos"
        ])
        command.interactive = True
        return command


def _privileged(profile: HostProfile, program: str, args: List[str]) -> Command:
    prefix = profile.privilege_prefix
    if prefix:
        return Command(command=prefix[0], args=prefix[1:] + [program] + list(args))
    return Command(command=program, args=list(args))
