import os
import re
import shlex
from enum import Enum
from typing import List, Optional, Literal
from pydantic import BaseModel, Field, constr, field_validator

RSA_KEY_BITS = 2048
CA_VALIDITY_DAYS = 1825
CERT_VALIDITY_DAYS = 825
DIGEST = "sha256"

CA_KEY_FILE = "myCA.key"
CA_CERT_FILE = "myCA.pem"
CA_SERIAL_FILE = "myCA.srl"

PROXY_TIMEOUT_SECONDS = 90


class PackageManager(str, Enum):
    APT = "apt-get"
    YUM = "yum"
    DNF = "dnf"


# Probe order for package manager detection
PACKAGE_MANAGER_PREFERENCE = [PackageManager.APT, PackageManager.YUM, PackageManager.DNF]

# Dot-separated hostname labels, optionally under a leading wildcard
HOSTNAME_PATTERN = re.compile(
    r"^(\*\.)?[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)


def validate_domain_name(value: str) -> str:
    """Check a domain name before it is used in file names, configs and commands.

    Only hostname labels are accepted, since the name is written into the
    nginx server block and the SAN extension and is passed to certbot.
    """
    if any(ch.isspace() for ch in value):
        raise ValueError("Domain name must not contain whitespace")
    if "/" in value or "\\" in value or value in (".", ".."):
        raise ValueError("Domain name must not contain path separators")
    if not HOSTNAME_PATTERN.match(value):
        raise ValueError("Domain name may only contain letters, digits, hyphens and dots, "
                         "and labels must not start or end with a hyphen")
    return value


class Command(BaseModel):
    command: str
    args: List[str] = Field(default_factory=list)
    input: Optional[str] = None
    # Interactive commands inherit the terminal so the tool can prompt
    interactive: bool = False

    @property
    def argv(self) -> List[str]:
        return [self.command] + list(self.args)

    def __str__(self) -> str:
        return shlex.join(self.argv)


class CertificateAuthority(BaseModel):
    storage_dir: str
    key_size: int = Field(RSA_KEY_BITS, ge=2048)
    days: int = Field(CA_VALIDITY_DAYS, gt=0)

    @property
    def key_path(self) -> str:
        return os.path.join(self.storage_dir, CA_KEY_FILE)

    @property
    def cert_path(self) -> str:
        return os.path.join(self.storage_dir, CA_CERT_FILE)

    @property
    def serial_path(self) -> str:
        return os.path.join(self.storage_dir, CA_SERIAL_FILE)

    @property
    def exists(self) -> bool:
        return os.path.exists(self.key_path) and os.path.exists(self.cert_path)

    @property
    def readable(self) -> bool:
        return self.exists and os.access(self.key_path, os.R_OK) and os.access(self.cert_path, os.R_OK)


class DomainCertificateRequest(BaseModel):
    domain: constr(strip_whitespace=True, min_length=1, max_length=253)
    ca: CertificateAuthority
    key_size: int = Field(RSA_KEY_BITS, ge=2048)
    days: int = Field(CERT_VALIDITY_DAYS, gt=0)

    @field_validator("domain")
    @classmethod
    def _check_domain(cls, value: str) -> str:
        return validate_domain_name(value)

    def _path(self, suffix: str) -> str:
        return os.path.join(self.ca.storage_dir, f"{self.domain}.{suffix}")

    @property
    def key_path(self) -> str:
        return self._path("key")

    @property
    def csr_path(self) -> str:
        return self._path("csr")

    @property
    def ext_path(self) -> str:
        return self._path("ext")

    @property
    def cert_path(self) -> str:
        return self._path("crt")

    @property
    def exists(self) -> bool:
        return os.path.exists(self.cert_path) or os.path.exists(self.key_path)

    @property
    def temporary_paths(self) -> List[str]:
        return [self.csr_path, self.ext_path]

    def san_extension(self) -> str:
        return (
            "authorityKeyIdentifier=keyid,issuer\n"
            "basicConstraints=CA:FALSE\n"
            "keyUsage = digitalSignature, nonRepudiation, keyEncipherment, dataEncipherment\n"
            "subjectAltName = @alt_names\n"
            "\n"
            "[alt_names]\n"
            f"DNS.1 = {self.domain}\n"
        )


class ProxySiteConfig(BaseModel):
    domain: constr(strip_whitespace=True, min_length=1, max_length=253)
    port: int = Field(..., gt=0, le=65535)
    listen_port: int = 80
    upstream_host: str = "127.0.0.1"
    timeout_seconds: int = PROXY_TIMEOUT_SECONDS

    @field_validator("domain")
    @classmethod
    def _check_domain(cls, value: str) -> str:
        return validate_domain_name(value)

    @property
    def upstream(self) -> str:
        return f"http://{self.upstream_host}:{self.port}"

    @property
    def file_name(self) -> str:
        return f"{self.domain}.conf"

    def render(self) -> str:
        timeout = f"{self.timeout_seconds}s"
        return f"""server {{
    listen {self.listen_port};
    server_name {self.domain};

    location / {{
        proxy_pass {self.upstream};
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_read_timeout {timeout};
        proxy_connect_timeout {timeout};
        proxy_send_timeout {timeout};
        proxy_set_header Upgrade $http_upgrade;
        proxy_set_header Connection 'upgrade';
        proxy_cache_bypass $http_upgrade;
    }}
}}
"""


class IssuanceSession(BaseModel):
    domain: constr(strip_whitespace=True, min_length=1)
    email: constr(strip_whitespace=True, min_length=1)
    challenge: Literal['dns'] = 'dns'
    ready: bool = False

    @field_validator("domain")
    @classmethod
    def _check_domain(cls, value: str) -> str:
        return validate_domain_name(value)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Please enter a valid email address")
        return value

    @property
    def challenge_record(self) -> str:
        return f"_acme-challenge.{self.domain}"


class HostProfile(BaseModel):
    platform: str
    is_wsl: bool = False
    is_root: bool = False
    privileged: bool = False
    package_manager: Optional[PackageManager] = None

    @property
    def supported(self) -> bool:
        return self.platform.startswith("linux")

    @property
    def privilege_prefix(self) -> List[str]:
        return [] if self.is_root else ["sudo"]
