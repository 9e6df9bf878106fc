"""Operator-facing instructions. Informational text only."""

import sys
from typing import List, Optional

SUPPORTED_DISTRIBUTIONS = ["Ubuntu/Debian", "CentOS/RHEL", "Fedora"]

LETSENCRYPT_COMMUNITY_URL = "https://community.letsencrypt.org"


def ca_install_instructions(ca_cert_path: str, platform: Optional[str] = None) -> str:
    """How to trust the local CA on the current (or given) platform."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return f"""
1. Double-click the certificate file ({ca_cert_path})
2. Select "Install Certificate"
3. Choose "Local Machine" and click Next
4. Select "Place all certificates in the following store"
5. Click "Browse" and select "Trusted Root Certification Authorities"
6. Click "Next" and then "Finish"
"""
    if platform == "darwin":
        return f"""
1. Double-click the certificate file ({ca_cert_path})
2. It will be added to your Keychain
3. Open Keychain Access
4. Find the certificate (it will have the name you gave during creation)
5. Double-click on it
6. Expand the "Trust" section
7. Change "When using this certificate" to "Always Trust"
"""
    if platform.startswith("linux"):
        return f"""
The process varies by distribution:

For Ubuntu/Debian:
1. sudo cp {ca_cert_path} /usr/local/share/ca-certificates/myCA.crt
2. sudo update-ca-certificates

For Fedora/CentOS:
1. sudo cp {ca_cert_path} /etc/pki/ca-trust/source/anchors/myCA.crt
2. sudo update-ca-trust
"""
    return f"""
Please install the certificate ({ca_cert_path}) as a trusted root CA according to your operating system's instructions.
"""


def web_server_stanzas(domain: str, cert_path: str, key_path: str) -> str:
    return f"""
For Apache:
<VirtualHost *:443>
   ServerName {domain}
   DocumentRoot /path/to/site

   SSLEngine on
   SSLCertificateFile {cert_path}
   SSLCertificateKeyFile {key_path}
</VirtualHost>

For Nginx:
server {{
    listen 443 ssl;
    server_name {domain};

    ssl_certificate {cert_path};
    ssl_certificate_key {key_path};

    # Other SSL settings
    ssl_protocols TLSv1.2 TLSv1.3;
    ssl_prefer_server_ciphers on;

    # Rest of your server block
}}
"""


OPENSSL_INSTALL_HELP = """
On Windows:
  Install OpenSSL through a package like Git Bash or download from https://slproweb.com/products/Win32OpenSSL.html

On macOS:
  brew install openssl

On Linux:
  apt-get install openssl    # Debian/Ubuntu
  yum install openssl        # CentOS/RHEL
  pacman -S openssl          # Arch Linux
"""


def dns_challenge_instructions(record_name: str) -> List[str]:
    return [
        "1. You will be shown a TXT record value",
        "2. Add this as a TXT record in your DNS settings:",
        "   - Record Type: TXT",
        f"   - Record Name: {record_name}",
        "3. Wait 1-2 minutes for DNS propagation",
        "4. Press Enter in the certbot prompt to verify",
    ]


def reload_remediation(is_wsl: bool) -> List[str]:
    if is_wsl:
        return [
            "Please reload Nginx manually using one of these commands:",
            "1. sudo service nginx reload",
            "2. sudo /etc/init.d/nginx reload",
        ]
    return ["Please reload Nginx manually using: sudo systemctl reload nginx"]


def post_setup_notes(domain: str) -> List[str]:
    return [
        f"1. Certificates are stored under /etc/letsencrypt/live/{domain}/",
        "2. Certificates from a manual DNS challenge do not renew automatically;"
        " re-run 'ssl-cli setup-nginx' before they expire",
        f"3. To verify DNS records: dig +short TXT _acme-challenge.{domain}",
        f"4. To test HTTPS: curl -k https://{domain}",
    ]
