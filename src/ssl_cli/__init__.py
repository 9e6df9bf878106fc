"""Local CA, domain certificate and nginx/certbot setup orchestration."""

__version__ = "1.0.0"
