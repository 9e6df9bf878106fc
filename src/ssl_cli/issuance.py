import logging
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, ValidationError
from .response import ResponseWrapper, ResponseType, ErrorKind
from .utils import CommandRunner, run_command, first_validation_error
from .models import HostProfile, IssuanceSession
from .commands import CertbotCommandBuilder
from .guidance import dns_challenge_instructions, LETSENCRYPT_COMMUNITY_URL
from .prompts import ConfirmationProvider

logger = logging.getLogger(__name__)

LETSENCRYPT_LIVE_DIR = "/etc/letsencrypt/live"


class IssuanceState(str, Enum):
    COLLECT_EMAIL = "collect_email"
    SHOW_CHALLENGE_INSTRUCTIONS = "show_challenge_instructions"
    CONFIRM_READY = "confirm_ready"
    ISSUE = "issue"
    SUCCESS = "success"
    FAILURE = "failure"


def validate_email(value: str) -> Optional[str]:
    if not value:
        return "Email is required for certificate notifications"
    if "@" not in value:
        return "Please enter a valid email address"
    return None


class CertbotIssuer(BaseModel):
    """Runs certbot's manual DNS-01 issuance for a single domain."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    runner: CommandRunner = run_command

    def _enter(self, state: IssuanceState) -> IssuanceState:
        logger.debug("Issuance state: %s", state.value)
        return state

    def run_issuance(self, domain: str, prompts: ConfirmationProvider, profile: HostProfile) -> ResponseType:
        """Collect an email, show the DNS challenge, confirm and run certbot.

        The TXT record is created by the operator and never verified here;
        certbot's exit status alone decides success. There is no retry.

        Args:
            domain: Domain to request a certificate for
            prompts: Collects the email and the readiness confirmation
            profile: Resolved host profile, for the privilege prefix

        Returns:
            SuccessResponse (cancelled if the operator is not ready) or an
            ErrorResponse pointing at community support
        """
        self._enter(IssuanceState.COLLECT_EMAIL)
        email = prompts.ask("Enter email address for certificate notifications:", validate=validate_email)
        try:
            session = IssuanceSession(domain=domain, email=email)
        except ValidationError as e:
            self._enter(IssuanceState.FAILURE)
            return ResponseWrapper.error_response(
                first_validation_error(e), kind=ErrorKind.VALIDATION_FAILURE, stage="issuance input")

        self._enter(IssuanceState.SHOW_CHALLENGE_INSTRUCTIONS)
        prompts.notify("DNS Verification Required")
        for line in dns_challenge_instructions(session.challenge_record):
            prompts.notify(line)

        self._enter(IssuanceState.CONFIRM_READY)
        session.ready = prompts.confirm("Are you ready to proceed with certificate generation?", default=True)
        if not session.ready:
            self._enter(IssuanceState.FAILURE)
            return ResponseWrapper.cancelled_response("Certificate generation cancelled")

        self._enter(IssuanceState.ISSUE)
        result = self.runner(CertbotCommandBuilder.build_manual_dns_command(profile, session.domain, session.email))
        if not result.success:
            self._enter(IssuanceState.FAILURE)
            result.error = f"{result.error}\nNeed help? Visit: {LETSENCRYPT_COMMUNITY_URL}"
            return result.at_stage("certificate issuance")

        self._enter(IssuanceState.SUCCESS)
        return ResponseWrapper.success_response(
            "Your SSL certificate is ready to use!",
            {
                "domain": session.domain,
                "email": session.email,
                "challenge_record": session.challenge_record,
                "certificate_dir": f"{LETSENCRYPT_LIVE_DIR}/{session.domain}",
            }
        )
