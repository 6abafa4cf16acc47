
import logging
from typing import Optional

from app.core.config import Settings
from app.core.exceptions import EmailDispatchError
from app.core.identity import IdentityProvider
from app.core.mailer import MailTransport
from app.schemas.user import VerificationResult


logger = logging.getLogger(__name__)


WELCOME_TEMPLATE = """<p>Hello,</p>
<p>Thanks for creating an account. Please verify your email by clicking the link below:</p>
<p><a href="{link}">Verify Email</a></p>
<p>If the link doesn't work, copy and paste the following URL into your browser:</p>
<pre>{link}</pre>
<p>Thanks,<br/>{brand} Team</p>"""

RESEND_TEMPLATE = """<p>Hello,</p>
<p>Please verify your email by clicking the link below:</p>
<p><a href="{link}">Verify Email</a></p>
<pre>{link}</pre>"""


class VerificationEmailService:
    """
    Dispatches email verification links.

    The link always comes from the identity provider. It is delivered through
    the mail transport when one is configured; otherwise it is logged so it
    can be used by hand during development.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        mailer: Optional[MailTransport],
        settings: Settings,
    ):
        self.identity = identity
        self.mailer = mailer
        self.settings = settings

    async def send_verification(self, email: str, uid: Optional[str] = None, resend: bool = False) -> VerificationResult:
        """
        Generate a verification link for ``email`` and deliver or log it.

        Args:
            email: Address to verify.
            uid: Provider uid of the account, used for logging only.
            resend: Use the shorter resend template instead of the welcome one.

        Returns:
            VerificationResult: ``logged``/``link`` are set when SMTP is not configured.

        Raises:
            AccountNotFound, ProviderError: If the link cannot be generated.
            EmailDispatchError: If the transport fails to send.
        """
        link = await self.identity.generate_verification_link(
            email, self.settings.verification_redirect_url
        )

        if self.mailer is None:
            logger.warning(f"[EMAIL] SMTP not configured. Verification link for {email}: {link}")
            return VerificationResult(success=True, logged=True, link=link)

        template = RESEND_TEMPLATE if resend else WELCOME_TEMPLATE
        try:
            message_id = await self.mailer.send(
                sender=self.settings.sender_address,
                recipient=email,
                subject=f"Verify your email for {self.settings.email_brand_name}",
                html=template.format(link=link, brand=self.settings.email_brand_name),
            )
        except Exception as e:
            logger.error(f"[EMAIL] Failed to send verification email to {email} (uid={uid}): {e}")
            raise EmailDispatchError("Unable to send verification email") from e

        logger.info(f"[EMAIL] Verification email sent to {email}: {message_id}")
        return VerificationResult(success=True)
