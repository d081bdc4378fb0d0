"""
Email Sender Interface (IEmailSender)

Delivers one-time passwords. Customers and admins use separate senders
(transactional email API and SMTP respectively), both behind this
contract.
"""

from abc import ABC, abstractmethod


class IEmailSender(ABC):
    """Abstract interface for OTP email delivery."""

    @abstractmethod
    async def send_otp(self, to: str, code: str) -> None:
        """
        Send ``code`` to ``to``.

        Args:
            to: Recipient address
            code: Six-digit one-time password

        Raises:
            EmailDeliveryError: If the provider rejects or cannot take the message
        """
        pass
