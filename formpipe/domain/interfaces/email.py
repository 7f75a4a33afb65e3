"""Mail transport interface.

The admission pipeline ends with a vetted payload; delivering it is owned by a
MailTransport implementation in the infrastructure layer. The domain depends
only on this abstraction.
"""

from abc import ABC, abstractmethod


class MailTransport(ABC):
    """Contract for delivering one composed message.

    Implementations raise `MailTransportError` when delivery fails; they never
    return a failure flag.
    """

    name: str = "abstract"

    @abstractmethod
    async def send(
        self,
        from_address: str,
        to_address: str,
        reply_to: str,
        subject: str,
        html_body: str,
        plain_text_body: str,
    ) -> None:
        """Send one message.

        Args:
            from_address: Sender address
            to_address: Recipient address
            reply_to: Address replies should go to (the submitter)
            subject: Message subject
            html_body: HTML body
            plain_text_body: Plain text alternative

        Raises:
            MailTransportError: If the message could not be delivered
        """
