from .email import MailTransport

__all__ = ["MailTransport"]
