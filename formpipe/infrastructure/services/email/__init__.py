from .logging_transport import LoggingMailTransport
from .smtp_transport import SmtpMailTransport, create_mail_transport

__all__ = ["LoggingMailTransport", "SmtpMailTransport", "create_mail_transport"]
