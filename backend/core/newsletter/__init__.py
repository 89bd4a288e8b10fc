"""邮件推送模块。"""

from core.newsletter.mailer import mailer_configured, send_email, send_newsletter

__all__ = ["mailer_configured", "send_email", "send_newsletter"]
