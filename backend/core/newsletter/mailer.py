import json
from typing import Any, Dict, Iterable, List

import requests

from core.articles.content_format import format_content
from core.common.app_settings import settings
from core.common.log import logger


def mailer_configured() -> bool:
    return bool(settings.email_api_url and settings.email_api_key and settings.email_from)


def send_email(to: str, subject: str, html: str) -> bool:
    """通过 HTTP 邮件接口发送单封邮件

    参数:
    - to: 收件人
    - subject: 标题
    - html: HTML 正文，纯文本版本由 HTML 生成
    """
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.email_api_key}",
    }
    data: Dict[str, Any] = {
        "from": settings.email_from,
        "to": [to],
        "subject": subject,
        "html": html,
        "text": format_content(html, "text"),
    }
    try:
        response = requests.post(
            url=settings.email_api_url, headers=headers, data=json.dumps(data), timeout=15
        )
        if response.status_code >= 400:
            logger.error(f"邮件发送失败: {to} {response.status_code} {response.text}")
            return False
        return True
    except Exception as e:
        logger.error(f"邮件发送失败: {to} {e}")
        return False


def send_newsletter(recipients: Iterable[str], subject: str, html: str) -> Dict[str, Any]:
    """逐个发送（后台任务中执行），返回发送结果统计"""
    sent = 0
    failed: List[str] = []
    for email in recipients:
        if send_email(email, subject, html):
            sent += 1
        else:
            failed.append(email)
    logger.info(f"邮件推送完成: 成功 {sent} 封, 失败 {len(failed)} 封")
    return {"sent": sent, "failed": failed}
