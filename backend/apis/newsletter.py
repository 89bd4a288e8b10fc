from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.concurrency import run_in_threadpool

from core.audit import record_audit
from core.auth import require_permission
from core.common.errors import bad_request, internal_error
from core.common.log import logger
from core.newsletter import mailer_configured, send_email, send_newsletter
from core.readers import ReaderStatus, reader_repo
from core.users.permissions import can_send_newsletter
from schemas import success_response
from schemas.misc import NewsletterRequest


router = APIRouter(prefix="/newsletter", tags=["邮件推送"])

require_newsletter = require_permission(can_send_newsletter)


def _ensure_mailer():
    if not mailer_configured():
        raise bad_request("Email delivery is not configured")


@router.post("/test", summary="发送测试邮件")
async def send_test(body: NewsletterRequest, current_user: dict = Depends(require_newsletter)):
    _ensure_mailer()
    ok = await run_in_threadpool(
        send_email, current_user["email"], f"[TEST] {body.subject}", body.html
    )
    if not ok:
        raise internal_error("Failed to send test email")
    return success_response({"to": current_user["email"]}, message="Test email sent")


@router.post("/send", summary="群发邮件")
async def send(
    body: NewsletterRequest,
    background_tasks: BackgroundTasks,
    current_user: dict = Depends(require_newsletter),
):
    _ensure_mailer()
    rows = await reader_repo.get_all_readers(
        {"is_subscriber": True, "status": ReaderStatus.ACTIVE.value}
    )
    recipients = sorted({r["email"] for r in rows if r.get("email")})
    if not recipients:
        raise bad_request("There are no active subscribers")

    background_tasks.add_task(send_newsletter, recipients, body.subject, body.html)
    logger.info(f"邮件推送已排队: {body.subject} -> {len(recipients)} 人")
    await record_audit(
        "send", "newsletter", None, body.subject, current_user,
        {"recipients": len(recipients)},
    )
    return success_response(
        {"recipients": len(recipients)},
        message=f"Newsletter queued for {len(recipients)} subscribers",
    )
