from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apis.article import router as article_router
from apis.audit import router as audit_router
from apis.auth import router as auth_router
from apis.category import router as category_router
from apis.comment import router as comment_router
from apis.config import router as config_router
from apis.homepage import router as homepage_router
from apis.lifecycle import router as lifecycle_router
from apis.newsletter import router as newsletter_router
from apis.reader import router as reader_router
from apis.subscriber import router as subscriber_router
from apis.tags import router as tags_router
from apis.upload import router as upload_router
from apis.user import router as user_router
from core.common.app_settings import settings
from core.common.base import API_BASE, VERSION
from core.common.log import logger
from schemas import error_response

SECURITY_HEADERS = {
    "X-DNS-Prefetch-Control": "on",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}

app = FastAPI(
    title=settings.app_name,
    description="Newsroom CMS API",
    version=VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for key, value in SECURITY_HEADERS.items():
        response.headers.setdefault(key, value)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """把 detail 展开到响应顶层，前端直接读取 message"""
    if isinstance(exc.detail, dict):
        body = exc.detail
    else:
        body = error_response(code=exc.status_code * 100 + 1, message=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"][1:])
        errors.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(
        status_code=422,
        content=error_response(code=40001, message="; ".join(errors) or "Invalid request"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"未处理的异常: {request.method} {request.url.path} {exc}")
    return JSONResponse(
        status_code=500,
        content=error_response(code=50001, message="Internal server error"),
        headers=SECURITY_HEADERS,
    )


api_router = APIRouter(prefix=API_BASE)
api_router.include_router(auth_router)
api_router.include_router(article_router)
api_router.include_router(category_router)
api_router.include_router(tags_router)
api_router.include_router(user_router)
api_router.include_router(reader_router)
api_router.include_router(subscriber_router)
api_router.include_router(comment_router)
api_router.include_router(homepage_router)
api_router.include_router(config_router)
api_router.include_router(upload_router)
api_router.include_router(newsletter_router)
api_router.include_router(audit_router)
api_router.include_router(lifecycle_router)
app.include_router(api_router)


@app.get("/", include_in_schema=False)
async def health():
    return {"success": True, "message": f"{settings.app_name} API is running", "version": VERSION}
