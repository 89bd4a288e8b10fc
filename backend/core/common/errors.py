"""业务异常快捷构造：统一使用 HTTPException + error_response 结构。"""

from fastapi import HTTPException, status

from schemas.base import error_response


def bad_request(message: str, code: int = 40001) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_response(code=code, message=message),
    )


def unauthorized(message: str = "Not authenticated", code: int = 40101) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=error_response(code=code, message=message),
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(message: str = "Permission denied", code: int = 40301) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=error_response(code=code, message=message),
    )


def not_found(message: str, code: int = 40401) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error_response(code=code, message=message),
    )


def conflict(message: str, code: int = 40901) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=error_response(code=code, message=message),
    )


def too_many_requests(message: str, code: int = 42901) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=error_response(code=code, message=message),
    )


def internal_error(message: str, code: int = 50001) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error_response(code=code, message=message),
    )
