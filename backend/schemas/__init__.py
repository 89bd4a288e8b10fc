from schemas.base import (
    ApiModel,
    success_response,
    error_response,
    paginated_response,
    serialize,
    serialize_many,
)


__all__ = [
    "ApiModel",
    "success_response",
    "error_response",
    "paginated_response",
    "serialize",
    "serialize_many",
]
