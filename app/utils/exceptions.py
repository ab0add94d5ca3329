"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Pre-configured HTTPException subclasses so services can raise domain errors
without specifying status codes at each call site.

Usage:
    from app.utils.exceptions import NotFoundError, LLMServiceError
    raise NotFoundError("Plan not found")
    raise LLMServiceError("Ollama returned an empty response")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    Raised when a requested resource (user, plan) does not exist.
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    Raised when sign-up uses an email that is already registered.
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 다른 사용자의 데이터 접근 시 사용.

    Raised when the authenticated user touches another user's plans or history.
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    Raised when authentication is missing, invalid, or expired.
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    Raised when the request is invalid beyond what Pydantic validation catches.
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class LLMServiceError(HTTPException):
    """502 Bad Gateway 예외 — LLM 호출 또는 응답 파싱 실패 시 사용.

    Raised when the Ollama server is unreachable, errors, or returns output
    from which no study plan / message JSON can be extracted.
    """

    def __init__(self, detail: str = "LLM service error") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
