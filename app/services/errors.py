from __future__ import annotations


class InterviewServiceError(RuntimeError):
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class Unauthorized(InterviewServiceError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)


class UserNotFound(InterviewServiceError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message, status_code=404)


class PersistenceFailure(InterviewServiceError):
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
