"""Typed application errors, mapped to HTTP responses in main.py"""


class AppError(Exception):
     """Base error carrying the HTTP status it should be reported with"""

     status_code = 500

     def __init__(self, message: str, status_code: int = None):
          if status_code is not None:
               self.status_code = status_code
          self.message = message
          super().__init__(message)


class BadRequestError(AppError):
     """Malformed identifier, missing field, invalid or expired code"""
     status_code = 400


class UnauthorizedError(AppError):
     """Caller is not allowed to act on the resource"""
     status_code = 401


class ForbiddenError(AppError):
     """Caller's role does not grant access to the route"""
     status_code = 403


class NotFoundError(AppError):
     status_code = 404


class ConflictError(AppError):
     """Duplicate unique field, or a write lost an optimistic-concurrency race"""
     status_code = 409


class TooManyRequestsError(AppError):
     """Code issuance rate limit reached"""
     status_code = 429
