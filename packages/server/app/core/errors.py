"""
Domain exceptions and their HTTP rendering.

Services raise these; the handler registered by ``register_exception_handlers``
turns them into ``{"error": {"code", "message", "status"}}`` responses.
Storage-layer exceptions are never wrapped and surface as 500s.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

log = structlog.get_logger()


class KeeperError(Exception):
    """Base exception for Keeper."""

    code = "KEEPER_ERROR"
    message = "Unexpected error"
    status_code = 500
    # Validation outcomes the UI should present as normal feedback.
    expected = False

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class EmptyNameError(KeeperError):
    code = "EMPTY_NAME"
    message = "Name cannot be empty"
    status_code = 422
    expected = True


class SelfInviteError(KeeperError):
    code = "SELF_INVITE"
    message = "You cannot invite yourself"
    status_code = 422
    expected = True


class InvalidTransitionError(KeeperError):
    code = "INVALID_TRANSITION"
    message = "Status change not allowed"
    status_code = 422


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------

class DuplicateMembership(KeeperError):
    code = "DUPLICATE_MEMBERSHIP"
    message = "User is already a member of this organization"
    status_code = 409
    expected = True


class AlreadyMemberError(KeeperError):
    code = "ALREADY_MEMBER"
    message = "User is already a member of the organization"
    status_code = 409
    expected = True


class DuplicatePendingInviteError(KeeperError):
    code = "DUPLICATE_PENDING_INVITE"
    message = "There is already a pending invite for this email and organization"
    status_code = 409
    expected = True


class DuplicatePendingRequestError(KeeperError):
    code = "DUPLICATE_PENDING_REQUEST"
    message = "You already have a pending request for an organization with this name"
    status_code = 409
    expected = True


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

class InviteNotFound(KeeperError):
    code = "INVITE_NOT_FOUND"
    message = "Invite not found or already processed"
    status_code = 404


class InviteExpiredError(KeeperError):
    code = "INVITE_EXPIRED"
    message = "Invite has expired"
    status_code = 410
    expected = True


class OrgRequestNotFound(KeeperError):
    code = "ORG_REQUEST_NOT_FOUND"
    message = "Organization request not found"
    status_code = 404


class OrgNotFound(KeeperError):
    code = "ORG_NOT_FOUND"
    message = "Organization not found"
    status_code = 404


class ProfileNotFound(KeeperError):
    code = "PROFILE_NOT_FOUND"
    message = "Profile not found"
    status_code = 404


class NotificationNotFound(KeeperError):
    code = "NOTIFICATION_NOT_FOUND"
    message = "Notification not found"
    status_code = 404


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class AuthenticationError(KeeperError):
    code = "AUTHENTICATION_REQUIRED"
    message = "Authentication required"
    status_code = 401


class PermissionDenied(KeeperError):
    code = "PERMISSION_DENIED"
    message = "You do not have permission to perform this action"
    status_code = 403


def error_body(exc: KeeperError) -> dict:
    return {
        "error": {
            "code": exc.code,
            "message": exc.message,
            "status": exc.status_code,
        }
    }


def register_exception_handlers(app: FastAPI) -> None:
    """Register the KeeperError handler on the FastAPI app."""

    @app.exception_handler(KeeperError)
    async def keeper_error_handler(request: Request, exc: KeeperError):
        log_fn = log.info if exc.expected else log.warning
        log_fn(
            "request.rejected",
            code=exc.code,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))
