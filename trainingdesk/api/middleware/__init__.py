# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

Exports:
    AuthMiddleware: JWT authentication middleware.
    CurrentUser: Authenticated user built from the token payload.
    get_current_user: Read the user from request state.
"""

from trainingdesk.api.middleware.auth import AuthMiddleware, CurrentUser, get_current_user

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "get_current_user",
]
