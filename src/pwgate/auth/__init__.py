# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Shared password comparison (single configured secret)
- Signed, expiring session tokens (PyJWT, HS256)
"""
