# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy for the password gate."""

from __future__ import annotations


class GateError(Exception):
    """Base class for every error raised by pwgate."""


class ConfigurationFault(GateError):
    """The signing key is missing or cannot be used to sign."""


class AuthenticationFailure(GateError):
    """The submitted password does not match the configured one."""


class MalformedRequest(GateError):
    """Missing or unparseable login input."""
