# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""Timestamps and identifiers for execution records."""

from __future__ import annotations

from datetime import datetime, timezone

from ulid import ULID


def utc_now_iso() -> str:
    """Current UTC time in second precision, e.g. ``2026-03-01T12:00:00Z``."""
    now = datetime.now(timezone.utc).replace(microsecond=0)
    return now.strftime("%Y-%m-%dT%H:%M:%SZ")


def generate_ulid() -> str:
    """Return a new execution id as a 26-character ULID string."""
    return str(ULID())
