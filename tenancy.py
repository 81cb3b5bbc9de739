"""
Tenant resolution from the Host header.

    nike.aivenapilot.com   -> "nike"
    nike.localhost:3012    -> "nike"
    www.aivenapilot.com    -> None
    aivenapilot.com        -> None
    localhost:3012         -> None
"""

from typing import Optional

RESERVED_LABELS = ("www", "localhost")


def resolve_tenant(host: Optional[str], platform_name: str) -> Optional[str]:
    """Return the tenant slug for a host, or None for the main site."""
    if not host:
        return None
    parts = host.split(".")
    if len(parts) < 2:
        return None
    candidate = parts[0]
    if candidate in RESERVED_LABELS or candidate == platform_name:
        return None
    if not candidate:
        return None
    return candidate
