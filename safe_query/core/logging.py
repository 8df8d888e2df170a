import sys
from datetime import datetime
from typing import Any, Optional, Sequence

from safe_query.core.config import settings


# ═══════════════════════════════════════════════════════════════════════════════
# LOG FILTERING
# ═══════════════════════════════════════════════════════════════════════════════
# Only these scopes are shown at INFO level
# Everything else is gated behind DEBUG

INFO_SCOPES = {
    "SAFE-QUERY",   # Violation notifications
    "DB",           # Connection lifecycle
}

# DEBUG-only scopes (hidden by default)
DEBUG_SCOPES = {
    "METADATA",
    "THROTTLE",
    "POLICY",
}


# Check if DEBUG mode is enabled (SAFE_QUERY_DEBUG)
DEBUG_MODE = settings.debug


def log(scope: str, message: str, data: Any = None, collection: Optional[str] = None) -> None:
    """
    Unified logging function for safe-query.

    Only INFO_SCOPES are shown by default.
    Set SAFE_QUERY_DEBUG=true to see all scopes.
    """
    if not DEBUG_MODE and scope not in INFO_SCOPES:
        return

    timestamp = datetime.now().strftime("%H:%M:%S")
    prefix = f"[{timestamp}] [{scope}]"

    if collection:
        prefix += f" [{collection}]"

    print(f"{prefix} {message}")

    if data:
        print(f"  Data: {data}")

    sys.stdout.flush()


def log_violation(kind: str, collection: str, fields: Sequence[str], comment: Optional[str] = None) -> None:
    """
    Log a query violation on the SAFE-QUERY scope.
    """
    message = f"{kind} in {collection}: {', '.join(fields)}"
    if comment:
        message += f" (comment: {comment})"
    log("SAFE-QUERY", message)
