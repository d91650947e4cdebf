# ==============================================
# CONNECTION
# ==============================================
#
# The handle an authenticated session provides:
# instance URL, session id, API version, HTTP session.
#
# Modules:
# --------
# - connection.py    → Connection
#
# ==============================================

from .connection import Connection

__all__ = [
    "Connection"
]
