from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

# In-memory storage; the remote address is only used as a bucket key and never persisted.
limiter = Limiter(key_func=get_remote_address)
