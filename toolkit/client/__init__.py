"""Outbound HTTP helpers.

Notes:
- No default timeout; callers pass one suited to the remote.
"""

from .push import default_opener, push_json_to_remote  # noqa: F401
