import re
from typing import Any, List, Sequence

SECRET_MARKER = "* SECRET *"

_CREDENTIAL_PATTERNS = [
    (re.compile(r"\b(password|pwd)\s*=\s*[^\s,)]+", re.IGNORECASE), r"\1=*****"),
    (re.compile(r"\b(aws_access_key_id|aws_secret_access_key|aws_session_token)\s*=\s*[^\s,)]+", re.IGNORECASE), r"\1=*****"),
    (re.compile(r"\b(jdbc|postgresql|redshift):[^;\s]+"), r"\1:*****"),
]

def _sanitize_log_message(message: str) -> str:
    """Mask credentials and connection strings in a driver error message."""
    for pattern, replacement in _CREDENTIAL_PATTERNS:
        message = pattern.sub(replacement, message)
    return message

def flatten(args: Sequence[Any]) -> List[Any]:
    """Expand list and tuple arguments into individual bind values.
    Args:
        args: Positional query arguments, possibly holding lists for IN clauses
    Returns:
        List[Any]: One element per placeholder
    """
    result = []
    for arg in args:
        if isinstance(arg, (list, tuple)):
            result.extend(arg)
        else:
            result.append(arg)
    return result

def format_value(value: Any) -> str:
    """Render a bound value the way it reads in Python source, e.g. strings quoted."""
    return repr(value)

def mask_arguments(args: Sequence[Any], mask_indices: Sequence[int]) -> List[str]:
    """Render bound values, replacing the ones at ``mask_indices`` with the secret marker.
    Args:
        args: Bound values in placeholder order
        mask_indices: Ascending argument positions to redact
    Returns:
        List[str]: Rendered values, one per argument
    """
    pending = list(mask_indices)
    values = []
    for i, arg in enumerate(args):
        if pending and pending[0] == i:
            values.append(SECRET_MARKER)
            pending.pop(0)
        else:
            values.append(format_value(arg))
    return values
