"""
Request signing for the Scribd REST API.

The service verifies ``api_sig`` as MD5(secret + sorted key/value pairs),
where the pairs include the method name and exclude the uploaded file.
"""

import hashlib
from typing import Mapping, Optional, Union

from .constants import PARAM_FILE, PARAM_METHOD, SIGNATURE_ENCODING
from .exceptions import ConfigurationError


def secret_to_bytes(secret: Optional[Union[str, bytes]]) -> Optional[bytes]:
    """Normalize a secret key to bytes, keeping ``None`` as ``None``."""
    if secret is None:
        return None
    if isinstance(secret, str):
        return secret.encode(SIGNATURE_ENCODING)
    return bytes(secret)


def signature_source(method: str, params: Mapping[str, str]) -> str:
    """
    Build the canonical string that gets hashed.

    Args:
        method: REST method name, e.g. "docs.getSettings"
        params: Request parameters

    Returns:
        Keys and values concatenated in sorted key order, no separators
    """
    pairs = {key: str(value) for key, value in params.items() if key != PARAM_FILE}
    pairs[PARAM_METHOD] = method

    return "".join(key + pairs[key] for key in sorted(pairs))


def sign(method: str, params: Mapping[str, str],
         secret: Optional[Union[str, bytes]]) -> str:
    """
    Generate the api_sig value for a request.

    Args:
        method: REST method name
        params: Request parameters (the "file" parameter is ignored)
        secret: Shared secret as given by Scribd

    Returns:
        32 character lowercase hex MD5 digest

    Raises:
        ConfigurationError: If no secret is available
    """
    key = secret_to_bytes(secret)
    if not key:
        raise ConfigurationError("secret key is required to sign requests")

    data = signature_source(method, params).encode(SIGNATURE_ENCODING)

    # Secret first, then the parameter bytes
    return hashlib.md5(key + data).hexdigest()
