# AGPL-3.0 License

"""
HTTP Signatures verification for requests Drone sends to extensions.

Drone signs each request with an HMAC over a set of headers (usually the
date and a SHA-256 digest of the body) using the secret shared with the
extension.
"""

import base64
import hashlib
import hmac
import re
from typing import Dict, Mapping, Optional

SUPPORTED_ALGORITHMS = {
    "hmac-sha256": hashlib.sha256,
    "hmac-sha512": hashlib.sha512,
}

_PARAM = re.compile(r'(\w+)="([^"]*)"')


def parse_signature_header(headers: Mapping[str, str]) -> Optional[Dict[str, str]]:
    """
    Read the signature parameters from the Signature or Authorization header.

    Returns:
        The parameters (keyId, algorithm, headers, signature), None when absent
    """
    value = headers.get("signature")
    if not value:
        authorization = headers.get("authorization", "")
        if not authorization.lower().startswith("signature "):
            return None
        value = authorization[len("signature "):]

    params = dict(_PARAM.findall(value))
    if "signature" not in params:
        return None
    return params


def _signing_string(method: str, path: str, headers: Mapping[str, str], names: str) -> Optional[str]:
    lines = []
    for name in names.lower().split():
        if name == "(request-target)":
            lines.append(f"{name}: {method.lower()} {path}")
            continue
        value = headers.get(name)
        if value is None:
            return None
        lines.append(f"{name}: {value}")
    return "\n".join(lines)


def _digest_matches(digest: str, body: bytes) -> bool:
    algorithm, _, encoded = digest.partition("=")
    if algorithm.upper() != "SHA-256":
        return False
    expected = base64.b64encode(hashlib.sha256(body).digest()).decode()
    return hmac.compare_digest(encoded.encode(), expected.encode())


def verify_signature(method: str, path: str, headers: Mapping[str, str], body: bytes, secret: str) -> bool:
    """
    Check that a request was signed with the shared secret.

    Args:
        method: HTTP method of the request
        path: Request path, including the query string
        headers: Request headers, looked up by lower-case name
        body: Raw request body
        secret: Shared secret

    Returns:
        True when the signature and, if sent, the body digest are valid
    """
    params = parse_signature_header(headers)
    if params is None:
        return False

    hash_function = SUPPORTED_ALGORITHMS.get(params.get("algorithm", "hmac-sha256").lower())
    if hash_function is None:
        return False

    signing_string = _signing_string(method, path, headers, params.get("headers", "date"))
    if signing_string is None:
        return False

    expected = base64.b64encode(
        hmac.new(secret.encode(), signing_string.encode(), hash_function).digest()
    ).decode()
    if not hmac.compare_digest(params["signature"].encode(), expected.encode()):
        return False

    digest = headers.get("digest")
    if digest is not None and not _digest_matches(digest, body):
        return False
    return True
