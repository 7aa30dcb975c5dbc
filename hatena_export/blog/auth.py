"""
Request authenticators for the AtomPub API.

Each authenticator returns the headers to attach to one request:

- ``OAuth1Auth``: OAuth 1.0a with an HMAC-SHA1 signature over the method,
  URL and parameters (RFC 5849).
- ``WSSEAuth``: WSSE UsernameToken with a SHA-1 digest of nonce, creation
  time and password.
"""

import base64
import hashlib
import hmac
import secrets
import time
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional
from urllib.parse import urlparse, parse_qsl, quote


def percent_encode(value: str) -> str:
    """Percent-encode a string as required by RFC 5849 section 3.6."""
    return quote(value, safe="~")


class OAuth1Auth:
    """
    Signs requests with OAuth 1.0a (HMAC-SHA1).
    """

    SIGNATURE_METHOD = "HMAC-SHA1"

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        token: str,
        token_secret: str,
        realm: str = ""
    ):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.token = token
        self.token_secret = token_secret
        self.realm = realm

    def sign(self, text: str) -> str:
        """
        Compute the base64 HMAC-SHA1 signature of a signature base string.

        Args:
            text: Signature base string

        Returns:
            Base64-encoded signature
        """
        key = percent_encode(self.consumer_secret) + "&" + percent_encode(self.token_secret)
        digest = hmac.new(key.encode("utf-8"), text.encode("utf-8"), hashlib.sha1).digest()
        return base64.b64encode(digest).decode("ascii")

    @staticmethod
    def signature_base(method: str, url: str, params: Mapping[str, str]) -> str:
        """
        Build the signature base string of a request.

        Args:
            method: HTTP method
            url: Request URL; its query parameters are signed too
            params: OAuth and request parameters

        Returns:
            Signature base string
        """
        parsed = urlparse(url)
        pairs = [(percent_encode(k), percent_encode(v)) for k, v in parse_qsl(parsed.query)]
        pairs += [(percent_encode(k), percent_encode(v)) for k, v in params.items()]
        normalized = "&".join(f"{k}={v}" for k, v in sorted(pairs))

        base_url = f"{parsed.scheme.lower()}://{parsed.netloc.lower()}{parsed.path}"
        return "&".join([
            method.upper(),
            percent_encode(base_url),
            percent_encode(normalized),
        ])

    def headers(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, str]] = None,
        nonce: Optional[str] = None,
        timestamp: Optional[int] = None
    ) -> Dict[str, str]:
        oauth_params = {
            "oauth_consumer_key": self.consumer_key,
            "oauth_nonce": nonce or secrets.token_hex(16),
            "oauth_timestamp": str(timestamp if timestamp is not None else int(time.time())),
            "oauth_token": self.token,
            "oauth_signature_method": self.SIGNATURE_METHOD,
            "oauth_version": "1.0",
        }
        signed = dict(params or {})
        signed.update(oauth_params)
        oauth_params["oauth_signature"] = self.sign(self.signature_base(method, url, signed))

        fields = [f'realm="{percent_encode(self.realm)}"']
        fields += [
            f'{percent_encode(k)}="{percent_encode(v)}"'
            for k, v in sorted(oauth_params.items())
        ]
        return {"Authorization": "OAuth " + ", ".join(fields)}


class WSSEAuth:
    """
    Authenticates requests with an X-WSSE UsernameToken header.
    """

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def digest(self, nonce: bytes, created: str) -> str:
        token = nonce + created.encode("utf-8") + self.password.encode("utf-8")
        return base64.b64encode(hashlib.sha1(token).digest()).decode("ascii")

    def headers(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, str]] = None,
        nonce: Optional[bytes] = None,
        created: Optional[str] = None
    ) -> Dict[str, str]:
        nonce = nonce if nonce is not None else secrets.token_bytes(16)
        created = created or datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

        value = (
            f'UsernameToken Username="{self.username}", '
            f'PasswordDigest="{self.digest(nonce, created)}", '
            f'Nonce="{base64.b64encode(nonce).decode("ascii")}", '
            f'Created="{created}"'
        )
        return {"X-WSSE": value}
