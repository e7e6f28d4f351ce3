"""
Identity tokens from the Cloud Run metadata server.

A token is requested per call and scoped to a single audience (the base URL
of the service being called). Nothing is cached.
"""
import logging
import os

import requests

logger = logging.getLogger(__name__)

METADATA_IDENTITY_URL = (
    "http://metadata.google.internal/computeMetadata/v1/"
    "instance/service-accounts/default/identity"
)
METADATA_HEADERS = {"Metadata-Flavor": "Google"}


def ensure_success_status(response):
    """Raise HTTPError unless the status is 2xx (raise_for_status lets 3xx through)"""
    response.raise_for_status()
    if not 200 <= response.status_code < 300:
        raise requests.HTTPError(
            f"{response.status_code} Non-success status for url: {response.url}",
            response=response,
        )


class CloudRunPlatform:
    """Describes whether this process runs inside Cloud Run"""

    def __init__(self, service=None, revision=None):
        self.service = service
        self.revision = revision

    @classmethod
    def from_env(cls, environ=None):
        """Build from the K_SERVICE / K_REVISION markers Cloud Run sets"""
        env = os.environ if environ is None else environ
        return cls(service=env.get('K_SERVICE'), revision=env.get('K_REVISION'))

    @property
    def is_managed(self):
        return bool(self.service) and bool(self.revision)


class IdentityTokenProvider:
    def __init__(self, platform, session_factory=requests.Session):
        self.platform = platform
        self.session_factory = session_factory

    def fetch_id_token(self, audience):
        """Return an ID token for `audience`, or None if one can't be had.

        Outside Cloud Run no request is made. Errors from the metadata server
        are logged and turned into None, the caller carries on without a token.
        """
        if not self.platform.is_managed:
            logger.debug("Not running in Cloud Run environment. Skipping ID token retrieval.")
            return None

        try:
            with self.session_factory() as session:
                response = session.get(
                    METADATA_IDENTITY_URL,
                    params={"audience": audience},
                    headers=METADATA_HEADERS,
                )
                ensure_success_status(response)
                token = response.text
        except requests.RequestException as e:
            logger.error(f"❌ Error retrieving ID token from metadata server: {e}")
            return None

        # A padded token can't go into an Authorization header
        if not token or token != token.strip():
            logger.error("❌ Metadata server returned an empty or malformed ID token")
            return None

        logger.debug(f"Retrieved ID token for audience {audience}")
        return token
