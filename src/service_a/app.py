# Service A: rolls the dice on service-b, authenticated with a Cloud Run ID token
import logging

import requests
from flask import Flask, jsonify

from .config import ServiceAConfig
from .identity import CloudRunPlatform, IdentityTokenProvider, ensure_success_status

config = ServiceAConfig.from_env()

# Configure logging
logging.basicConfig(level=config.log_level, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)

PLAIN_TEXT = {'Content-Type': 'text/plain; charset=utf-8'}


def create_app(config=None, token_provider=None, session_factory=requests.Session):
    """Build the service-a Flask app.

    The token provider and the factory for the requests session used to call
    service-b can be passed in. A fresh session is opened for every inbound
    request, so nothing (cookies included) leaks from one request to the next.
    """
    config = config or ServiceAConfig.from_env()
    if token_provider is None:
        token_provider = IdentityTokenProvider(CloudRunPlatform.from_env())

    app = Flask(__name__)

    @app.route('/')
    def call_service_b():
        """Call service-b's /RollDice and relay what it returned"""
        logger.debug(f"service-a: Invoking service-b at {config.roll_dice_url} ...")

        try:
            headers = {}
            id_token = token_provider.fetch_id_token(config.service_b_url)

            if id_token:
                headers['Authorization'] = f"Bearer {id_token}"
                logger.debug("service-a: Attached Authorization: Bearer token to request for service-b.")
            elif config.is_production:
                logger.warning("⚠️ service-a: Could not retrieve ID token. "
                               "service-b call will fail if it requires authentication.")

            with session_factory() as session:
                response = session.get(config.roll_dice_url, headers=headers)
                ensure_success_status(response)
                body = response.text

            logger.info(f"✅ service-a: service-b answered {body!r}")
            return f'service-a received from service-b: "{body}"', 200, PLAIN_TEXT

        except requests.RequestException as e:
            logger.error(f"❌ service-a: Error invoking service-b: {e}")
            return f"Error communicating with service-b: {e}", 500, PLAIN_TEXT

        except Exception as e:
            logger.exception(f"🚨 service-a: An unexpected error occurred: {e}")
            return f"An unexpected error occurred: {e}", 500, PLAIN_TEXT

    @app.route('/health')
    def health_check():
        """Health check for Kubernetes / Cloud Run probes"""
        return jsonify({
            "status": "healthy",
            "service": "service-a",
            "service_b_url": config.service_b_url,
            "environment": config.environment,
        })

    return app


app = create_app(config)


def main():
    logger.info(f"Starting service-a on port {config.port}, calling {config.service_b_url}")
    app.run(host='0.0.0.0', port=config.port, debug=False)


if __name__ == "__main__":
    main()
