import logging
import os
import random
import time

from flask import Flask, jsonify


class ServiceBConfig:
    def __init__(self, port=8080, roll_delay_seconds=1.0, log_level="INFO"):
        self.port = port
        self.roll_delay_seconds = roll_delay_seconds
        self.log_level = log_level.upper()

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        return cls(
            port=int(env.get('PORT', '8080')),
            roll_delay_seconds=float(env.get('ROLL_DELAY_SECONDS', '1.0')),
            log_level=env.get('LOG_LEVEL', 'INFO'),
        )


config = ServiceBConfig.from_env()

# Configure logging
logging.basicConfig(level=config.log_level, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)


class DiceRoller:
    """Simulates a slow unit of work that ends in a random number"""

    LOW = 100
    HIGH = 1000  # exclusive

    def __init__(self, delay_seconds=1.0, rng=None, sleep=time.sleep):
        self.delay_seconds = delay_seconds
        self.rng = rng if rng is not None else random.Random()
        self.sleep = sleep

    def roll(self):
        logger.info(f"In service-b.RollDice, sleeping for {self.delay_seconds:g} seconds before rolling the dice...")
        self.sleep(self.delay_seconds)

        number = self.rng.randrange(self.LOW, self.HIGH)
        logger.info(f"🎲 Returning '{number}'")
        return number


def create_app(config=None, roller=None):
    config = config or ServiceBConfig.from_env()
    roller = roller or DiceRoller(delay_seconds=config.roll_delay_seconds)

    app = Flask(__name__)

    @app.route('/RollDice')
    def roll_dice():
        """Roll the dice, answer with the number as plain text"""
        return str(roller.roll()), 200, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.route('/health')
    def health_check():
        """Health check for Kubernetes / Cloud Run probes"""
        return jsonify({"status": "healthy", "service": "service-b"})

    return app


app = create_app(config)


def main():
    # Cloud Run tells us which port to listen on through PORT
    logger.info(f"Starting service-b on 0.0.0.0:{config.port}")
    app.run(host='0.0.0.0', port=config.port, debug=False)


if __name__ == "__main__":
    main()
