import os

DEFAULT_SERVICE_B_URL = "https://service-b-374419059356.us-east1.run.app"


class ServiceAConfig:
    """Runtime settings for service-a, read from the environment"""

    def __init__(self, service_b_url=DEFAULT_SERVICE_B_URL, environment="Production",
                 port=8080, log_level="INFO"):
        self.service_b_url = service_b_url.rstrip('/')
        self.environment = environment
        self.port = port
        self.log_level = log_level.upper()

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        return cls(
            service_b_url=env.get('SERVICE_B_URL') or DEFAULT_SERVICE_B_URL,
            environment=env.get('APP_ENV', 'Production'),
            port=int(env.get('PORT', '8080')),
            log_level=env.get('LOG_LEVEL', 'INFO'),
        )

    @property
    def is_production(self):
        return self.environment.strip().lower() == 'production'

    @property
    def roll_dice_url(self):
        return f"{self.service_b_url}/RollDice"
