"""Configuration for brubeck-statsd"""

import os

from dynaconf import Dynaconf, Validator

# Validators for brubeck settings.
_validators = [
    Validator("logging.format", is_in=["mozlog", "pretty"]),
    Validator("logging.level", is_in=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    Validator("logging.can_propagate", is_type_of=bool),
    Validator("metrics.prefix", is_type_of=str, must_exist=True),
    Validator("metrics.host", is_type_of=str, must_exist=True),
    Validator("metrics.disabled", is_type_of=bool),
    Validator("metrics.dev_logger", is_type_of=bool),
    # Sending real datagrams from a production deployment through the dev logger
    # would silently discard every metric.
    Validator("metrics.dev_logger", eq=False, env=["production"]),
]

# `root_path` = The package directory, so settings load from any working directory.
# `envvar_prefix` = Export envvars with `export BRUBECK_FOO=bar`.
# `settings_files` = Load these files in the order.
# `environments` = Enable layered environments such as `development`, `production`, `testing` etc.
# `env_switcher` = Switch environments by `export BRUBECK_ENV=production`. Default: `development`.
# `validators` = Define validators for brubeck settings.


def load_settings() -> Dynaconf:
    """Build the brubeck settings object."""
    return Dynaconf(
        root_path=os.path.dirname(__file__),
        envvar_prefix="BRUBECK",
        settings_files=[
            "configs/default.toml",
            "configs/development.toml",
            "configs/production.toml",
            "configs/testing.toml",
        ],
        environments=True,
        env_switcher="BRUBECK_ENV",
        validators=_validators,
    )


settings = load_settings()
