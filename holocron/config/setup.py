from cachetools import cached
from dotenv import find_dotenv, load_dotenv

from holocron.config.logger import logging_setup
from holocron.config.settings import apply_env_overrides


@cached(cache={})
def setup():
    """
    One-time setup of environment and logging. Idempotent.
    """

    api_setup()

    apply_env_overrides()

    logging_setup()


def api_setup() -> str | None:
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)
    return dotenv_path
