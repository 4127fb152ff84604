from .settings_test import *  # noqa: F401,F403
from .settings import DATABASES as POSTGRES_DATABASES

# Runs the suite against the PostgreSQL database from settings.py, e.g.
# pytest --ds=config.settings_test_postgres
DATABASES = POSTGRES_DATABASES
