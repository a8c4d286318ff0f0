# orderledger/db/base.py

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# IMPORTANT: import all model modules so they register with Base.metadata.

from orderledger.db import models  # noqa: F401,E402  (imported for side-effects)
