from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import the models so they are registered on Base
from clientdash.models import user, client, password_reset  # noqa: E402,F401
