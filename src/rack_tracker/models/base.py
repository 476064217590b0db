"""
Base class for the SQLAlchemy models.

Only the SQL store backend maps tables; items and transactions themselves
are plain records moved through the store adapter.
"""

from sqlalchemy.orm import declarative_base

# Create the declarative base for all models
Base = declarative_base()
