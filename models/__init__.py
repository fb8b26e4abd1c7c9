"""
Persistence layer: SQLAlchemy models and the DBStorage engine/session wrapper.

DBStorage is instantiated by the application factory (api.extensions) and
handed to the stores and workflows; there is no module-level instance.
"""
from models.db_storage import DBStorage

__all__ = ["DBStorage"]
