"""
Persistence layer: the global DBStorage instance shared by the API.

The engine is bound later by ``storage.reload(database_url)``, which the
application factory calls with the configured DATABASE_URL.
"""
from models.db_storage import DBStorage

storage = DBStorage()
