"""
Name Registry - Services Layer
===============================

Service Inventory:
    - NameService: input validation, upsert/get/list through a NameStore,
      SQLAlchemy error translation into StorageError
"""
