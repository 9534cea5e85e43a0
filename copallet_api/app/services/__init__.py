"""
Business logic layer.

Each service class groups the operations of one domain behind async
classmethods.  Services open their own SQLite connection, raise
``ValueError`` for domain errors and return Pydantic read models; the
HTTP layer translates errors into status codes.
"""
