"""SQLAlchemy table definitions.

Both tables map an opaque key to an opaque JSON text blob.
"""

from sqlalchemy import Column, MetaData, String, Table, Text

metadata = MetaData()

# ============================================================================
# AUTH STATE TABLE (in-flight authorization attempts, keyed by flow id)
# ============================================================================
auth_state_table = Table(
    "auth_state",
    metadata,
    Column("key", String(255), primary_key=True),
    Column("state", Text, nullable=False),
)

# ============================================================================
# AUTH SESSION TABLE (renewable credentials, keyed by subject DID)
# ============================================================================
auth_session_table = Table(
    "auth_session",
    metadata,
    Column("key", String(2048), primary_key=True),
    Column("session", Text, nullable=False),
)
