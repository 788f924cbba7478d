"""SQLAlchemy Base with every model registered on its metadata."""
from civicdesk.models import Base  # noqa: F401  (imports all models)

__all__ = ["Base"]
