# /app/db/base_class.py

from sqlalchemy.orm import declarative_base, declared_attr


class _Base:
    """Derives a snake_case plural table name when a model does not set one."""

    @declared_attr
    def __tablename__(cls) -> str:
        name = "".join(f"_{c.lower()}" if c.isupper() else c for c in cls.__name__).lstrip("_")
        return f"{name}s"


Base = declarative_base(cls=_Base)
