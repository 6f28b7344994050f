"""
Declarative helpers for mapped entities: the `@table` class decorator and the
`column()` field factory.

Example:

    @table("users", unique_keys=[UniqueKey(["email"])])
    @dataclass
    class User:
        id: Optional[int] = column("id", primary_key=True, auto_increment=True)
        name: Optional[str] = column("name", length=50, nullable=False)
        email: Optional[str] = column("email", length=100, nullable=False)

`@table` must sit above `@dataclass` so it receives the finished dataclass.
"""

import dataclasses
from typing import Any, Callable, Iterable, TypeVar

from .inspection import columns_of
from .metadata import (
    COLUMN_METADATA_KEY,
    DEFAULT_CHARSET,
    DEFAULT_COLLATE,
    DEFAULT_ENGINE,
    DEFAULT_LENGTH,
    TABLE_ATTRIBUTE,
    Check,
    Column,
    ForeignKey,
    Table,
    UniqueKey,
)

EntityType = TypeVar("EntityType", bound=type)


def column(
    name: str,
    *,
    length: int = DEFAULT_LENGTH,
    nullable: bool = True,
    primary_key: bool = False,
    auto_increment: bool = False,
    default: Any = None,
    default_factory: Callable[[], Any] | None = None,
) -> Any:
    """
    Declare a dataclass field as a table column.

    The field defaults to None so an entity can be built without every value, which is
    also how rows with a database-assigned auto-increment key are saved.
    """
    info = Column(
        name=name,
        length=length,
        nullable=nullable,
        primary_key=primary_key,
        auto_increment=auto_increment,
    )
    metadata = {COLUMN_METADATA_KEY: info}
    if default_factory is not None:
        return dataclasses.field(default_factory=default_factory, metadata=metadata)
    return dataclasses.field(default=default, metadata=metadata)


def table(
    name: str,
    *,
    engine: str = DEFAULT_ENGINE,
    charset: str = DEFAULT_CHARSET,
    collate: str = DEFAULT_COLLATE,
    foreign_keys: Iterable[ForeignKey] = (),
    unique_keys: Iterable[UniqueKey] = (),
    checks: Iterable[Check] = (),
) -> Callable[[EntityType], EntityType]:
    """
    Class decorator that maps a dataclass to a table.

    Column types are resolved right away, so an unsupported field type fails when the
    class is defined rather than on first use. Constraint column references are checked
    later, by the schema deriver, because a foreign key may point at an entity that is
    declared further down the module.
    """
    info = Table(
        name=name,
        engine=engine,
        charset=charset,
        collate=collate,
        foreign_keys=tuple(foreign_keys),
        unique_keys=tuple(unique_keys),
        checks=tuple(checks),
    )

    def decorator(cls: EntityType) -> EntityType:
        setattr(cls, TABLE_ATTRIBUTE, info)
        try:
            columns_of(cls)
        except Exception:
            delattr(cls, TABLE_ATTRIBUTE)
            raise
        return cls

    return decorator
