"""Entity registry for polymorphic references.

Vote rows point at voters and subjects through a (type, key) pair. The
registry resolves a type discriminator to the concrete entity class, its
table and its key attribute, so no dynamic class lookup is needed.

Usage:
    registry = get_registry()
    registry.register("user", User, users_table)
    registry.register("post", Post, posts_table)
"""

from typing import Any, Optional

import logfire
from sqlalchemy import Column, Table

from voting.domain.error import UnregisteredEntityError
from voting.domain.value import VoteableRef
from voting.domain.value.common import ValueObject


class RegisteredEntity(ValueObject):
    """A registered entity type."""

    type_name: str
    model: type
    table: Table
    key: str = "id"

    @property
    def key_column(self) -> Column:
        """Primary key column of the entity table."""
        return self.table.c[self.key]

    def key_of(self, entity: Any) -> Any:
        """Primary key value of an entity instance."""
        return getattr(entity, self.key)

    def coerce_key(self, value: Any) -> Any:
        """Convert a stored key back to the type of the key column.

        Subject keys are stored as text in the vote table.
        """
        try:
            python_type = self.key_column.type.python_type
        except NotImplementedError:
            return value
        if value is None or isinstance(value, python_type):
            return value
        return python_type(value)

    def is_instance(self, entity: Any) -> bool:
        """Whether the object is an instance of this entity type."""
        return isinstance(entity, self.model)


class EntityRegistry:
    """Maps type discriminators to registered entities."""

    def __init__(self) -> None:
        self._entities: dict[str, RegisteredEntity] = {}

    def register(
        self, type_name: str, model: type, table: Table, key: str = "id"
    ) -> RegisteredEntity:
        """Register an entity type.

        Registering the same type name again with the same model is a no-op.

        Args:
            type_name: Discriminator stored in the ``*_type`` columns
            model: Entity class whose instances carry the key attribute
            table: Table the entity is stored in
            key: Primary key attribute and column name

        Returns:
            The registered entity

        Raises:
            ValueError: If the type name is taken by another model or the
                table has no such key column
        """
        existing = self._entities.get(type_name)
        if existing is not None:
            if existing.model is not model:
                raise ValueError(
                    f"Type {type_name} is already registered to {existing.model.__name__}"
                )
            return existing

        if key not in table.c:
            raise ValueError(f"Table {table.name} has no key column {key}")

        entity = RegisteredEntity(type_name=type_name, model=model, table=table, key=key)
        self._entities[type_name] = entity
        logfire.debug("Entity registered", type_name=type_name, table=table.name)
        return entity

    def entity(self, type_name: str) -> RegisteredEntity:
        """Look up a registered entity by type name.

        Raises:
            UnregisteredEntityError: If the type name is unknown
        """
        try:
            return self._entities[type_name]
        except KeyError:
            raise UnregisteredEntityError(type_name) from None

    def find(self, obj: Any) -> Optional[RegisteredEntity]:
        """Find the registered entity an object is an instance of.

        Exact class matches win over subclass matches.
        """
        for entity in self._entities.values():
            if type(obj) is entity.model:
                return entity
        for entity in self._entities.values():
            if entity.is_instance(obj):
                return entity
        return None

    def type_of(self, obj: Any) -> str:
        """Type discriminator of an entity instance.

        Raises:
            UnregisteredEntityError: If the object's class is not registered
        """
        entity = self.find(obj)
        if entity is None:
            raise UnregisteredEntityError(type(obj).__name__)
        return entity.type_name

    def key_of(self, obj: Any) -> Any:
        """Primary key of an entity instance.

        Raises:
            UnregisteredEntityError: If the object's class is not registered
        """
        entity = self.find(obj)
        if entity is None:
            raise UnregisteredEntityError(type(obj).__name__)
        return entity.key_of(obj)

    def ref_of(self, obj: Any) -> VoteableRef:
        """Polymorphic reference to an entity instance."""
        entity = self.find(obj)
        if entity is None:
            raise UnregisteredEntityError(type(obj).__name__)
        return VoteableRef(type=entity.type_name, id=entity.key_of(obj))

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._entities


_registry = EntityRegistry()


def get_registry() -> EntityRegistry:
    """Process-wide registry the host application registers its entities in."""
    return _registry
