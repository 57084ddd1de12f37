"""SQLAlchemy table definitions for the vote ledger.

The vote table name and the voter key column are configurable, so the table
is built from settings once at startup and lives in the same metadata as the
host application's voter table.
"""

from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    func,
)

from voting.config import VoteSettings
from voting.domain.value import EntityKey, VoterId
from voting.persistence.registry import EntityRegistry, RegisteredEntity
from voting.util.error import ConfigurationError


# ============================================================================
# SUBJECT KEYS
# ============================================================================
class StoredKey(TypeDecorator):
    """Key of any registered entity, stored as text.

    Keys are rendered the way the database renders ``CAST(key AS VARCHAR)``,
    so a stored key compares equal to the subject's own key column. UUIDs are
    hyphenated on databases with a native UUID type and plain hex elsewhere,
    matching how ``Uuid`` columns store them.
    """

    impl = String
    cache_ok = True

    def process_bind_param(
        self, value: Optional[EntityKey], dialect: Any
    ) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, UUID):
            return str(value) if dialect.supports_native_uuid else value.hex
        return str(value)


# ============================================================================
# VOTES TABLE
# ============================================================================
def build_votes_table(
    metadata: MetaData, name: str, voter_key: str, voter: RegisteredEntity
) -> Table:
    """Define the polymorphic vote table.

    Args:
        metadata: Metadata the table is added to
        name: Table name
        voter_key: Name of the column holding the voter's primary key
        voter: Registered voter entity (the foreign key target)

    Returns:
        The vote table
    """
    voter_column = voter.key_column
    table = Table(
        name,
        metadata,
        Column("id", Uuid, primary_key=True, default=uuid4),
        Column("voter_type", String(255), nullable=False),
        Column(
            voter_key,
            voter_column.type,
            ForeignKey(voter_column, ondelete="CASCADE"),
            nullable=False,
        ),
        Column("voteable_type", String(255), nullable=False),
        Column("voteable_id", StoredKey(255), nullable=False),
        Column("upvote", Boolean, nullable=False, default=True),
        Column(
            "created_at",
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
        Column(
            "updated_at",
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
        # One vote per voter per subject
        UniqueConstraint(
            "voter_type",
            voter_key,
            "voteable_type",
            "voteable_id",
            name=f"uq_{name}_voter_voteable",
        ),
    )

    Index(f"idx_{name}_{voter_key}", table.c[voter_key])
    Index(f"idx_{name}_voteable", table.c.voteable_type, table.c.voteable_id)

    return table


class VoteSchema:
    """Vote configuration resolved into typed table and column references.

    Built once at startup; every query of the ledger goes through it.
    """

    def __init__(
        self,
        registry: EntityRegistry,
        voter: RegisteredEntity,
        table: Table,
        voter_key: str,
        divisors: dict[int, str],
    ) -> None:
        self.registry = registry
        self.voter = voter
        self.table = table
        self.voter_key = voter_key
        self.divisors = divisors

    @classmethod
    def build(
        cls,
        settings: VoteSettings,
        registry: EntityRegistry,
        metadata: Optional[MetaData] = None,
    ) -> "VoteSchema":
        """Resolve vote settings against the entity registry.

        Args:
            settings: Vote settings
            registry: Registry holding the voter entity
            metadata: Metadata for the vote table (defaults to the voter
                table's metadata)

        Returns:
            Resolved schema

        Raises:
            ConfigurationError: If a required setting is missing or the voter
                type is not registered
        """
        voter_type = settings.models.user
        table_name = settings.models.vote
        voter_key = settings.column_names.user_foreign_key

        if not voter_type:
            raise ConfigurationError("vote.models.user is not configured")
        if not table_name:
            raise ConfigurationError("vote.models.vote is not configured")
        if not voter_key:
            raise ConfigurationError(
                "vote.column_names.user_foreign_key is not configured"
            )
        if voter_type not in registry:
            raise ConfigurationError(f"Voter type {voter_type} is not registered")

        voter = registry.entity(voter_type)
        if metadata is None:
            metadata = voter.table.metadata

        table = metadata.tables.get(table_name)
        if table is None:
            table = build_votes_table(metadata, table_name, voter_key, voter)
        elif voter_key not in table.c:
            raise ConfigurationError(
                f"Table {table_name} has no voter key column {voter_key}"
            )

        return cls(
            registry=registry,
            voter=voter,
            table=table,
            voter_key=voter_key,
            divisors=dict(settings.divisors),
        )

    @property
    def voter_type(self) -> str:
        """Type discriminator of the voter entity."""
        return self.voter.type_name

    @property
    def voter_key_column(self) -> Column:
        """Column of the vote table holding the voter's key."""
        return self.table.c[self.voter_key]

    def is_voter(self, obj: Any) -> bool:
        """Whether the object is an instance of the configured voter type."""
        return self.voter.is_instance(obj)

    def voter_id_of(self, voter: Any) -> VoterId:
        """Primary key of a voter instance."""
        return self.voter.key_of(voter)
