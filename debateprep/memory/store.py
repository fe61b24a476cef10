"""
Persistent rule store for participant critique memory.

Provides the read/write operations the critique memory engine relies on.
The store holds no business logic: deduplication, merging and decay policy
live in the engine, the store only persists what it is told.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import AbstractSet, List, Optional

from loguru import logger
from sqlalchemy import case, create_engine, desc, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from debateprep.memory.errors import StorageError
from debateprep.memory.models import Base, CritiqueRule, Participant, utcnow
from debateprep.memory.schemas import STRENGTH_PRECISION, CritiqueRuleRecord

log = logger.bind(component="storage")


class RuleStore(ABC):
    """Contract between the critique memory engine and its persistence."""

    @abstractmethod
    def list_rules(self, participant_id: int) -> List[CritiqueRuleRecord]:
        """Rules of one participant, strongest first, then most recent first."""

    @abstractmethod
    def insert_rule(
        self,
        participant_id: int,
        rule: str,
        bad_pattern: str,
        guidance: str,
        strength: float,
    ) -> int:
        """Persist a new rule and return its id."""

    @abstractmethod
    def update_rule(
        self, rule_id: int, strength: float, guidance: str, updated_at: datetime
    ) -> None:
        """Overwrite strength, guidance and timestamp of an existing rule."""

    @abstractmethod
    def decay_rules(
        self,
        participant_id: int,
        excluded_ids: AbstractSet[int],
        decay_amount: float,
        floor: float,
    ) -> int:
        """Weaken every rule of a participant except ``excluded_ids``."""

    @abstractmethod
    def participant_exists(self, participant_id: int) -> bool:
        """Whether the participant id refers to a stored participant."""


class SQLRuleStore(RuleStore):
    """
    SQLAlchemy implementation of :class:`RuleStore`.

    Example:
        >>> store = SQLRuleStore("sqlite:///debate_prep.db")
        >>> participant_id = store.add_participant("Opponent", "Against")
        >>> rule_id = store.insert_rule(
        ...     participant_id,
        ...     rule="uses ad hominem",
        ...     bad_pattern="you're wrong because...",
        ...     guidance="stick to the argument",
        ...     strength=0.7,
        ... )
        >>> rules = store.list_rules(participant_id)
    """

    def __init__(
        self,
        database_url: str = "sqlite:///debate_prep.db",
        echo: bool = False,
    ):
        """
        Initialize database connection.

        ``sqlite://`` (or ``sqlite:///:memory:``) gives an isolated in-memory
        store shared by every thread of this instance.

        Args:
            database_url: SQLAlchemy database URL
            echo: Whether to echo SQL statements (for debugging)
        """
        self.database_url = database_url
        try:
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                self.engine = create_engine(
                    database_url,
                    echo=echo,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            else:
                self.engine = create_engine(database_url, echo=echo)
            self.SessionLocal = sessionmaker(bind=self.engine)

            # Create tables if they don't exist
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(
                f"Could not open rule store {database_url}: {e}", operation="open"
            ) from e

        log.info(f"Initialized SQLRuleStore: {database_url}")

    def add_participant(self, name: str, position: str = "") -> int:
        """
        Add a participant that critique rules can be attached to.

        Returns:
            id of the created participant
        """
        try:
            with self.SessionLocal() as session:
                participant = Participant(name=name, position=position)
                session.add(participant)
                session.commit()
                participant_id = participant.id
        except SQLAlchemyError as e:
            raise StorageError(
                f"Failed to add participant '{name}': {e}", operation="add_participant"
            ) from e

        log.info(f"Added participant {participant_id} ({name})")
        return participant_id

    def participant_exists(self, participant_id: int) -> bool:
        try:
            with self.SessionLocal() as session:
                return session.get(Participant, participant_id) is not None
        except SQLAlchemyError as e:
            raise StorageError(
                f"Failed to look up participant {participant_id}: {e}",
                operation="participant_exists",
            ) from e

    def list_rules(self, participant_id: int) -> List[CritiqueRuleRecord]:
        """
        Get all critique rules for a participant.

        Ordered by strength descending, ties broken by creation time
        descending; rules created within the same clock tick fall back to
        id descending.

        Args:
            participant_id: Owning participant

        Returns:
            Detached rule snapshots
        """
        try:
            with self.SessionLocal() as session:
                rows = (
                    session.query(CritiqueRule)
                    .filter(CritiqueRule.participant_id == participant_id)
                    .order_by(
                        desc(CritiqueRule.strength),
                        desc(CritiqueRule.created_at),
                        desc(CritiqueRule.id),
                    )
                    .all()
                )
                return [CritiqueRuleRecord.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageError(
                f"Failed to list rules for participant {participant_id}: {e}",
                operation="list_rules",
            ) from e

    def get_rule(self, rule_id: int) -> Optional[CritiqueRuleRecord]:
        """
        Retrieve a rule by ID.

        Returns:
            Rule snapshot or None if not found
        """
        try:
            with self.SessionLocal() as session:
                row = session.get(CritiqueRule, rule_id)
                return CritiqueRuleRecord.model_validate(row) if row else None
        except SQLAlchemyError as e:
            raise StorageError(
                f"Failed to read rule {rule_id}: {e}", operation="get_rule"
            ) from e

    def insert_rule(
        self,
        participant_id: int,
        rule: str,
        bad_pattern: str,
        guidance: str,
        strength: float,
    ) -> int:
        """
        Add a new rule to the store.

        Duplicate content is accepted; deduplication is the engine's job.

        Returns:
            id of the created rule

        Raises:
            StorageError: If the write fails
        """
        now = utcnow()
        try:
            with self.SessionLocal() as session:
                row = CritiqueRule(
                    participant_id=participant_id,
                    rule=rule,
                    bad_pattern=bad_pattern,
                    guidance=guidance,
                    strength=round(strength, STRENGTH_PRECISION),
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
                session.commit()
                rule_id = row.id
        except SQLAlchemyError as e:
            raise StorageError(
                f"Failed to insert rule for participant {participant_id}: {e}",
                operation="insert_rule",
            ) from e

        log.debug(
            f"Inserted rule {rule_id} for participant {participant_id}",
            rule_id=rule_id,
            participant_id=participant_id,
            strength=strength,
        )
        return rule_id

    def update_rule(
        self, rule_id: int, strength: float, guidance: str, updated_at: datetime
    ) -> None:
        """
        Update strength and guidance of an existing rule.

        Raises:
            StorageError: If the rule does not exist or the write fails
        """
        try:
            with self.SessionLocal() as session:
                row = session.get(CritiqueRule, rule_id)
                if row is None:
                    raise StorageError(
                        f"Rule {rule_id} does not exist", operation="update_rule"
                    )
                row.strength = round(strength, STRENGTH_PRECISION)
                row.guidance = guidance
                row.updated_at = updated_at
                session.commit()
        except SQLAlchemyError as e:
            raise StorageError(
                f"Failed to update rule {rule_id}: {e}", operation="update_rule"
            ) from e

        log.debug(f"Updated rule {rule_id}", rule_id=rule_id, strength=strength)

    def decay_rules(
        self,
        participant_id: int,
        excluded_ids: AbstractSet[int],
        decay_amount: float,
        floor: float,
    ) -> int:
        """
        Decrease strength of a participant's rules in one statement.

        ``strength = round(max(floor, strength - decay_amount), 2)`` for every
        rule not in ``excluded_ids``; runs as a single transaction.

        Returns:
            Number of rules decayed
        """
        decayed = CritiqueRule.strength - decay_amount
        statement = (
            update(CritiqueRule)
            .where(CritiqueRule.participant_id == participant_id)
            .values(
                strength=func.round(
                    case((decayed < floor, floor), else_=decayed), STRENGTH_PRECISION
                ),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if excluded_ids:
            statement = statement.where(CritiqueRule.id.not_in(sorted(excluded_ids)))

        try:
            with self.SessionLocal() as session:
                with session.begin():
                    result = session.execute(statement)
                    count = result.rowcount
        except SQLAlchemyError as e:
            raise StorageError(
                f"Failed to decay rules for participant {participant_id}: {e}",
                operation="decay_rules",
            ) from e

        log.debug(
            f"Decayed {count} rules for participant {participant_id}",
            participant_id=participant_id,
            excluded=len(excluded_ids),
            decay_amount=decay_amount,
        )
        return count

    def close(self) -> None:
        """Close database connection."""
        self.engine.dispose()
        log.info("Closed rule store connection")
