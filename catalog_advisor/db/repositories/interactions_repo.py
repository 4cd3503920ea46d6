"""
User Interactions Repository
============================

Data access layer for the user_interactions table. Behavior profiles are
never stored on their own; they are kept in interaction metadata.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_advisor.db.models import INTERACTION_TYPES, UserInteraction
from catalog_advisor.utils.errors import ValidationError
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)


class InteractionRepository:
    """Repository for logged user interactions."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def log(
        self,
        session_id: str,
        interaction_type: str,
        user_id: str = "anonymous",
        query: str | None = None,
        products: list[dict[str, Any]] | None = None,
        ai_response: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> UserInteraction:
        """
        Record one interaction.

        Args:
            session_id: Client session identifier
            interaction_type: One of INTERACTION_TYPES
            products: ``{"product_id", "product_title", "relevance_score"}`` dicts

        Raises:
            ValidationError: If interaction_type is unknown
        """
        if interaction_type not in INTERACTION_TYPES:
            raise ValidationError(
                f"Unknown interaction type: {interaction_type}",
                details={"allowed": list(INTERACTION_TYPES)},
            )

        interaction = UserInteraction(
            session_id=session_id,
            user_id=user_id,
            interaction_type=interaction_type,
            query=query,
            products=products or [],
            ai_response=ai_response,
            meta=metadata or {},
        )
        self._session.add(interaction)
        await self._session.flush()
        await self._session.refresh(interaction)

        logger.debug(
            "interaction.logged",
            interaction_id=str(interaction.id),
            interaction_type=interaction_type,
            session_id=session_id,
        )
        return interaction

    async def list_recent(
        self,
        session_id: str | None = None,
        limit: int = 50,
    ) -> list[UserInteraction]:
        """Most recent interactions first, optionally for one session."""
        stmt = select(UserInteraction).order_by(UserInteraction.timestamp.desc()).limit(limit)
        if session_id:
            stmt = stmt.where(UserInteraction.session_id == session_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
