"""
Project repository for database operations.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.project import Project


class ProjectRepository:
    """Repository for project lookups used by the voting engine."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        result = await self.db.execute(select(Project).where(Project.id == project_id))
        return result.scalar_one_or_none()

    async def missing_ids(self, project_ids: list[str]) -> list[str]:
        """Return the ids from ``project_ids`` that have no project row, in input order."""
        if not project_ids:
            return []
        result = await self.db.execute(select(Project.id).where(Project.id.in_(project_ids)))
        found = {str(pid) for pid in result.scalars().all()}
        return [pid for pid in project_ids if pid not in found]

    async def list_projects(self) -> list[Project]:
        result = await self.db.execute(select(Project).order_by(Project.created_at.desc()))
        return list(result.scalars().all())
