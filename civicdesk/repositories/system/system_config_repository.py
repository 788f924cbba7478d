"""
Read-only access to system configuration rows.
"""

from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from civicdesk.models.system.system_config import SystemConfig
from civicdesk.repositories.base.base_repository import BaseRepository


class SystemConfigRepository(BaseRepository[SystemConfig]):

    def __init__(self, session: Session):
        super().__init__(SystemConfig, session)

    def get_value(self, key: str) -> Optional[str]:
        stmt = select(SystemConfig.value).where(
            SystemConfig.key == key, SystemConfig.is_active.is_(True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_values_with_prefix(self, prefix: str) -> Dict[str, str]:
        stmt = select(SystemConfig.key, SystemConfig.value).where(
            SystemConfig.key.startswith(prefix), SystemConfig.is_active.is_(True)
        )
        return {key: value for key, value in self.db.execute(stmt).all()}
