# app/repositories/system/system_config_repository.py
"""Repository for the system configuration singleton row."""

from typing import Any, Dict

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import handle_database_exception
from app.core.logging import get_logger
from app.models.system.system_config import SYSTEM_CONFIG_ID, SystemConfig
from app.repositories.base.base_repository import BaseRepository

logger = get_logger(__name__)


class SystemConfigRepository(BaseRepository[SystemConfig]):
    """
    Reads and writes the single ``system-config`` row.
    """

    def __init__(self, session: Session):
        super().__init__(SystemConfig, session)

    def get(self) -> SystemConfig:
        """Current row, freshly loaded from the database."""
        try:
            config = (
                self.db.query(SystemConfig)
                .filter(SystemConfig.id == SYSTEM_CONFIG_ID)
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            raise handle_database_exception(e, "get_system_config") from e
        return config

    def get_or_create(self, defaults: Dict[str, Any]) -> SystemConfig:
        """
        Return the singleton, inserting it from ``defaults`` on first use.

        A concurrent first insert loses on the primary key; the winner's
        row is read back instead.
        """
        config = self.get()
        if config is not None:
            return config

        try:
            config = SystemConfig(id=SYSTEM_CONFIG_ID, **defaults)
            self.db.add(config)
            self.db.commit()
            self.db.refresh(config)
            logger.info("System config initialized with defaults")
            return config
        except IntegrityError:
            self.db.rollback()
            logger.info("System config created concurrently, reloading")
            return self.get()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise handle_database_exception(e, "create_system_config") from e

    def apply_update(self, config: SystemConfig, values: Dict[str, Any]) -> SystemConfig:
        """Set ``values`` on the row and commit."""
        try:
            for key, value in values.items():
                setattr(config, key, value)
            self.db.commit()
            self.db.refresh(config)
            return config
        except SQLAlchemyError as e:
            self.db.rollback()
            raise handle_database_exception(e, "update_system_config") from e
