from app.schemas.system.system_config import SystemConfigResponse, SystemConfigUpdate

__all__ = ["SystemConfigResponse", "SystemConfigUpdate"]
