from civicdesk.models.system.system_config import SystemConfig

__all__ = ["SystemConfig"]
