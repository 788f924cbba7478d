from civicdesk.repositories.system.system_config_repository import SystemConfigRepository

__all__ = ["SystemConfigRepository"]
