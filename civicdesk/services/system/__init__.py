from civicdesk.services.system.config_provider import (
    ComplaintType,
    ConfigProvider,
    DatabaseConfigProvider,
    SequenceFormat,
    StaticConfigProvider,
)

__all__ = [
    "ComplaintType",
    "ConfigProvider",
    "DatabaseConfigProvider",
    "SequenceFormat",
    "StaticConfigProvider",
]
