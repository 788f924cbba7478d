from civicdesk.services.background.cleanup_service import (
    CleanupConfig,
    CleanupResult,
    CleanupService,
    CleanupTask,
)

__all__ = ["CleanupConfig", "CleanupResult", "CleanupService", "CleanupTask"]
