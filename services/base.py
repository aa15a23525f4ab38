"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager


class Services:
    """Container for all application services.

    This class wires the category engine together once and makes it easy to
    inject a test database manager.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, config is ignored.
    """

    def __init__(self, config: Config, db_manager=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.categories import CategoryStore
        from services.dependencies import DependencyInspector
        from services.hierarchy import HierarchyValidator
        from services.category_hierarchy import CategoryHierarchyService

        self.category_store = CategoryStore(self.db_manager)
        self.dependencies = DependencyInspector(self.category_store)
        self.hierarchy = HierarchyValidator(self.category_store)
        self.categories = CategoryHierarchyService(
            self.category_store, self.hierarchy, self.dependencies
        )
