"""Storage protocol for promptlib backends.

Defines every call the library, the import pipeline and the API make
against the hosted database. Currently supported:
- SupabaseStorage: the hosted Postgres database behind its REST layer
"""

from abc import abstractmethod
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from promptlib.types import Category, Project, ProjectPrompt, Prompt, SubcategoryGroup

# Table names
CATEGORIES_TABLE = "categories"
SUBCATEGORY_GROUPS_TABLE = "subcategory_groups"
PROMPTS_TABLE = "prompts"
PROJECTS_TABLE = "projects"
PROJECT_PROMPTS_TABLE = "project_prompts"
FAVORITES_TABLE = "favorites"


@runtime_checkable
class Storage(Protocol):
    """Protocol defining the storage interface for promptlib.

    Prompt, favorite and project calls are scoped to ``user_id``; the
    taxonomy tables are shared.
    """

    user_id: str

    # === Categories ===

    @abstractmethod
    def list_categories(self) -> List[Category]:
        """All categories by sort_order (nulls last)."""
        ...

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]:
        ...

    @abstractmethod
    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        ...

    @abstractmethod
    def create_category(self, category: Category) -> Category:
        ...

    @abstractmethod
    def update_category(self, category_id: str, updates: Dict[str, Any]) -> Category:
        ...

    @abstractmethod
    def delete_category(self, category_id: str) -> bool:
        ...

    # === Subcategory groups ===

    @abstractmethod
    def list_subcategory_groups(self, category_id: Optional[str] = None) -> List[SubcategoryGroup]:
        """Groups by sort_order, optionally restricted to one category."""
        ...

    @abstractmethod
    def create_subcategory_group(self, group: SubcategoryGroup) -> SubcategoryGroup:
        ...

    @abstractmethod
    def update_subcategory_group(self, group_id: str, updates: Dict[str, Any]) -> SubcategoryGroup:
        ...

    @abstractmethod
    def delete_subcategory_group(self, group_id: str) -> bool:
        ...

    # === Prompts ===

    @abstractmethod
    def list_prompts(
        self,
        category_id: Optional[str] = None,
        group_id: Optional[str] = None,
        subcategory: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Prompt]:
        """Prompts with joined category/group names, newest first.

        ``search`` must already be sanitized; it is matched case-insensitively
        against title and content.
        """
        ...

    @abstractmethod
    def get_prompt(self, prompt_id: str) -> Optional[Prompt]:
        ...

    @abstractmethod
    def find_prompt_by_legacy_id(self, legacy_id: str) -> Optional[Prompt]:
        ...

    @abstractmethod
    def insert_prompt(self, data: Dict[str, Any]) -> Prompt:
        ...

    @abstractmethod
    def update_prompt(self, prompt_id: str, data: Dict[str, Any]) -> Prompt:
        ...

    @abstractmethod
    def delete_prompts(self, prompt_ids: List[str]) -> int:
        """Delete prompts by id. Returns the number of rows removed."""
        ...

    @abstractmethod
    def owned_prompt_ids(self, prompt_ids: List[str]) -> List[str]:
        """The subset of ``prompt_ids`` that belong to the current user."""
        ...

    @abstractmethod
    def list_subcategory_values(self, group_id: str) -> List[Optional[str]]:
        """The raw ``subcategory`` field of every prompt in a group."""
        ...

    # === Favorites ===

    @abstractmethod
    def list_favorite_ids(self) -> List[str]:
        ...

    @abstractmethod
    def add_favorite(self, prompt_id: str) -> None:
        ...

    @abstractmethod
    def remove_favorite(self, prompt_id: str) -> bool:
        ...

    # === Projects ===

    @abstractmethod
    def list_projects(self) -> List[Project]:
        """Projects by updated_at, newest first."""
        ...

    @abstractmethod
    def get_project(self, project_id: str) -> Optional[Project]:
        ...

    @abstractmethod
    def create_project(self, name: str, description: Optional[str] = None) -> Project:
        ...

    @abstractmethod
    def update_project(self, project_id: str, updates: Dict[str, Any]) -> Project:
        ...

    @abstractmethod
    def delete_project(self, project_id: str) -> bool:
        ...

    @abstractmethod
    def list_project_prompts(self, project_id: str) -> List[ProjectPrompt]:
        """Junction rows with their prompts, most recently added first."""
        ...

    @abstractmethod
    def add_project_prompt(self, project_id: str, prompt_id: str) -> ProjectPrompt:
        """Insert one junction row; fails if the pair already exists."""
        ...

    @abstractmethod
    def upsert_project_prompts(self, project_id: str, prompt_ids: List[str]) -> int:
        """Add many prompts, ignoring pairs that already exist."""
        ...

    @abstractmethod
    def remove_project_prompt(self, project_id: str, prompt_id: str) -> bool:
        ...
