# app/scheduling/categories.py
import logging
from typing import List, Optional

from .errors import UnknownCategory
from ..repositories.base import CategoryRepository
from ..schemas.scheduling import ChildCategory, ParentCategory, ServiceCategory

logger = logging.getLogger(__name__)


class CategoryResolver:
    """
    Resuelve el modo de capacidad y las categorías hermanas sobre el
    árbol de dos niveles (categorías padre y sus subcategorías).
    """

    def __init__(self, categories: CategoryRepository, strict: bool = False):
        self._categories = categories
        self._strict = strict

    async def _lookup(self, slug: str) -> Optional[ServiceCategory]:
        category = await self._categories.get(slug)
        if category is None:
            if self._strict:
                raise UnknownCategory(slug)
            logger.warning("Categoría desconocida %r: se trata como estándar", slug)
        return category

    async def _parent_of(self, child: ChildCategory) -> Optional[ParentCategory]:
        parent = await self._categories.get(child.parent_slug)
        if not isinstance(parent, ParentCategory):
            # Padre ausente o anidado a más de dos niveles
            logger.warning("Subcategoría %r sin categoría padre válida (%r)", child.slug, child.parent_slug)
            return None
        return parent

    async def is_capacity_based(self, slug: str) -> bool:
        category = await self._lookup(slug)
        if category is None:
            return False
        if isinstance(category, ChildCategory):
            parent = await self._parent_of(category)
            return bool(parent and parent.is_capacity_based)
        return category.is_capacity_based

    async def sibling_slugs(self, slug: str) -> List[str]:
        """
        Slugs que comparten cupo con `slug`:
        - subcategoría -> todas las subcategorías de su padre
        - categoría padre -> sus subcategorías, o ella misma si no tiene
        """
        category = await self._lookup(slug)
        if category is None:
            return [slug]

        parent_slug = category.parent_slug if isinstance(category, ChildCategory) else category.slug
        children = await self._categories.children_of(parent_slug)
        slugs = [c.slug for c in children]
        if isinstance(category, ChildCategory) and slug not in slugs:
            slugs.append(slug)
        return slugs or [slug]
