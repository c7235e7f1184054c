"""
Tests del resolver de categorías (árbol padre / subcategorías)
"""
import pytest

from app.schemas.scheduling import ChildCategory
from app.scheduling.categories import CategoryResolver
from app.scheduling.errors import UnknownCategory


@pytest.mark.asyncio
async def test_child_inherits_capacity_mode_from_parent(categories):
    resolver = CategoryResolver(categories)
    assert await resolver.is_capacity_based("garde")
    assert await resolver.is_capacity_based("garde-chien")
    assert not await resolver.is_capacity_based("toilettage-chien")
    assert not await resolver.is_capacity_based("promenade")


@pytest.mark.asyncio
async def test_unknown_category_is_not_capacity_based(categories):
    resolver = CategoryResolver(categories)
    assert await resolver.is_capacity_based("inconnue") is False
    assert await resolver.sibling_slugs("inconnue") == ["inconnue"]


@pytest.mark.asyncio
async def test_strict_mode_rejects_unknown_category(categories):
    resolver = CategoryResolver(categories, strict=True)
    with pytest.raises(UnknownCategory):
        await resolver.is_capacity_based("inconnue")


@pytest.mark.asyncio
async def test_sibling_slugs(categories):
    resolver = CategoryResolver(categories)
    assert sorted(await resolver.sibling_slugs("garde-chien")) == ["garde-chat", "garde-chien"]
    assert sorted(await resolver.sibling_slugs("garde")) == ["garde-chat", "garde-chien"]
    # Categoría padre sin subcategorías: se comporta como categoría única
    assert await resolver.sibling_slugs("garderie") == ["garderie"]
    assert await resolver.sibling_slugs("promenade") == ["promenade"]


@pytest.mark.asyncio
async def test_child_with_missing_parent_is_standard(categories):
    categories.categories["huerfana"] = ChildCategory(slug="huerfana", parent_slug="no-existe")
    resolver = CategoryResolver(categories)
    assert not await resolver.is_capacity_based("huerfana")
    assert await resolver.sibling_slugs("huerfana") == ["huerfana"]
