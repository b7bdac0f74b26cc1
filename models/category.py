from pydantic import BaseModel


class CategoryNode(BaseModel):
    """
    Node of the static catalog category tree.

    The tree is at most three levels deep:
    category -> sub-category -> sub-sub-category.
    """
    id: str
    name: str
    slug: str
    children: list['CategoryNode'] = []


class CategoryLineage(BaseModel):
    """Path from the tree root to a category node, as slugs."""
    category: str
    sub_category: str | None = None
    sub_sub_category: str | None = None
