"""
Category Lineage Index

Loads the static three-level catalog category tree from
reference_data/categories.json once at import and answers two questions:

- which slugs does a shop filter on a category also cover
  (the category itself plus every descendant)
- what is the full category -> sub-category -> sub-sub-category path of a slug

Unknown slugs are never an error: they yield an empty set / None.

Usage:
    from utils.category_tree import get_all_child_slugs, get_category_lineage

    get_all_child_slugs("alloy-wheels")
    # {"alloy-wheels", "17-inch", "18-inch", "19-inch", "20-inch-plus"}

    get_category_lineage("18-inch")
    # CategoryLineage(category="exterior-accessories", sub_category="alloy-wheels", sub_sub_category="18-inch")
"""

import json
import logging
from pathlib import Path

from models.category import CategoryNode, CategoryLineage

MAX_DEPTH = 3


def load_category_tree(path: Path | None = None) -> list[CategoryNode]:
    """
    Load and validate the category tree.

    Raises:
        FileNotFoundError: If the categories file doesn't exist
        ValueError: If a slug is duplicated or the tree is deeper than three levels
    """
    if path is None:
        project_root = Path(__file__).parent.parent
        path = project_root / "reference_data" / "categories.json"

    with open(path, "r", encoding="utf-8") as f:
        tree = [CategoryNode.model_validate(node) for node in json.load(f)]

    seen_slugs: set[str] = set()

    def check(nodes: list[CategoryNode], depth: int) -> None:
        if nodes and depth > MAX_DEPTH:
            raise ValueError(f"Category tree deeper than {MAX_DEPTH} levels at '{nodes[0].slug}'")
        for node in nodes:
            if node.slug in seen_slugs:
                raise ValueError(f"Duplicate category slug '{node.slug}'")
            seen_slugs.add(node.slug)
            check(node.children, depth + 1)

    check(tree, 1)
    logging.debug(f"Loaded category tree: {len(tree)} root categories, {len(seen_slugs)} slugs")
    return tree


CATEGORY_TREE: list[CategoryNode] = load_category_tree()


def _find_node(slug: str, nodes: list[CategoryNode]) -> CategoryNode | None:
    for node in nodes:
        if node.slug == slug:
            return node
        found = _find_node(slug, node.children)
        if found:
            return found
    return None


def get_all_child_slugs(slug: str, tree: list[CategoryNode] | None = None) -> set[str]:
    """
    Return the slug plus every descendant slug (depth-first).

    Used so a shop filter on a parent category also matches products
    classified at any level below it.

    Args:
        slug: Category slug at any level
        tree: Category tree (defaults to CATEGORY_TREE)

    Returns:
        Set of slugs, empty if the slug is unknown
    """
    target = _find_node(slug, CATEGORY_TREE if tree is None else tree)
    if target is None:
        return set()

    slugs = {target.slug}
    stack = list(target.children)
    while stack:
        node = stack.pop()
        slugs.add(node.slug)
        stack.extend(node.children)
    return slugs


def get_category_lineage(slug: str, tree: list[CategoryNode] | None = None) -> CategoryLineage | None:
    """
    Find a slug at any of the three levels and return its path from the root.

    Used to normalise legacy products that only stored a single flat category.

    Returns:
        CategoryLineage, or None if the slug is not in the tree
    """
    for root in CATEGORY_TREE if tree is None else tree:
        if root.slug == slug:
            return CategoryLineage(category=root.slug)
        for sub in root.children:
            if sub.slug == slug:
                return CategoryLineage(category=root.slug, sub_category=sub.slug)
            for sub_sub in sub.children:
                if sub_sub.slug == slug:
                    return CategoryLineage(
                        category=root.slug,
                        sub_category=sub.slug,
                        sub_sub_category=sub_sub.slug
                    )
    return None


def flatten_categories(tree: list[CategoryNode] | None = None, prefix: str = "") -> list[tuple[str, str]]:
    """
    Flatten the tree into (label, slug) pairs for admin pickers.

    Example:
        >>> flatten_categories()[:2]
        [('Interior Accessories', 'interior-accessories'),
         ('Interior Accessories > Seat Covers', 'seat-covers')]
    """
    result = []
    for node in CATEGORY_TREE if tree is None else tree:
        label = f"{prefix} > {node.name}" if prefix else node.name
        result.append((label, node.slug))
        if node.children:
            result.extend(flatten_categories(node.children, label))
    return result
