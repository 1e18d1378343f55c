import itertools

import pytest

from luis_quickstart.core.errors import EntityResolutionError
from luis_quickstart.core.luis.entities import find_grandchild_id
from luis_quickstart.core.luis.types import EntityNode


def make_tree(reverse: bool = False) -> EntityNode:
    pizza = [EntityNode("Quantity", "pq"), EntityNode("Type", "pt"), EntityNode("Size", "ps")]
    toppings = [EntityNode("Type", "tt"), EntityNode("Quantity", "tq")]
    children = [EntityNode("Pizza", "p", pizza), EntityNode("Toppings", "t", toppings)]
    if reverse:
        for child in children:
            child.children.reverse()
        children.reverse()
    return EntityNode("Pizza order", "root", children)


@pytest.mark.parametrize("reverse", [False, True])
def test_resolves_grandchildren_regardless_of_sibling_order(reverse):
    tree = make_tree(reverse)
    assert find_grandchild_id(tree, "Pizza", "Quantity") == "pq"
    assert find_grandchild_id(tree, "Toppings", "Quantity") == "tq"
    assert find_grandchild_id(tree, "Pizza", "Size") == "ps"
    assert find_grandchild_id(tree, "Toppings", "Type") == "tt"


def test_same_name_under_different_parents_is_resolved_by_path():
    tree = make_tree()
    for child, grandchild in itertools.product(["Pizza", "Toppings"], ["Quantity", "Type"]):
        node = tree.find_child(child).find_child(grandchild)
        assert find_grandchild_id(tree, child, grandchild) == node.id


def test_missing_child_names_the_child():
    with pytest.raises(EntityResolutionError) as exc:
        find_grandchild_id(make_tree(), "Drinks", "Quantity")
    assert exc.value.missing_name == "Drinks"
    assert exc.value.path == ["Pizza order"]
    assert "entity path not found" in str(exc.value)


def test_missing_grandchild_names_the_grandchild():
    with pytest.raises(EntityResolutionError) as exc:
        find_grandchild_id(make_tree(), "Toppings", "Size")
    assert exc.value.missing_name == "Size"
    assert exc.value.path == ["Pizza order", "Toppings"]


def test_names_must_match_exactly():
    with pytest.raises(EntityResolutionError):
        find_grandchild_id(make_tree(), "pizza", "Quantity")


def test_unpersisted_grandchild_is_an_error():
    tree = EntityNode("Pizza order", children=[EntityNode("Pizza", children=[EntityNode("Quantity")])])
    with pytest.raises(EntityResolutionError):
        find_grandchild_id(tree, "Pizza", "Quantity")


def test_from_dict_parses_service_response():
    tree = EntityNode.from_dict({
        "id": "root", "name": "Pizza order", "readableType": "Entity Extractor",
        "children": [{"id": "p", "name": "Pizza", "children": [{"id": "pq", "name": "Quantity"}]}],
    })
    assert find_grandchild_id(tree, "Pizza", "Quantity") == "pq"
    assert tree.children[0].children[0].children == []
