from .types import EntityNode
from ..errors import EntityResolutionError


def find_grandchild_id(entity: EntityNode, child_name: str, grandchild_name: str) -> str:
    """
    Resolve the persisted id of entity -> child_name -> grandchild_name.

    Names must match exactly; the first match at each level wins.

    Raises:
        EntityResolutionError: If either name is missing, or the matched
            grandchild has no id yet
    """
    child = entity.find_child(child_name)
    if child is None:
        raise EntityResolutionError(child_name, [entity.name])

    grandchild = child.find_child(grandchild_name)
    if grandchild is None:
        raise EntityResolutionError(grandchild_name, [entity.name, child_name])

    if grandchild.id is None:
        # present in the tree but never persisted
        raise EntityResolutionError(f"{grandchild_name} (id)", [entity.name, child_name])
    return grandchild.id
