from entpb.errors import UnknownFieldError, UnknownGroupError
from entpb.schema.models import Edge, Entity, EntityField, FieldGroups


def resolve_group(groups: FieldGroups, group_name: str, entity: Entity) -> list[EntityField | Edge]:
    """Resolve a field group to the entity's fields and edges, in the group's declared order.

    Args:
        groups: The field groups declared by the entity
        group_name: Name of the group to resolve
        entity: The entity the group members belong to

    Returns:
        The fields and edges listed by the group

    Raises:
        UnknownGroupError: If no group is called ``group_name``
        UnknownFieldError: If a group member is neither a field nor an edge of the entity
    """
    group = groups.get(group_name)
    if group is None:
        raise UnknownGroupError(f"unknown field group '{group_name}'", entity=entity.name, element=group_name)

    resolved: list[EntityField | Edge] = []
    for member_name in group.fields:
        member = entity.lookup(member_name)
        if member is None:
            raise UnknownFieldError(
                f"field group '{group_name}' references unknown field '{member_name}'",
                entity=entity.name,
                element=group_name,
            )
        resolved.append(member)
    return resolved
