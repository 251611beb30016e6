"""Domain layer: entities, value objects, errors, events and ports."""
