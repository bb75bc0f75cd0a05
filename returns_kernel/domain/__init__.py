"""Domain layer - pure entities, statuses, rules and collaborator contracts."""
