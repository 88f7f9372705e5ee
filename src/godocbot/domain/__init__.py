"""Domain layer: resources, ports and the preview reconciliation rules."""
