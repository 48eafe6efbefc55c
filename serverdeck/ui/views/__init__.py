"""Full-window views shown in the main stack."""
