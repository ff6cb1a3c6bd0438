"""Run artifact storage (directory layout and writers)."""
