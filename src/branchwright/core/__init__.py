"""Core functionality for branchwright."""
