"""Storage collaborators, schedule I/O and engine defaults."""
