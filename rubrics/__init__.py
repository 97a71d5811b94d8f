"""Rubric definitions shipped with the portal."""
