"""Skill documents shipped with the package (Markdown with YAML front matter)."""
