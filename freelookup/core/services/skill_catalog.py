"""Catalog of skill documents.

A skill is a Markdown file whose YAML front matter (between two `---` lines)
carries at least `name` and `description`. The name is the lookup key.
"""

import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from freelookup.domain.errors import SkillFormatError

logger = logging.getLogger(__name__)

FRONT_MATTER_DELIMITER = "---"
REQUIRED_KEYS = ("name", "description")


@dataclass
class Skill:
    name: str
    description: str
    body: str
    path: Optional[Path] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Returns (front matter mapping, Markdown body).

    Raises:
        SkillFormatError: If the document has no closed front matter block or
            it does not parse to a mapping.
    """
    lines = text.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        raise SkillFormatError("Document does not start with a '---' front matter block")
    for end, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONT_MATTER_DELIMITER:
            break
    else:
        raise SkillFormatError("Front matter block is not closed with '---'")

    try:
        meta = yaml.safe_load("\n".join(lines[1:end])) or {}
    except yaml.YAMLError as e:
        raise SkillFormatError(f"Invalid YAML front matter: {e}") from e
    if not isinstance(meta, dict):
        raise SkillFormatError("Front matter must be a mapping")
    body = "\n".join(lines[end + 1:]).strip("\n")
    return meta, body


def parse_skill(text: str, path: Optional[Path] = None) -> Skill:
    meta, body = split_front_matter(text)
    missing = [key for key in REQUIRED_KEYS if not meta.get(key)]
    if missing:
        raise SkillFormatError(f"Front matter is missing: {', '.join(missing)}")
    return Skill(
        name=str(meta["name"]).strip(),
        description=str(meta["description"]).strip(),
        body=body,
        path=path,
        metadata={k: v for k, v in meta.items() if k not in REQUIRED_KEYS},
    )


def default_skills_dir() -> Path:
    return Path(str(resources.files("freelookup") / "skills"))


class SkillCatalog:
    """Loads and indexes skill documents from a directory."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = directory or default_skills_dir()
        self._skills: Dict[str, Skill] = {}
        self._loaded = False

    def load(self) -> "SkillCatalog":
        """Parses every *.md file (sorted by filename). Malformed files raise."""
        self._skills = {}
        for path in sorted(self.directory.glob("*.md")):
            try:
                skill = parse_skill(path.read_text(encoding="utf-8"), path=path)
            except SkillFormatError as e:
                raise SkillFormatError(f"{path.name}: {e}") from e
            if skill.name in self._skills:
                logger.warning(
                    f"Duplicate skill name '{skill.name}' in {path.name}; "
                    f"keeping {self._skills[skill.name].path.name}"
                )
                continue
            self._skills[skill.name] = skill
        self._loaded = True
        logger.debug(f"Loaded {len(self._skills)} skill(s) from {self.directory}")
        return self

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def list(self) -> List[Skill]:
        self._ensure_loaded()
        return sorted(self._skills.values(), key=lambda s: s.name)

    def get(self, name: str) -> Skill:
        self._ensure_loaded()
        try:
            return self._skills[name]
        except KeyError:
            raise KeyError(f"Unknown skill '{name}'") from None
