"""
Name alias resolution with JSON-backed alias table and suffix fallback.
"""
import json
import logging
from pathlib import Path

from rapidfuzz import fuzz, process

logger = logging.getLogger(__name__)

ALIASES_FILENAME = "name_aliases.json"


def _aliases_path(project_root=None):
    if project_root is None:
        project_root = Path(__file__).parent.parent
    return Path(project_root) / "reference_data" / ALIASES_FILENAME


def load_aliases(project_root=None):
    """Load the variant -> canonical name table from JSON."""
    aliases_file = _aliases_path(project_root)
    if not aliases_file.exists():
        logger.warning(f"Alias table not found at {aliases_file}; names will not be merged")
        return {}
    with open(aliases_file, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_aliases(aliases, project_root=None):
    """Save the alias table to JSON."""
    aliases_file = _aliases_path(project_root)
    aliases_file.parent.mkdir(parents=True, exist_ok=True)
    with open(aliases_file, 'w', encoding='utf-8') as f:
        json.dump(aliases, f, ensure_ascii=False, indent=2)
    return aliases_file


def add_alias(variant, canonical, project_root=None):
    """Map a new name variant onto a canonical name."""
    aliases = load_aliases(project_root)
    aliases[variant] = canonical
    save_aliases(aliases, project_root)
    return aliases


def build_alias_skeleton(records, existing=None):
    """
    Collect every participant name into an identity alias table.

    Operators edit the result so that variants of one person share a value,
    e.g. {"張三": "張三", "張三三": "張三"}. Entries already present in
    `existing` are kept as they are.
    """
    skeleton = dict(existing or {})
    names = set()
    for record in records:
        for participant in record.participants:
            if participant.name:
                names.add(participant.name)
    for name in sorted(names):
        skeleton.setdefault(name, name)
    return skeleton


def last_two_chars(name):
    """Last two characters of a trimmed name, or the whole name if shorter."""
    if not isinstance(name, str):
        return ""
    trimmed = name.strip()
    if len(trimmed) <= 2:
        return trimmed
    return trimmed[-2:]


class NameAliasResolver:
    """
    Resolve raw name strings to canonical names.

    The suffix index keeps the FIRST canonical name (in table order) for each
    two-character ending. Different people sharing an ending cannot be told
    apart this way; suffix_conflicts() lists those endings.
    """

    def __init__(self, alias_table=None):
        self.alias_table = dict(alias_table or {})
        self._suffix_index = {}
        self._suffix_owners = {}
        for canonical in self.alias_table.values():
            suffix = last_two_chars(canonical)
            if not suffix:
                continue
            self._suffix_index.setdefault(suffix, canonical)
            owners = self._suffix_owners.setdefault(suffix, [])
            if canonical not in owners:
                owners.append(canonical)

    def resolve(self, raw_name):
        """Direct lookup; unknown names come back unchanged."""
        if not raw_name:
            return raw_name
        return self.alias_table.get(raw_name) or raw_name

    def resolve_by_suffix(self, suffix):
        """Canonical name whose last two characters equal `suffix`, else None."""
        if not suffix:
            return None
        return self._suffix_index.get(suffix)

    def standardize(self, raw_name):
        """
        Resolve a possibly shortened name from an external dataset.

        Returns:
            (name, resolved) where resolved is False when neither the table
            nor the suffix index knew the name and the raw name was kept.
        """
        name = (raw_name or "").strip()
        if not name:
            return name, False
        if name in self.alias_table:
            return self.alias_table[name], True
        by_suffix = self.resolve_by_suffix(last_two_chars(name))
        if by_suffix:
            return by_suffix, True
        return name, False

    def canonical_names(self):
        """Distinct canonical names in table order."""
        return list(dict.fromkeys(self.alias_table.values()))

    def suffix_conflicts(self):
        """{suffix: [canonical names]} for endings shared by several people."""
        return {
            suffix: list(owners)
            for suffix, owners in self._suffix_owners.items()
            if len(owners) > 1
        }

    def suggest_canonical(self, name, limit=3, score_cutoff=50):
        """Closest canonical names for an unresolved name (hints only)."""
        choices = self.canonical_names()
        if not name or not choices:
            return []
        matches = process.extract(
            name, choices, scorer=fuzz.partial_ratio, limit=limit, score_cutoff=score_cutoff
        )
        return [choice for choice, _score, _idx in matches]
