import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from .pointer import SemanticPointer

log = logging.getLogger(__name__)

ASSETS_ROOT = Path(__file__).resolve().parent.parent / "assets"


def _load_json_tree(root: Path) -> Dict[str, str]:
    registry: Dict[str, str] = {}
    if not root.is_dir():
        return registry

    for path in sorted(root.rglob("*.json")):
        try:
            with path.open("r", encoding="utf-8") as f:
                content = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warning(f"Ignoring unreadable message file {path}: {e}")
            continue
        if not isinstance(content, dict):
            continue
        # Keys are full dotted ids at the top level.
        for key, value in content.items():
            registry[str(key)] = str(value)
    return registry


class MessageCatalog:
    """
    Resolves message ids to templates.

    Roots are searched in order; later roots override earlier ones. Within a
    root, packaged messages live in ``needle/<lang>`` and project overrides in
    ``.aipcheck/needle/<lang>``.
    """

    def __init__(self, roots: Optional[List[Path]] = None, default_lang: str = "en"):
        self.default_lang = default_lang
        self.base_roots: List[Path] = list(roots) if roots else [ASSETS_ROOT]
        self.project_root: Optional[Path] = None
        self._registry: Dict[str, Dict[str, str]] = {}

    @property
    def roots(self) -> List[Path]:
        if self.project_root is None:
            return list(self.base_roots)
        return [*self.base_roots, self.project_root]

    def set_project_root(self, path: Optional[Path]) -> None:
        """Replaces the project whose overrides apply; None drops them."""
        if path != self.project_root:
            self.project_root = path
            self._registry.clear()

    def _messages_for(self, lang: str) -> Dict[str, str]:
        if lang not in self._registry:
            merged: Dict[str, str] = {}
            for root in self.roots:
                merged.update(_load_json_tree(root / "needle" / lang))
                merged.update(_load_json_tree(root / ".aipcheck" / "needle" / lang))
            self._registry[lang] = merged
        return self._registry[lang]

    def get(
        self, pointer: Union[SemanticPointer, str], lang: Optional[str] = None
    ) -> str:
        """
        Lookup order: requested language, default language, then the id itself.
        """
        key = str(pointer)
        target_lang = lang or os.getenv("AIPCHECK_LANG", self.default_lang)

        value = self._messages_for(target_lang).get(key)
        if value is None and target_lang != self.default_lang:
            value = self._messages_for(self.default_lang).get(key)
        return key if value is None else value


catalog = MessageCatalog()
