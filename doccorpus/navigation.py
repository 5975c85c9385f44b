"""Navigation tree assembly for the generated corpus."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .classifier import navigation_order
from .config import NavigationGroupConfig
from .constants import NAVIGATION_EXCLUDED
from .logging import get_logger
from .models import GeneratedDocument, NavigationEntry, NavigationGroup, SourceProject

logger = get_logger("navigation")


class NavigationBuilder:
    """Builds per-project groups and folds them into one navigation tree."""

    def __init__(self, groups: Optional[Mapping[str, NavigationGroupConfig]] = None) -> None:
        self.groups: Dict[str, NavigationGroupConfig] = dict(groups or {})

    def build_group(self, project: SourceProject, documents: Sequence[GeneratedDocument]) -> NavigationGroup:
        """Return the ordered group for ``project``.

        Only the project's own documents are listed; a project without
        eligible documents still gets an (empty) group.
        """
        eligible = [
            document
            for document in documents
            if document.project_id == project.id and document.doc_type not in NAVIGATION_EXCLUDED
        ]
        # sorted() is stable, so equal ranks keep generation order.
        eligible = sorted(eligible, key=lambda document: navigation_order(document.doc_type))
        entries = [
            NavigationEntry(title=document.frontmatter.title, path=document.page_ref, category=document.doc_type)
            for document in eligible
        ]
        return NavigationGroup(
            project_id=project.id,
            group=project.display_name,
            category=project.category,
            entries=entries,
        )

    def build_tree(self, groups: Sequence[NavigationGroup]) -> Dict[str, Any]:
        """Serialise groups as ``{"navigation": [...]}``.

        With category groups configured, project groups nest under their
        category in ``order``; projects of unconfigured categories follow at
        the top level.
        """
        if not self.groups:
            return {"navigation": [group.to_dict() for group in groups]}

        nested: Dict[str, List[Dict[str, Any]]] = {}
        loose: List[Dict[str, Any]] = []
        for group in groups:
            if group.category in self.groups:
                nested.setdefault(group.category, []).append(group.to_dict())
            else:
                loose.append(group.to_dict())

        ordered = sorted(nested, key=lambda category: (self.groups[category].order, self.groups[category].title))
        navigation: List[Dict[str, Any]] = []
        for category in ordered:
            settings = self.groups[category]
            entry: Dict[str, Any] = {"group": settings.title, "pages": nested[category]}
            if settings.description:
                entry["description"] = settings.description
            navigation.append(entry)
        navigation.extend(loose)
        return {"navigation": navigation}

    def save(self, tree: Mapping[str, Any], path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(tree, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        logger.info("Wrote navigation to %s", path)


__all__ = ["NavigationBuilder"]
