"""
Content Catalog - Learning content provider with a skill prerequisite graph.

Features:
    - Loads content items from JSON files (one directory per subject)
    - Subject filtering for the adaptive engine
    - Prerequisite relationships between skills as directed edges
    - Learning paths ordered prerequisites-first
"""

import json
import networkx as nx
from pathlib import Path
from typing import List, Dict, Optional, Set

from loguru import logger

from .content import Content
from .exceptions import CatalogError
from .student_model import MasteryLevel, StudentModel


class ContentCatalog:
    """
    In-memory catalog of learning content.

    Layout on disk:
        data/content/
        └── mathematics/
            ├── counting.json   (single content object)
            └── addition.json   ({"content": [...]})

    Skill graph: prerequisite skill -> skill taught by a content item.
    """

    def __init__(self, data_dir: str = "data/content"):
        """Load all content files and build the skill graph."""
        self.data_dir = Path(data_dir)
        self.graph = nx.DiGraph()
        self.content: Dict[str, Content] = {}
        self.subjects: Dict[str, List[str]] = {}  # subject -> [content_ids]

        self._load_all_content()

    def _load_all_content(self):
        if not self.data_dir.exists():
            logger.warning(f"Content directory {self.data_dir} not found, catalog is empty")
            return

        for subject_dir in sorted(self.data_dir.iterdir()):
            if subject_dir.is_dir():
                self._load_subject(subject_dir)

        logger.info(f"Loaded {len(self.content)} content items from {self.data_dir}")

    def _load_subject(self, subject_dir: Path):
        for content_file in sorted(subject_dir.glob("*.json")):
            try:
                with open(content_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise CatalogError(f"Invalid JSON in {content_file}: {e}") from e

            if not isinstance(data, dict):
                raise CatalogError(f"Bad content file {content_file}: expected a JSON object")
            items = data["content"] if "content" in data else [data]
            if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
                raise CatalogError(f"Bad content file {content_file}: 'content' must be a list of objects")

            for item in items:
                item.setdefault("subject", subject_dir.name)
                try:
                    self.add_content(Content.from_dict(item))
                except (KeyError, ValueError) as e:
                    raise CatalogError(f"Bad content entry in {content_file}: {e}") from e

    def add_content(self, content: Content):
        """Add a content item and its prerequisite edges (rejects cycles)."""
        graph = self.graph.copy()
        for skill in content.objective_skills:
            graph.add_node(skill, subject=content.subject)
            for prereq in content.prerequisites:
                if prereq != skill:
                    graph.add_edge(prereq, skill)

        if not nx.is_directed_acyclic_graph(graph):
            cycle = nx.find_cycle(graph)
            raise CatalogError(f"Cyclic skill prerequisites introduced by {content.id}: {cycle}")

        self.graph = graph
        if content.id not in self.content:
            self.subjects.setdefault(content.subject, []).append(content.id)
        self.content[content.id] = content

    # ==================== Query Methods ====================

    def get_content(self, content_id: str) -> Optional[Content]:
        return self.content.get(content_id)

    def get_all_content(self) -> List[Content]:
        return list(self.content.values())

    def get_content_for_subject(self, subject: Optional[str] = None) -> List[Content]:
        """All items for a subject (every item when subject is None)."""
        if subject is None:
            return self.get_all_content()
        return [self.content[cid] for cid in self.subjects.get(subject, [])]

    def get_skill_prerequisites(self, skill: str) -> Set[str]:
        """Get ALL prerequisite skills recursively."""
        if skill not in self.graph:
            return set()
        return nx.ancestors(self.graph, skill)

    # ==================== Learning Paths ====================

    def get_learning_path(self, target_skill: str, student: StudentModel) -> List[str]:
        """
        Skills to practice before (and including) the target, prerequisites first.

        Only skills the student has not seen or is still novice at are included.
        """
        needed = self.get_skill_prerequisites(target_skill)
        needed.add(target_skill)

        def is_weak(skill: str) -> bool:
            level = student.skill_levels.get(skill)
            return level is None or level.mastery_level == MasteryLevel.NOVICE

        weak = {s for s in needed if is_weak(s)}
        if target_skill not in self.graph:
            return [target_skill] if target_skill in weak else []

        topo_order = list(nx.topological_sort(self.graph))
        return [s for s in topo_order if s in weak]

    # ==================== Statistics ====================

    def get_stats(self) -> dict:
        return {
            "total_content": len(self.content),
            "total_skills": self.graph.number_of_nodes(),
            "total_edges": self.graph.number_of_edges(),
            "subjects": list(self.subjects.keys()),
            "content_per_subject": {s: len(ids) for s, ids in self.subjects.items()},
            "max_depth": nx.dag_longest_path_length(self.graph) if self.graph.number_of_nodes() else 0,
        }
