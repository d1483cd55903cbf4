# =============================================================================
# anonymization_engine.py
# =============================================================================
# Interfaces of the anonymization engine used by the benchmark, and the
# transformation lattice it produces.
#
# The engine itself (search over the solution space, privacy checks,
# materialization of transformed data) is an external component. It is
# plugged in through the `engine.factory` configuration key and must
# implement AnonymizationEngine.
#
# Key Concept:
#   A transformation is a vector of generalization levels, one per
#   quasi-identifier. All transformations form a lattice ordered by the sum
#   of their levels. The bottom node is (0, ..., 0), the top node holds the
#   highest level of every hierarchy.
#
# References:
#   - Prasser, F., Kohlmayer, F. (2015). Putting statistical disclosure
#     control into practice: The ARX data anonymization tool.
# =============================================================================

import importlib
import itertools
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Sequence, Tuple

import pandas as pd

from .data_loader import Data
from .exceptions import ConfigurationError
from .privacy_models import PrivacyConfiguration

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformationNode:
    """
    Node of the transformation lattice.

    Attributes:
        transformation: Generalization level per quasi-identifier
    """
    transformation: Tuple[int, ...]

    @property
    def total_generalization_level(self) -> int:
        return sum(self.transformation)

    def __str__(self) -> str:
        return f"[{', '.join(str(level) for level in self.transformation)}]"


class TransformationLattice:
    """
    Explicit transformation lattice indexed by total generalization level.

    Nodes keep the order in which the engine reported them. Successors are
    answered by a pure query instead of a stateful expansion, so the lattice
    can be traversed in any order any number of times.

    Attributes:
        bottom (TransformationNode): Least generalized node
        top (TransformationNode): Most generalized node

    Example:
        >>> lattice = TransformationLattice.from_max_levels([1, 2])
        >>> [str(n) for n in lattice.get_level(1)]
        ['[0, 1]', '[1, 0]']
    """

    def __init__(self, nodes: Iterable[TransformationNode]):
        """
        Build the level index.

        Args:
            nodes: All nodes of the lattice, in engine order

        Raises:
            ValueError: no nodes, duplicates, or vectors of different length
        """
        self._levels: Dict[int, List[TransformationNode]] = defaultdict(list)
        self._index: Dict[Tuple[int, ...], TransformationNode] = {}

        for node in nodes:
            if node.transformation in self._index:
                raise ValueError(f"Duplicate lattice node {node}")
            self._index[node.transformation] = node
            self._levels[node.total_generalization_level].append(node)

        if not self._index:
            raise ValueError("Empty transformation lattice")

        widths = {len(t) for t in self._index}
        if len(widths) != 1:
            raise ValueError(f"Inconsistent transformation widths: {sorted(widths)}")

        self.bottom = min(self._index.values(), key=lambda n: n.total_generalization_level)
        self.top = max(self._index.values(), key=lambda n: n.total_generalization_level)

    @classmethod
    def from_max_levels(cls, max_levels: Sequence[int]) -> "TransformationLattice":
        """Full lattice over the given per-attribute maximal levels, levels in lexicographic order."""
        ranges = [range(m + 1) for m in max_levels]
        nodes = [TransformationNode(tuple(t)) for t in itertools.product(*ranges)]
        nodes.sort(key=lambda n: n.total_generalization_level)
        return cls(nodes)

    def get_level(self, level: int) -> List[TransformationNode]:
        """Nodes with the given total generalization level (possibly none)."""
        return list(self._levels.get(level, []))

    @property
    def levels(self) -> List[List[TransformationNode]]:
        """Nodes grouped by level, for levels 0..top.total_generalization_level."""
        return [self.get_level(level) for level in range(self.top.total_generalization_level + 1)]

    def iter_nodes(self) -> Iterator[TransformationNode]:
        """All nodes, level by level in ascending order, engine order within a level."""
        for nodes in self.levels:
            yield from nodes

    def get_node(self, transformation: Sequence[int]) -> TransformationNode:
        return self._index[tuple(transformation)]

    def children(self, node: TransformationNode) -> List[TransformationNode]:
        """Direct successors: one attribute generalized by exactly one more level."""
        successors = []
        for i in range(len(node.transformation)):
            candidate = list(node.transformation)
            candidate[i] += 1
            successor = self._index.get(tuple(candidate))
            if successor is not None:
                successors.append(successor)
        return successors

    def __contains__(self, node: TransformationNode) -> bool:
        return node.transformation in self._index

    def __len__(self) -> int:
        return len(self._index)


class DataHandle(ABC):
    """
    Materialized output of one transformation.

    Handles hold engine resources until release() is called and must not be
    used afterwards.
    """

    @property
    @abstractmethod
    def frame(self) -> pd.DataFrame:
        """Transformed records (suppressed cells as the engine renders them)."""
        pass

    @abstractmethod
    def granularity(self) -> pd.DataFrame:
        """Per-record granularity of each quasi-identifier, in [0, 1]."""
        pass

    @abstractmethod
    def release(self) -> None:
        """Free the resources held by the handle."""
        pass


class AnonymizationResult(ABC):
    """Result of one engine invocation: the lattice and access to its outputs."""

    @property
    @abstractmethod
    def lattice(self) -> TransformationLattice:
        pass

    @abstractmethod
    def get_output(self, node: TransformationNode) -> DataHandle:
        """Materialize the output of a node."""
        pass

    @abstractmethod
    def optimize_iterative_fast(self, output: DataHandle, records_per_iteration: float) -> None:
        """
        Refine a materialized output in place by local generalization.

        Args:
            output: Output previously returned by get_output()
            records_per_iteration: Share of the refinement space processed
                                   per iteration, in (0, 1]
        """
        pass


class AnonymizationEngine(ABC):
    """Anonymization search engine."""

    @abstractmethod
    def anonymize(self, data: Data, config: PrivacyConfiguration) -> AnonymizationResult:
        """
        Search the solution space of a configured dataset.

        Args:
            data: Dataset handle with attribute roles
            config: Privacy criteria, suppression limit and quality model

        Returns:
            AnonymizationResult exposing the transformation lattice
        """
        pass


def load_engine(factory: str, options: Dict[str, Any] = None) -> AnonymizationEngine:
    """
    Instantiate an engine from a 'module:attribute' reference.

    Args:
        factory: Dotted module path and attribute name, e.g. 'arx_bridge:Engine'
        options: Keyword arguments passed to the factory

    Returns:
        AnonymizationEngine instance

    Raises:
        ConfigurationError: reference malformed, not importable, or not an engine
    """
    if not factory or ":" not in factory:
        raise ConfigurationError(
            f"Engine factory must be given as 'module:attribute', got {factory!r}"
        )

    module_name, attribute = factory.split(":", 1)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import engine module '{module_name}'") from e

    if not hasattr(module, attribute):
        raise ConfigurationError(f"Module '{module_name}' does not define '{attribute}'")

    engine = getattr(module, attribute)(**(options or {}))
    if not isinstance(engine, AnonymizationEngine):
        raise ConfigurationError(f"'{factory}' did not produce an AnonymizationEngine")

    logger.info(f"Using anonymization engine {type(engine).__name__} from {module_name}")
    return engine
