# =============================================================================
# data_loader.py
# =============================================================================
# Module for loading benchmark datasets and generalization hierarchies, and
# for attaching attribute roles to a dataset before anonymization.
#
# This module handles:
#   - Loading the semicolon-separated benchmark datasets (Census, Health
#     interviews) into pandas DataFrames
#   - Loading per-attribute generalization hierarchy files
#   - The dataset handle (data + role map + response variable)
#   - Configuring a handle for one (dataset, sensitive attribute, model) run
#
# File layout (relative to the loader's base directory):
#   data/ss13acs.csv, data/ihis.csv
#   hierarchies/<dataset-prefix><attribute>.csv
#
# Hierarchy files have no header: column 0 holds the raw value, column i the
# value generalized to level i.
# =============================================================================

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .benchmark_setup import (
    CSV_SEPARATOR,
    BenchmarkDataset,
    PrivacyModel,
    get_dataset_spec,
)
from .exceptions import ConfigurationError, DatasetLoadError, HierarchyLoadError

# Configure logging
logger = logging.getLogger(__name__)


class AttributeType(Enum):
    """Role of an attribute during anonymization."""

    QUASI_IDENTIFYING = "quasi-identifying"
    SENSITIVE = "sensitive"
    INSENSITIVE = "insensitive"


class Hierarchy:
    """
    Generalization hierarchy of a single attribute.

    The hierarchy is kept as a table: one row per raw value, one column per
    generalization level. Interpreting the levels is left to the
    anonymization engine.

    Attributes:
        attribute (str): Attribute the hierarchy belongs to
        table (pd.DataFrame): Raw hierarchy table (all values as strings)
    """

    def __init__(self, attribute: str, table: pd.DataFrame):
        if table.empty:
            raise ValueError(f"Empty hierarchy for attribute '{attribute}'")
        self.attribute = attribute
        self.table = table

    @property
    def max_level(self) -> int:
        """Highest generalization level (0 = raw values)."""
        return self.table.shape[1] - 1

    @property
    def values(self) -> List[str]:
        """Raw (level 0) values covered by the hierarchy."""
        return self.table.iloc[:, 0].tolist()

    def __len__(self) -> int:
        return len(self.table)

    def __repr__(self) -> str:
        return (f"Hierarchy(attribute='{self.attribute}', values={len(self)}, "
                f"max_level={self.max_level})")


class DataDefinition:
    """
    Role map of a dataset handle.

    Every attribute not explicitly configured is treated as insensitive.
    Exactly one attribute can be the response variable; setting a new one
    replaces the previous choice.
    """

    def __init__(self):
        self._types: Dict[str, AttributeType] = {}
        self._hierarchies: Dict[str, Hierarchy] = {}
        self.response_variable: Optional[str] = None

    def set_attribute_type(
        self,
        attribute: str,
        attribute_type: AttributeType,
        hierarchy: Optional[Hierarchy] = None
    ) -> None:
        """
        Assign a role to an attribute.

        Args:
            attribute: Attribute name
            attribute_type: Role to assign
            hierarchy: Generalization hierarchy, required for quasi-identifiers
        """
        if attribute_type is AttributeType.QUASI_IDENTIFYING:
            if hierarchy is None:
                raise ValueError(f"Quasi-identifier '{attribute}' requires a hierarchy")
            self._hierarchies[attribute] = hierarchy
        else:
            self._hierarchies.pop(attribute, None)
        self._types[attribute] = attribute_type

    def set_response_variable(self, attribute: str) -> None:
        self.response_variable = attribute

    def get_attribute_type(self, attribute: str) -> AttributeType:
        return self._types.get(attribute, AttributeType.INSENSITIVE)

    def get_hierarchy(self, attribute: str) -> Optional[Hierarchy]:
        return self._hierarchies.get(attribute)

    @property
    def quasi_identifiers(self) -> List[str]:
        return [a for a, t in self._types.items() if t is AttributeType.QUASI_IDENTIFYING]

    @property
    def sensitive_attributes(self) -> List[str]:
        return [a for a, t in self._types.items() if t is AttributeType.SENSITIVE]


class Data:
    """
    Dataset handle: tabular data plus its role map.

    Attributes:
        dataset (BenchmarkDataset): Benchmark dataset the data belongs to
        frame (pd.DataFrame): Records, all values as strings
        definition (DataDefinition): Attribute roles
    """

    def __init__(self, dataset: BenchmarkDataset, frame: pd.DataFrame):
        self.dataset = dataset
        self.frame = frame
        self.definition = DataDefinition()

    @property
    def attributes(self) -> List[str]:
        return self.frame.columns.tolist()

    def __len__(self) -> int:
        return len(self.frame)

    def __repr__(self) -> str:
        return f"Data(dataset='{self.dataset}', records={len(self)})"


class DataLoader:
    """
    Loads benchmark datasets and generalization hierarchies from storage.

    Parsed tables are cached per file, so repeated runs on the same dataset
    only pay for parsing once. Every call to load_data() returns a new
    handle holding its own copy of the records and an empty role map.

    Attributes:
        base_dir (Path): Directory holding data/ and hierarchies/

    Example:
        >>> loader = DataLoader(".")
        >>> data = loader.load_data(BenchmarkDataset.CENSUS)
        >>> hierarchy = loader.load_hierarchy(BenchmarkDataset.CENSUS, "Age")
    """

    def __init__(self, base_dir: str = "."):
        """
        Initialize the DataLoader.

        Args:
            base_dir: Directory holding the data/ and hierarchies/ folders
        """
        self.base_dir = Path(base_dir)

        if not self.base_dir.is_dir():
            raise ConfigurationError(f"Benchmark directory not found: {self.base_dir}")

        # Cache of parsed tables, keyed by file path
        self._cache: Dict[Path, pd.DataFrame] = {}

        logger.info(f"DataLoader initialized with base_dir: {self.base_dir}")

    def _read_table(self, filepath: Path, header: Optional[int]) -> pd.DataFrame:
        if filepath not in self._cache:
            logger.info(f"Loading {filepath}")
            self._cache[filepath] = pd.read_csv(
                filepath,
                sep=CSV_SEPARATOR,
                encoding="utf-8",
                header=header,
                dtype=str,
                keep_default_na=False,
            )
        return self._cache[filepath]

    def load_data(self, dataset: BenchmarkDataset) -> Data:
        """
        Load a benchmark dataset.

        Args:
            dataset: Dataset to load

        Returns:
            New Data handle with an empty role map

        Raises:
            DatasetLoadError: file missing or unparseable
        """
        filepath = self.base_dir / get_dataset_spec(dataset).data_path
        try:
            frame = self._read_table(filepath, header=0)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise DatasetLoadError(f"Cannot load dataset {dataset} from {filepath}: {e}") from e

        logger.debug(f"Loaded {len(frame)} records of {dataset}")
        # The cached table is shared; each handle gets its own copy
        return Data(dataset, frame.copy())

    def load_hierarchy(self, dataset: BenchmarkDataset, attribute: str) -> Hierarchy:
        """
        Load the generalization hierarchy of an attribute.

        Args:
            dataset: Dataset the attribute belongs to
            attribute: Attribute name

        Returns:
            Hierarchy for the attribute

        Raises:
            HierarchyLoadError: file missing, empty or unparseable
        """
        filepath = self.base_dir / get_dataset_spec(dataset).hierarchy_path(attribute)
        try:
            table = self._read_table(filepath, header=None)
            return Hierarchy(attribute, table)
        except (OSError, ValueError, UnicodeDecodeError) as e:
            # pandas parser errors are ValueError subclasses
            raise HierarchyLoadError(
                f"Cannot load hierarchy for '{attribute}' of {dataset} from {filepath}: {e}"
            ) from e


def configure_data(
    loader: DataLoader,
    dataset: BenchmarkDataset,
    sensitive: str,
    model: PrivacyModel
) -> Data:
    """
    Load a dataset and attach the roles needed for one benchmark run.

    - Every quasi-identifier is bound to its generalization hierarchy.
    - The sensitive attribute is SENSITIVE for disclosure models and
      INSENSITIVE for plain k-anonymity.
    - The sensitive attribute is the response variable of the classifier.

    Args:
        loader: Loader for datasets and hierarchies
        dataset: Benchmark dataset
        sensitive: Sensitive attribute under test
        model: Privacy model under test

    Returns:
        Configured Data handle

    Raises:
        DatasetLoadError, HierarchyLoadError
    """
    data = loader.load_data(dataset)
    definition = data.definition

    for attribute in get_dataset_spec(dataset).quasi_identifiers:
        definition.set_attribute_type(
            attribute,
            AttributeType.QUASI_IDENTIFYING,
            loader.load_hierarchy(dataset, attribute),
        )

    if model.is_disclosure_model:
        definition.set_attribute_type(sensitive, AttributeType.SENSITIVE)
    else:
        definition.set_attribute_type(sensitive, AttributeType.INSENSITIVE)

    definition.set_response_variable(sensitive)

    return data
