"""spam-tree -- incremental decision-tree text classifier."""

__version__ = "0.1.0"

from .config import Settings
from .dataset import DataLoader, Dataset, shuffle_together
from .exceptions import InvalidInputError, MalformedPersistedTreeError, SpamTreeError
from .features import FeatureVector, tokenize
from .tree import DecisionTree, Leaf, Node, Split, midpoint

__all__ = [
    # Core
    "DecisionTree",
    "FeatureVector",
    "Leaf",
    "Node",
    "Split",
    "midpoint",
    "tokenize",
    # Data
    "DataLoader",
    "Dataset",
    "shuffle_together",
    # Configuration
    "Settings",
    # Errors
    "SpamTreeError",
    "InvalidInputError",
    "MalformedPersistedTreeError",
]
