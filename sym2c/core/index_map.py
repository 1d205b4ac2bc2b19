"""Identifier-to-index map construction

The position of a variable in the caller's parameter list is its index in
the generated code's parameter array ``p``.
"""

import logging
from types import MappingProxyType
from typing import Dict, Mapping, Sequence

from sym2c.core.errors import DuplicateParameterError
from sym2c.core.expression import Variable

logger = logging.getLogger(__name__)

IdToIndexMap = Mapping[int, int]


def build_index_map(parameters: Sequence[Variable], policy: str = "error") -> IdToIndexMap:
    """Build a read-only map from variable id to parameter position

    Args:
        parameters: Ordered parameter variables
        policy: "error" to reject a repeated variable, "first_wins" to keep
            the earlier position, "last_wins" to keep the later one

    Returns:
        Read-only mapping of Variable.id to index

    Raises:
        DuplicateParameterError: If a variable repeats and policy is "error"
    """
    id_to_idx: Dict[int, int] = {}
    for i, variable in enumerate(parameters):
        previous = id_to_idx.get(variable.id)
        if previous is not None:
            if policy == "error":
                raise DuplicateParameterError(variable, previous, i)
            kept = previous if policy == "first_wins" else i
            logger.warning(
                "Parameter '%s' listed at %d and %d, using index %d",
                variable.name, previous, i, kept,
            )
            if kept == previous:
                continue
        id_to_idx[variable.id] = i
    return MappingProxyType(id_to_idx)
