"""Expression visitor base class for sym2c

Provides a visitor pattern for traversing expression nodes, dispatched on
the node's kind tag rather than its Python class.
"""

from abc import ABC
from typing import Any, List

from sym2c.core.expression import Expression, ExpressionKind


def visit_method_name(kind: ExpressionKind) -> str:
    """Get the visitor method name handling a node kind

    Args:
        kind: Expression kind

    Returns:
        Method name (e.g., "visit_Addition")
    """
    return f"visit_{kind.value}"


class ExpressionVisitor(ABC):
    """Base visitor over the closed set of expression kinds

    Concrete subclasses must define a visit_<Kind> method for every
    ExpressionKind. A subclass that misses one is rejected when the class
    statement executes, so a forgotten or newly added kind surfaces at
    import time instead of on the first expression that contains it.
    Intermediate helper classes can opt out with ``partial=True``.
    """

    def __init_subclass__(cls, partial: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if partial:
            return
        missing = cls.missing_visit_methods()
        if missing:
            raise TypeError(
                f"{cls.__name__} does not handle expression kinds: {', '.join(missing)}"
            )

    @classmethod
    def missing_visit_methods(cls) -> List[str]:
        """List expression kinds without a visit method

        Returns:
            Kind names lacking a visit_<Kind> method
        """
        return [
            kind.value for kind in ExpressionKind
            if not callable(getattr(cls, visit_method_name(kind), None))
        ]

    def visit(self, node: Expression) -> Any:
        """Visit a node using double-dispatch on its kind

        Args:
            node: Expression node to visit

        Returns:
            Result from the visit method
        """
        method = getattr(self, visit_method_name(node.kind))
        return method(node)
