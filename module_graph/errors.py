"""
Exceptions raised by the module graph engine
"""


class ModuleGraphError(Exception):
    """Base class for all module graph errors"""


class InternalConsistencyError(ModuleGraphError, AssertionError):
    """A graph that must be acyclic by construction turned out to contain a cycle.

    This is a programmer error, never a user error: callers should let it
    propagate instead of retrying or falling back to a partial order.
    """

    def __init__(self, message: str, edge=None):
        super().__init__(message)
        self.edge = edge


class CallerMisuseError(ModuleGraphError, ValueError):
    """The engine was called with arguments that violate its contract"""


class UnknownNodeError(CallerMisuseError):
    """An edge endpoint is not a member of the graph's node set"""

    def __init__(self, node):
        super().__init__(f"Node {node!r} is not part of the graph")
        self.node = node


class SelfDependencyError(CallerMisuseError):
    """A circularity probe was asked about an edge from a node to itself"""

    def __init__(self, node):
        super().__init__(f"Cannot probe a dependency of {node!r} on itself")
        self.node = node


class ProjectFormatError(ModuleGraphError, ValueError):
    """A project description could not be parsed"""
