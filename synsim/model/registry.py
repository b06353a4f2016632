"""
Registry of node classes, for building nodes from a type name
"""

from typing import Callable, Dict, Optional, Type

from synsim.model.node import Node

__all__ = ["register_node_class", "get_node_class", "create_node", "list_node_classes"]

# - Dictionary {type name} -> {node factory}
_NODE_CLASSES: Dict[str, Callable[..., Node]] = {}


def register_node_class(cls: Optional[Type[Node]] = None, name: Optional[str] = None):
    """
    Register a node class under a type name

    Can be called directly, or used as a class decorator with or without a name:

    >>> @register_node_class
    ... class MyNode(NodeBase): ...

    >>> @register_node_class(name="custom")
    ... class OtherNode(NodeBase): ...

    :param Optional[Type[Node]] cls:    The node class, or any callable returning a `.Node`
    :param Optional[str] name:          Type name to register under. Default: ``cls.__name__``

    :return:                            ``cls``, or a decorator if ``cls`` is ``None``
    """

    def register(node_class):
        tag = node_class.__name__ if name is None else name
        if not callable(node_class):
            raise TypeError(f"Cannot register `{tag}`: a node class must be callable.")
        _NODE_CLASSES[tag] = node_class
        return node_class

    if cls is None:
        return register

    return register(cls)


def get_node_class(name: str) -> Callable[..., Node]:
    """
    Return the node class registered under a type name

    :raises KeyError: If no class is registered under ``name``
    """
    try:
        return _NODE_CLASSES[name]
    except KeyError:
        raise KeyError(
            f"No node class registered as `{name}`. Registered classes: {sorted(_NODE_CLASSES)}."
        )


def create_node(name: str, *args, **kwargs) -> Node:
    """
    Build a node from its registered type name

    :param str name:    Registered type name
    :param args:        Positional arguments for the node constructor
    :param kwargs:      Keyword arguments for the node constructor

    :raises KeyError: If no class is registered under ``name``
    """
    return get_node_class(name)(*args, **kwargs)


def list_node_classes() -> Dict[str, Callable[..., Node]]:
    """Return a copy of the registry"""
    return dict(_NODE_CLASSES)
