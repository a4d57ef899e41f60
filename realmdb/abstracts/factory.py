##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
A reusable base for name-keyed component factories.

`RealmBaseFactory` keeps a registry of component classes under canonical names and
aliases, fills it with built-ins on construction, and falls back to the components
published under an entry point group when a name is unknown. Subclasses decide which
classes are acceptable and which error an unknown name raises.
"""

import logging
from abc import ABC, abstractmethod
from importlib.metadata import entry_points
from typing import Any, Dict, List, NoReturn


LOG = logging.getLogger(__name__)


class RealmBaseFactory(ABC):
    """
    Abstract factory mapping names to component classes.

    Subclasses must implement `_register_builtins`, `_validate_component` and
    `_entry_point_group`, and may override `_unsupported`.

    Attributes:
        _registry (Dict[str, Any]): Canonical name to component class.
        _aliases (Dict[str, str]): Alias to canonical name.

    Methods:
        register: Register a component class and its aliases.
        list_available: The canonical names of every known component.
        create: Instantiate a component by name or alias.
        get_component_info: Metadata about a component.
    """

    def __init__(self):
        self._registry: Dict[str, Any] = {}
        self._aliases: Dict[str, str] = {}
        self._register_builtins()

    @abstractmethod
    def _register_builtins(self):
        """Register the components shipped with RealmDB."""

    @abstractmethod
    def _validate_component(self, component_class: Any):
        """
        Reject classes that cannot be registered.

        Args:
            component_class: The candidate class.

        Raises:
            TypeError: If `component_class` is not acceptable.
        """

    @abstractmethod
    def _entry_point_group(self) -> str:
        """The entry point group third-party components are published under."""

    def _unsupported(self, msg: str) -> NoReturn:
        """
        Raise the error for an unknown component name.

        Args:
            msg: The error message.
        """
        raise ValueError(msg)

    def _discover_plugins(self):
        for entry_point in entry_points(group=self._entry_point_group()):
            if entry_point.name in self._registry:
                continue
            try:
                self.register(entry_point.name, entry_point.load())
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOG.warning(f"Skipping component '{entry_point.name}' from entry point: {exc}")
            else:
                LOG.info(f"Loaded component '{entry_point.name}' from entry point.")

    def _resolve(self, name: str) -> Any:
        canonical_name = self._aliases.get(name, name)
        if canonical_name not in self._registry:
            self._discover_plugins()
        component_class = self._registry.get(canonical_name)
        if component_class is None:
            self._unsupported(f"Component '{name}' is not supported. Available components: {', '.join(self._registry)}")
        return component_class

    def register(self, name: str, component_class: Any, aliases: List[str] = None):
        """
        Register a component class.

        Args:
            name: The canonical name.
            component_class: The class to register.
            aliases: Alternative names for the component.

        Raises:
            TypeError: If `_validate_component` rejects the class.
        """
        self._validate_component(component_class)
        self._registry[name] = component_class
        for alias in aliases or []:
            self._aliases[alias] = name
        LOG.debug(f"Registered component '{name}' (aliases: {aliases or []}).")

    def list_available(self) -> List[str]:
        """
        Return the canonical names of every known component, including discovered ones.

        Returns:
            The names, built-ins first.
        """
        self._discover_plugins()
        return list(self._registry)

    def create(self, name: str, config: Dict = None) -> Any:
        """
        Instantiate a component.

        Args:
            name: The canonical name or an alias.
            config: Keyword arguments for the component's constructor.

        Returns:
            The new component.

        Raises:
            ValueError: If the constructor fails.
        """
        component_class = self._resolve(name)
        try:
            return component_class(**(config or {}))
        except Exception as exc:
            raise ValueError(f"Failed to create component '{self._aliases.get(name, name)}': {exc}") from exc

    def get_component_info(self, name: str) -> Dict[str, str]:
        """
        Describe a registered component.

        Args:
            name: The canonical name or an alias.

        Returns:
            The component's canonical name, class name, module and docstring.
        """
        component_class = self._resolve(name)
        return {
            "name": self._aliases.get(name, name),
            "class": component_class.__name__,
            "module": component_class.__module__,
            "description": (component_class.__doc__ or "No description available").strip(),
        }
