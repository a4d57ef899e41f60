##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
Plugin registration and phase hooks.

`Host` owns the root realm. Registering a plugin creates a child realm under the
registering realm and hands the plugin a `PluginServer` bound to that child realm.
Through it a plugin can register nested plugins, hook into phases, set its base path,
and call the accessors other plugins exposed with `Host.decorate`.
"""

import functools
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from realmdb.common.enums import Phase
from realmdb.host.realm import Realm
from realmdb.log_formatter import setup_logging
from realmdb.utils import resolve_path


LOG = logging.getLogger(__name__)


class Plugin(Protocol):
    """
    What a host expects from a plugin.

    Attributes:
        name (str): The plugin's name, used to name its realm.
    """

    name: str

    def register(self, server: "PluginServer", options: Any = None):
        """
        Register the plugin.

        Args:
            server: The plugin's view of the host, bound to the plugin's realm.
            options: Options passed at registration.
        """


class PluginServer:
    """
    A plugin's view of the host, bound to one realm.

    Decorations added with `Host.decorate` are available as methods whose first
    argument (the realm) is filled in automatically.

    Attributes:
        host (Host): The host.
        realm (Realm): The realm this view is bound to.
    """

    def __init__(self, host: "Host", realm: Realm):
        self.host = host
        self.realm = realm

    def register(self, plugin: Plugin, options: Any = None) -> Realm:
        """
        Register a nested plugin under this realm.

        Args:
            plugin: The plugin to register.
            options: Options for the plugin.

        Returns:
            The realm created for the plugin.
        """
        return self.host.register(plugin, options, parent=self.realm)

    def ext(self, phase: Phase, callback: Callable[["Host"], None]):
        """
        Run `callback` during `phase`.

        Args:
            phase: The phase to hook into.
            callback: Called with the host.
        """
        self.host.ext(phase, callback)

    def path(self, directory: str):
        """
        Set the base directory for relative paths contributed at this realm.

        Args:
            directory: The base directory.
        """
        self.realm.path = resolve_path(directory)

    def __getattr__(self, name: str) -> Callable:
        host = self.__dict__.get("host")
        if host is not None and host.has_decoration(name):
            return functools.partial(host._decorations[name], self.realm)
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")


class Host:
    """
    Owner of a realm tree and its phase hooks.

    Attributes:
        root (Realm): The root realm.
        server (PluginServer): The view bound to the root realm.
        registrations (Dict[str, int]): How many times each plugin name was registered.

    Methods:
        register: Register a plugin under a realm.
        ext: Add a callback to a phase.
        decorate: Expose an accessor on every `PluginServer`.
        initialize: Run the pre-start phase.
        stop: Run the post-stop phase.
    """

    def __init__(self, name: str = "root", log_level: str = None):
        """
        Initialize the host.

        Args:
            name: The root realm's name.
            log_level: If given, configure the `realmdb` logger at this level.
        """
        if log_level is not None:
            setup_logging(logging.getLogger("realmdb"), log_level)

        self.root = Realm(name)
        self.server = PluginServer(self, self.root)
        self.registrations: Dict[str, int] = {}
        self._extensions: Dict[Phase, List[Callable]] = {phase: [] for phase in Phase}
        self._decorations: Dict[str, Callable] = {}

    def register(self, plugin: Plugin, options: Any = None, parent: Optional[Realm] = None) -> Realm:
        """
        Register a plugin.

        Args:
            plugin: The plugin to register.
            options: Options for the plugin.
            parent: The registering realm. Defaults to the root realm.

        Returns:
            The realm created for the plugin.
        """
        realm = Realm(plugin.name, parent or self.root)
        LOG.debug(f"Registering plugin '{plugin.name}' under realm '{realm.parent.name}'.")
        plugin.register(PluginServer(self, realm), options)
        self.registrations[plugin.name] = self.registrations.get(plugin.name, 0) + 1
        return realm

    def ext(self, phase: Phase, callback: Callable[["Host"], None]):
        """
        Run `callback` during `phase`. Callbacks run in the order they were added.

        Args:
            phase: The phase to hook into.
            callback: Called with the host.
        """
        self._extensions[phase].append(callback)

    def decorate(self, name: str, method: Callable):
        """
        Expose `method` on every `PluginServer` as `name`.

        Args:
            name: The accessor name.
            method: A callable taking the realm as its first argument.

        Raises:
            ValueError: If the name is already taken.
        """
        if name in self._decorations or hasattr(PluginServer, name):
            raise ValueError(f"Server decoration '{name}' is already defined.")
        self._decorations[name] = method

    def has_decoration(self, name: str) -> bool:
        """
        Check whether a decoration exists.

        Args:
            name: The accessor name.

        Returns:
            True if `name` has been decorated.
        """
        return name in self._decorations

    def _run(self, phase: Phase):
        LOG.debug(f"Running {len(self._extensions[phase])} '{phase.value}' extension(s).")
        for callback in self._extensions[phase]:
            callback(self)

    def initialize(self):
        """
        Run the pre-start phase.
        """
        self._run(Phase.PRE_START)

    def stop(self):
        """
        Run the post-stop phase.
        """
        self._run(Phase.POST_STOP)
