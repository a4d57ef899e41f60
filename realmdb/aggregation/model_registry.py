##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other RealmDB
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to RealmDB.
##############################################################################

"""
The model registry.

Logical model names are unique across the whole realm tree. Registering the very
same model definition again (e.g. when a plugin is registered twice) is a no-op,
while a different definition under an existing name is a `DuplicateModelError`.
Registration is split into `prepare` (all checks, no mutation) and `commit` so that
a failing contribution never leaves partial state behind.
"""

import logging
from typing import Any, Dict, List, Type

from realmdb.exceptions import DuplicateModelError, LateRegistrationError
from realmdb.host.realm import Realm
from realmdb.models.loader import normalize_models
from realmdb.models.model import Model


LOG = logging.getLogger(__name__)


class ModelRegistry:
    """
    Tree-wide store of model definitions with realm-scoped views.

    Attributes:
        models (Dict[str, Type[Model]]): Flat mapping of logical name to model, tree-wide.

    Methods:
        prepare: Normalize and check a model contribution without storing it.
        commit: Store models checked by `prepare`.
        register: `prepare` then `commit`.
        view: The models visible at a realm, locally or tree-wide.
        owner: The realm that first registered a model.
        names_owned_by: The names first registered by a realm.
        rebind: Replace stored models with their bound variants.
        freeze: Refuse any further registration.
    """

    def __init__(self):
        self.models: Dict[str, Type[Model]] = {}
        self._owners: Dict[str, Realm] = {}
        self._local: Dict[Realm, List[str]] = {}
        self._frozen: bool = False

    @property
    def frozen(self) -> bool:
        """True once registration is closed."""
        return self._frozen

    def freeze(self):
        """
        Refuse any further registration.
        """
        self._frozen = True

    def prepare(self, realm: Realm, model_defs: Any) -> List[Type[Model]]:
        """
        Normalize a model contribution and check it for collisions.

        Args:
            realm: The contributing realm.
            model_defs: A model, a list of models, or a path/glob to model files.

        Returns:
            The models to store, deduplicated, in contribution order.

        Raises:
            LateRegistrationError: If registration is closed.
            DuplicateModelError: If a different definition already uses one of the names.
        """
        if self._frozen:
            raise LateRegistrationError(
                f'Cannot register models in realm "{realm.name}" after the pre-start phase has begun.'
            )

        staged: Dict[str, Type[Model]] = {}
        for model in normalize_models(model_defs, realm.path):
            name = model.__name__
            if name in staged:
                existing, registered_in = staged[name], realm
            else:
                existing, registered_in = self.models.get(name), self._owners.get(name)
            if existing is not None and existing is not model:
                raise DuplicateModelError(name, registered_in.name, realm.name)
            staged[name] = model
        return list(staged.values())

    def commit(self, realm: Realm, models: List[Type[Model]]):
        """
        Store models returned by `prepare`.

        Args:
            realm: The contributing realm.
            models: The checked models.
        """
        local = self._local.setdefault(realm, [])
        for model in models:
            name = model.__name__
            if name not in self.models:
                self.models[name] = model
                self._owners[name] = realm
                LOG.debug(f'Registered model "{name}" in realm "{realm.name}".')
            if name not in local:
                local.append(name)

    def register(self, realm: Realm, model_defs: Any) -> List[Type[Model]]:
        """
        Register a model contribution.

        Args:
            realm: The contributing realm.
            model_defs: A model, a list of models, or a path/glob to model files.

        Returns:
            The registered models.
        """
        models = self.prepare(realm, model_defs)
        self.commit(realm, models)
        return models

    def view(self, realm: Realm, include_descendants: bool = False) -> Dict[str, Type[Model]]:
        """
        Return the models visible at `realm`.

        Args:
            realm: The realm asking.
            include_descendants: If True, return every model in the tree. Otherwise
                return only the models contributed directly at `realm`.

        Returns:
            A new dict of logical name to model. Empty if nothing was contributed.
        """
        if include_descendants:
            return dict(self.models)
        return {name: self.models[name] for name in self._local.get(realm, [])}

    def owner(self, name: str) -> Realm:
        """
        Return the realm that first registered `name`.

        Args:
            name: A logical model name.

        Returns:
            The owning realm.
        """
        return self._owners[name]

    def names_owned_by(self, realm: Realm) -> List[str]:
        """
        Return the names first registered by `realm`, in registration order.

        Args:
            realm: A realm.

        Returns:
            The logical names owned by the realm.
        """
        return [name for name, owner in self._owners.items() if owner is realm]

    def rebind(self, models: Dict[str, Type[Model]]):
        """
        Replace stored models, keeping their names and owners.

        Args:
            models: A mapping of logical name to the replacement model.
        """
        for name, model in models.items():
            if name not in self.models:
                raise KeyError(f'Model "{name}" is not registered.')
            self.models[name] = model
