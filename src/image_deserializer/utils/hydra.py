"""Hydra ConfigStore registration for deserializers."""

from __future__ import annotations

from typing import Any

from hydra.core.config_store import ConfigStore
from loguru import logger


def register(
    cls: type[Any] | None = None,
    *,
    group: str | None = None,
    name: str | None = None,
    **defaults: Any,
) -> type[Any] | Any:
    """Class decorator storing a ``_target_`` node for ``cls`` in the ConfigStore.

    The group defaults to the package the class lives in (for
    ``image_deserializer.data.deserializer.X`` that is ``data``) and the name
    to the class name. Extra keyword arguments become default values of the
    node, e.g. ``_convert_="all"`` so that nested configs reach the
    constructor as plain containers.

    Group and name are resolved for each decorated class, so one
    ``register(group=...)`` decorator can be applied to several classes;
    it keeps no state between uses.
    """

    def _store(target_cls: type[Any]) -> type[Any]:
        module = target_cls.__module__
        node_group = group if group is not None else module.split(".")[-2]
        node_name = name or target_cls.__name__
        node: dict[str, Any] = {"_target_": f"{module}.{target_cls.__name__}"}
        node.update(defaults)
        logger.debug(f"Registering {node['_target_']} as '{node_group}/{node_name}'")
        ConfigStore.instance().store(group=node_group, name=node_name, node=node)
        return target_cls

    if cls is None:
        return _store
    return _store(cls)
