from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, Mapping, Optional, Sequence

from pydantic import BaseModel

from plugstore.base import ABSENT

if TYPE_CHECKING:  # pragma: no cover - typing only
    from plugstore.store import SimpleStore

logger = logging.getLogger(__name__)


class BasePlugin:
    """Brief: Base class for all store plugins.

    Plugins hook two points of the store pipeline:
      - on_set(): side-effect fan-out. Every installed plugin sees the same
        (key, new_value, options, old_value); return values are ignored.
      - on_get(): transform chain. Each plugin receives the previous plugin's
        output and returns the value handed to the next one.

    Plugins may also contribute extra store operations through
    capabilities(), which the store exposes as bound methods (for example the
    TTL plugin contributes set_ttl/get_ttl).

    Inputs:
      - name: Optional human-friendly identifier used in logs and lookups.
        When omitted, the first alias (or the class name) is used.
      - **config: Plugin configuration. When the subclass defines
        get_config_model(), the config is validated by that pydantic model and
        the result is kept on self.options.

    Outputs:
      - Initialized plugin instance.

    Example use:
        >>> from plugstore.plugins.base import BasePlugin
        >>> class Upper(BasePlugin):
        ...     def on_get(self, store, key, value):
        ...         return value.upper() if isinstance(value, str) else value
        >>> Upper(name="upper").name
        'upper'
    """

    aliases: ClassVar[Sequence[str]] = ()

    @classmethod
    def get_aliases(cls) -> Sequence[str]:
        """Brief: Return plugin aliases used for discovery.

        Inputs:
          - None

        Outputs:
          - tuple[str, ...]: Sequence of alias strings (may be empty).
        """
        return tuple(getattr(cls, "aliases", ()))

    @classmethod
    def get_config_model(cls) -> Optional[type[BaseModel]]:
        """Brief: Return the pydantic model validating this plugin's config.

        Inputs:
          - None.

        Outputs:
          - BaseModel subclass, or None when the plugin takes free-form config.
        """

        return None

    def __init__(self, name: Optional[str] = None, **config: object) -> None:
        if name is not None:
            self.name = str(name)
        else:
            aliases = list(self.get_aliases())
            self.name = str(aliases[0]) if aliases else self.__class__.__name__

        self.config: Dict[str, object] = dict(config)
        model = self.get_config_model()
        self.options: Optional[BaseModel] = model(**self.config) if model else None
        self.logger = logging.getLogger(
            getattr(self.__class__, "__module__", __name__)
        )
        logger.debug("loading %s", self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"

    def on_set(
        self,
        store: "SimpleStore",
        key: str,
        new_value: Any,
        options: Mapping[str, Any],
        old_value: Any,
    ) -> None:
        """Brief: Observe a completed set() call.

        Inputs:
          - store: SimpleStore that performed the write.
          - key: Written key.
          - new_value: Value now stored under key.
          - options: Options mapping passed to set() (never None).
          - old_value: Previous value, or ABSENT when the key was new.

        Outputs:
          - None. Raised exceptions are logged by the store and skipped.
        """

        return None

    def on_get(self, store: "SimpleStore", key: str, value: Any) -> Any:
        """Brief: Transform a value read by get()/has().

        Inputs:
          - store: SimpleStore performing the read.
          - key: Requested key.
          - value: Output of the previous plugin (raw stored value for the
            first one), or ABSENT.

        Outputs:
          - Value handed to the next plugin; return ABSENT to hide the key.
        """

        return value

    def capabilities(self) -> Dict[str, Callable[..., Any]]:
        """Brief: Extra operations this plugin adds to the store surface.

        Inputs:
          - None.

        Outputs:
          - dict mapping operation name to a callable whose first positional
            argument is the SimpleStore. The store binds it on lookup.
        """

        return {}


def plugin_aliases(*aliases: str):
    """Brief: Decorator to set aliases on a plugin class for registry discovery.

    Inputs:
      - *aliases: Variable number of alias strings.

    Outputs:
      - Callable that applies the aliases to a plugin class and returns it.

    Example:
        >>> @plugin_aliases("ttl", "expiry")
        ... class TtlPlugin(BasePlugin):
        ...     pass
        >>> TtlPlugin.aliases
        ('ttl', 'expiry')
    """

    def _wrap(cls: type) -> type:
        cls.aliases = tuple(aliases)
        return cls

    return _wrap


__all__ = ["ABSENT", "BasePlugin", "plugin_aliases"]
