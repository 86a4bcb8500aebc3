from __future__ import annotations

import logging

from .properties import RawProperty, VCardProperty
from .scribe import VCardPropertyScribe
from .scribes import RawPropertyScribe, standard_scribes

logger = logging.getLogger(__name__)

_STANDARD = standard_scribes()
_BY_NAME = {s.property_name: s for s in _STANDARD}
_BY_CLASS = {s.property_class: s for s in _STANDARD}
_BY_QNAME = {s.qname: s for s in _STANDARD}


class ScribeIndex:
    """Finds the scribe for a property name, class, instance or xCard element name.

    Extension scribes registered on an index take precedence over the
    standard ones, but only for that index.
    """

    def __init__(self):
        self._by_name: dict[str, VCardPropertyScribe] = {}
        self._by_class: dict[type, VCardPropertyScribe] = {}
        self._by_qname: dict[str, VCardPropertyScribe] = {}

    def register(self, scribe: VCardPropertyScribe) -> None:
        logger.debug("registering scribe %s for %s", scribe, scribe.property_class.__name__)
        self._by_name[scribe.property_name] = scribe
        self._by_class[scribe.property_class] = scribe
        self._by_qname[scribe.qname] = scribe

    def unregister(self, scribe: VCardPropertyScribe) -> None:
        self._by_name.pop(scribe.property_name, None)
        self._by_class.pop(scribe.property_class, None)
        self._by_qname.pop(scribe.qname, None)

    def get_property_scribe(self, name: str) -> VCardPropertyScribe | None:
        key = name.upper()
        return self._by_name.get(key) or _BY_NAME.get(key)

    def get_property_scribe_for_class(self, cls: type[VCardProperty]) -> VCardPropertyScribe | None:
        return self._by_class.get(cls) or _BY_CLASS.get(cls)

    def get_property_scribe_for(self, prop: VCardProperty) -> VCardPropertyScribe | None:
        if isinstance(prop, RawProperty):
            return RawPropertyScribe(prop.name)
        return self.get_property_scribe_for_class(type(prop))

    def get_property_scribe_by_qname(self, qname: str) -> VCardPropertyScribe | None:
        return self._by_qname.get(qname) or _BY_QNAME.get(qname)

    def scribe_or_raw(self, name: str) -> VCardPropertyScribe:
        """The registered scribe for ``name``, or one that keeps the value as is."""
        return self.get_property_scribe(name) or RawPropertyScribe(name)

    def has_property_scribe(self, cls: type[VCardProperty]) -> bool:
        return self.get_property_scribe_for_class(cls) is not None
