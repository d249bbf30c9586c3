# SuggestionEngine.py
"""""
Autocomplete side of the Tag Formula Calculator.

- SuggestionEntry: one read-only catalog record {name, value, inputs?, category?}
- Catalog: the entries plus a load state that is resolved exactly once
- filter_suggestions: the visible list for the text currently typed
- fetch_catalog: the one-shot HTTP call that provides the entries
"""""

import httpx

from . import config_manager as config_manager
from . import error as E

# Debug toggle for optional prints in this module
debug = config_manager.load_setting_value("debug", False)


class SuggestionEntry:
    def __init__(self, name, value, inputs=None, category=None):
        self.name = name
        self.value = value
        self.inputs = inputs
        self.category = category

    @classmethod
    def from_dict(cls, raw):
        """Build an entry from a catalog record.

        A missing or non-string name is stored as None (the entry then never
        matches a query). A missing or blank value falls back to the name.
        """
        name = raw.get("name")
        if not isinstance(name, str):
            name = None
        value = raw.get("value")
        if value is None or (isinstance(value, str) and not value.strip()):
            value = name
        elif not isinstance(value, str):
            value = str(value)
        return cls(name, value, inputs=raw.get("inputs"), category=raw.get("category"))

    def __eq__(self, other):
        if not isinstance(other, SuggestionEntry):
            return NotImplemented
        return (self.name, self.value, self.inputs, self.category) == \
               (other.name, other.value, other.inputs, other.category)

    def __repr__(self):
        return f"SuggestionEntry({self.name!r}, value={self.value!r})"


def as_entry(entry):
    """Accept a SuggestionEntry or a raw catalog dict."""
    if isinstance(entry, SuggestionEntry):
        return entry
    return SuggestionEntry.from_dict(entry)


# -----------------------------
# Catalog (resolved once)
# -----------------------------

class CatalogState:
    NOT_LOADED = "not_loaded"
    LOADED = "loaded"
    FAILED = "failed"


class Catalog:
    """Session snapshot of the suggestion catalog.

    Starts NOT_LOADED and moves to LOADED or FAILED exactly once; later
    results are ignored. A failed catalog behaves like an empty one.
    """
    def __init__(self):
        self.state = CatalogState.NOT_LOADED
        self.entries = []
        self.error = None

    @property
    def resolved(self):
        return self.state != CatalogState.NOT_LOADED

    def resolve(self, entries):
        if self.resolved:
            if debug == True:
                print("Catalog already resolved, new entries ignored.")
            return False
        self.entries = [as_entry(entry) for entry in (entries or [])]
        self.state = CatalogState.LOADED
        return True

    def fail(self, error=None):
        if self.resolved:
            return False
        self.entries = []
        self.error = error
        self.state = CatalogState.FAILED
        if debug == True:
            print(f"Catalog unavailable: {error}")
        return True

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


# -----------------------------
# Filter
# -----------------------------

def filter_suggestions(catalog, query):
    """Return the catalog entries whose name contains query (case-insensitive).

    Blank queries give no suggestions, nor do entries without a usable
    value. Catalog order is kept.
    """
    if not query or not query.strip():
        return []
    needle = query.lower()
    return [entry for entry in catalog
            if isinstance(entry.name, str) and needle in entry.name.lower() and has_value(entry)]


def has_value(entry):
    """Entries without a usable value cannot become a chip."""
    return isinstance(entry.value, str) and bool(entry.value.strip())


# -----------------------------
# Catalog source
# -----------------------------

def fetch_catalog(url=None, timeout=None, client=None):
    """GET the catalog once and return a list of SuggestionEntry.

    Raises CatalogError for transport errors, non-200 answers and bodies
    that are not a JSON list.
    """
    if url is None:
        url = config_manager.load_setting_value("catalog_url", "")
    if timeout is None:
        timeout = config_manager.load_setting_value("catalog_timeout", 8)

    if client is None:
        with httpx.Client(timeout=timeout) as own_client:
            return _get_catalog(own_client, url, timeout)
    return _get_catalog(client, url, timeout)


def _get_catalog(client, url, timeout):
    try:
        r = client.get(url, timeout=timeout)
    except httpx.HTTPError as e:
        raise E.CatalogError(f"Catalog request failed: {e}", code="6001", equation=url) from e

    if r.status_code != 200:
        raise E.CatalogError(f"HTTP {r.status_code}", code="6002", equation=url)

    try:
        data = r.json()
    except ValueError as e:
        raise E.CatalogError("Catalog body is not JSON.", code="6003", equation=url) from e

    if not isinstance(data, list):
        raise E.CatalogError("Catalog body is not a list.", code="6003", equation=url)

    entries = [SuggestionEntry.from_dict(item) for item in data if isinstance(item, dict)]
    if debug == True:
        print(f"Catalog loaded: {len(entries)} entries")
    return entries
