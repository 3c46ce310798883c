"""
Reshaping of Lookup person search results for use by search-as-you-type widgets
"""
from collections import OrderedDict
from collections.abc import Mapping
from typing import Iterable, List, Union

from .records import crsid_of, first_value

PLAIN_MODE  = "plain"
LEGACY_MODE = "legacy"
MODERN_MODE = "modern"
MODES = (PLAIN_MODE, LEGACY_MODE, MODERN_MODE)

def search_label(hit: Mapping) -> str:
    """
    return the display label for a search hit, of the form "CRSID (Visible Name)"
    """
    crsid = crsid_of(hit)
    if not crsid:
        return None
    name = first_value(hit.get('visibleName')) or first_value(hit.get('displayName'))
    if not name:
        return crsid
    return f"{crsid} ({name})"

def _shape(crsid, label, mode):
    if mode == LEGACY_MODE:
        return { "id": crsid, "name": label }
    if mode == MODERN_MODE:
        return { "label": label, "value": crsid }
    return label

def format_search_results(hits: Iterable[Mapping], mode: str=PLAIN_MODE,
                          index_by_crsid: bool=False) -> Union[List, Mapping]:
    """
    convert raw person search hits into the form expected by an autocomplete widget.
    :param list hits:   the raw person records returned by a search
    :param str  mode:   the shape of each entry: ``plain`` gives a label string,
                        ``legacy`` gives ``{id, name}``, and ``modern`` gives
                        ``{label, value}``
    :param bool index_by_crsid:  if True, return a dictionary keyed by CRSID;
                        otherwise, return a list in the order of the hits
    :raises ValueError:  if ``mode`` is not recognized
    """
    if mode not in MODES:
        raise ValueError("format_search_results(): unrecognized mode: "+str(mode))

    out = OrderedDict()
    for hit in hits or []:
        label = search_label(hit) if isinstance(hit, Mapping) else None
        if not label:
            continue
        crsid = crsid_of(hit)
        if crsid not in out:
            out[crsid] = _shape(crsid, label, mode)

    if index_by_crsid:
        return dict(out)
    return list(out.values())
