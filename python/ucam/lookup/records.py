"""
Normalization of the person records returned by the Lookup service.

A raw person record from the service looks something like this:

.. code-block:: json

   {
     "identifier": { "scheme": "crsid", "value": "abc01" },
     "displayName": "Jane Doe",
     "surname": "Doe",
     "cancelled": false,
     "attributes": [
       { "scheme": "email", "value": "jd@example.cam.ac.uk" },
       { "scheme": "institutionCode", "value": "ENG" }
     ]
   }

:py:func:`format_record` flattens this into a :py:class:`UserRecord`.
"""
from collections import namedtuple
from collections.abc import Mapping
from typing import Iterable, Set

DEF_EMAIL_DOMAIN = "cam.ac.uk"

_fields = "username name email department college title website surname telephone forename"

class UserRecord(namedtuple('UserRecord', _fields, defaults=(None,)*len(_fields.split()))):
    """
    a normalized description of a person in the directory.  Any field that is not
    known has a value of None.  ``department`` and ``college`` hold either the raw
    institution code or, once resolved, the institution's name.
    """
    __slots__ = ()

    def with_institutions(self, names: Mapping) -> "UserRecord":
        """
        return a copy of this record with the department and college codes replaced
        with the names given in ``names``.  Codes not found in ``names`` are left as is.
        """
        return self._replace(department=names.get(self.department, self.department),
                             college=names.get(self.college, self.college))

# the record properties to draw each field from, in order of preference
_sources = {
    "username":   ("identifier", "username", "crsid"),
    "name":       ("displayName", "registeredName", "name"),
    "email":      ("email",),
    "department": ("institutionCode", "department"),
    "college":    ("collegeCode", "college"),
    "title":      ("title",),
    "website":    ("website", "labeledURI"),
    "surname":    ("surname",),
    "telephone":  ("telephone", "universityPhone"),
}

def first_value(value):
    """
    return the first of a possibly multi-valued property as a stripped string
    (or None if empty)
    """
    # only the first of multiple values is kept
    if isinstance(value, (list, tuple)):
        value = value[0] if len(value) > 0 else None
    if isinstance(value, Mapping):
        value = value.get('value')
    if value is None or isinstance(value, bool):
        return None
    value = str(value).strip()
    return value or None

def _gather(raw: Mapping) -> Mapping:
    props = {}
    attrs = raw.get('attributes')
    if isinstance(attrs, (list, tuple)):
        for attr in attrs:
            if isinstance(attr, Mapping) and attr.get('scheme') and attr['scheme'] not in props:
                val = first_value(attr.get('value'))
                if val is not None:
                    props[attr['scheme']] = val

    # top-level properties take precedence over attributes of the same name
    for key, val in raw.items():
        if key == 'attributes':
            continue
        val = first_value(val)
        if val is not None:
            props[key] = val
    return props

def derive_forename(name: str, surname: str) -> str:
    """
    return the forename part of a display name by removing a trailing surname.  None
    is returned if either input is missing or nothing remains.
    """
    if not name or not surname:
        return None
    name = name.strip()
    surname = surname.strip()
    if surname and name.endswith(surname):
        name = name[:-len(surname)].strip()
    return name or None

def format_record(raw: Mapping, email_domain: str=DEF_EMAIL_DOMAIN) -> UserRecord:
    """
    convert a raw person record from the Lookup service into a :py:class:`UserRecord`.
    This also accepts an already normalized record (a :py:class:`UserRecord` or its
    dictionary form), in which case an equal record is returned.
    :param Mapping raw:       the record to convert
    :param str email_domain:  the domain used to construct an email address when the
                              record does not provide one
    """
    if isinstance(raw, UserRecord):
        raw = raw._asdict()
    if not isinstance(raw, Mapping):
        return UserRecord()

    props = _gather(raw)
    out = {}
    for field, keys in _sources.items():
        out[field] = next((props[k] for k in keys if k in props), None)

    if not out['email'] and out['username'] and email_domain:
        out['email'] = f"{out['username']}@{email_domain}"
    out['forename'] = derive_forename(out['name'], out['surname'])

    return UserRecord(**out)

def is_cancelled(raw: Mapping) -> bool:
    """
    return True if the given raw person record is marked as cancelled
    """
    if not isinstance(raw, Mapping):
        return False
    cancelled = raw.get('cancelled', False)
    if isinstance(cancelled, str):
        return cancelled.strip().lower() in ("true", "1", "yes")
    return bool(cancelled)

def crsid_of(raw: Mapping) -> str:
    """
    return the CRSID identifying a raw person record or None if it is not set
    """
    if not isinstance(raw, Mapping):
        return None
    ident = raw.get('identifier')
    if isinstance(ident, Mapping) and ident.get('scheme', 'crsid') != 'crsid':
        return None
    return first_value(ident)

def institution_codes(records: Iterable[UserRecord]) -> Set[str]:
    """
    return the set of department and college codes referenced by the given records
    """
    out = set()
    for rec in records:
        out.update(c for c in (rec.department, rec.college) if c)
    return out
