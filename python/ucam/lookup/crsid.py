"""
Syntax checking of CRSIDs, the personal account identifiers used across the University
"""
import re

# a letter followed by 1 to 7 letters or digits; a few people have all-letter CRSIDs
_CRSID_RE = re.compile(r'[a-zA-Z][a-zA-Z0-9]{1,7}')
_LC_CRSID_RE = re.compile(r'[a-z][a-z0-9]{1,7}')

def valid_crsid(crsid, lowercase: bool=False) -> bool:
    """
    return True if the given value is syntactically a valid CRSID.  This does not
    check whether the account actually exists or is active.
    :param str  crsid:    the identifier to check
    :param bool lowercase:  if True, only lower-case letters are accepted
    """
    if not isinstance(crsid, str):
        return False
    regex = _LC_CRSID_RE if lowercase else _CRSID_RE
    return regex.fullmatch(crsid) is not None
