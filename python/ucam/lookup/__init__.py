"""
Support for querying the University of Cambridge Lookup directory service
"""
from ucam.base import UCamException, SystemInfoMixin

try:
    from .version import __version__
except ImportError:
    __version__ = "(unset)"

_LOOKUPSYSNAME = "University of Cambridge Lookup"
_LOOKUPSYSABBREV = "Lookup"

class LookupSystem(SystemInfoMixin):
    """
    A SystemInfoMixin representing the Lookup client system.
    """
    def __init__(self, subsysname="", subsysabbrev=""):
        super(LookupSystem, self).__init__(_LOOKUPSYSNAME, _LOOKUPSYSABBREV,
                                           subsysname, subsysabbrev, __version__)

system = LookupSystem()

class LookupException(UCamException):
    """
    the base class for errors raised while querying the Lookup directory.  The public
    methods of :py:class:`~ucam.lookup.client.LookupClient` catch these and return
    empty results; they escape only from its internal request methods.
    """
    pass

class LookupServiceException(LookupException):
    """
    an error reported while requesting a directory resource (a person, a list of
    people, or a list of institutions) from the Lookup web service.

    :ivar str resource:  the service path that was requested (e.g. ``/person/list``)
    :ivar int     code:  the HTTP status code of the response, if one was received
    :ivar str   status:  the HTTP reason phrase of the response, if one was received
    """

    def __init__(self, resource=None, http_code=None, http_reason=None, message=None, cause=None):
        if not message:
            message = "Lookup request failed"
            if resource:
                message += f" for {resource}"
            if http_code or http_reason:
                message += ": " + " ".join(str(p) for p in (http_code, http_reason) if p)
            elif cause:
                message += ": "+str(cause)

        super(LookupServiceException, self).__init__(message, cause)
        self.resource = resource
        self.code = http_code
        self.status = http_reason


class LookupServerError(LookupServiceException):
    """
    the Lookup service could not be reached or did not answer sensibly:  a connection
    failure, a timeout, a 5xx status, or a body that is not the expected JSON.
    """

    def __init__(self, resource=None, http_code=None, http_reason=None, message=None, cause=None):
        super(LookupServerError, self).__init__(resource, http_code, http_reason, message, cause)

class LookupClientError(LookupServiceException):
    """
    the Lookup service rejected the request as malformed or unauthorized (a 4xx
    status), e.g. because the configured credentials are not accepted.
    """

    def __init__(self, resource, http_code, http_reason, message=None, cause=None):
        if not message:
            message = f"Lookup rejected request for {resource or 'resource'}: " + \
                      " ".join(str(p) for p in (http_code, http_reason) if p)

        super(LookupClientError, self).__init__(resource, http_code, http_reason, message, cause)


class LookupResourceNotFound(LookupClientError):
    """
    the requested person or institution (or the endpoint itself) is not known to
    the Lookup service.
    """
    def __init__(self, resource, http_reason=None, message=None, cause=None):
        if not message:
            message = "No such Lookup resource"
            if resource:
                message += ": "+resource

        super(LookupResourceNotFound, self).__init__(resource, 404, http_reason, message, cause)

from .crsid import valid_crsid
from .records import UserRecord, format_record
from .search import format_search_results
from .client import LookupClient
