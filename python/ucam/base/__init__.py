"""
Common foundation classes shared by the ucam packages
"""

class UCamException(Exception):
    """
    a general base exception for the ucam packages
    """
    def __init__(self, message=None, cause=None):
        if not message and cause:
            message = str(cause)
        super(UCamException, self).__init__(message)
        self.cause = cause


class SystemInfoMixin:
    """
    provides information about the system or subsystem a class belongs to
    """
    def __init__(self, sysname, sysabbrev, subsysname="", subsysabbrev="", version="(unset)"):
        self._sysname = sysname
        self._sysabbrev = sysabbrev
        self._subname = subsysname
        self._subabbrev = subsysabbrev
        self._version = version

    @property
    def system_name(self):
        return self._sysname

    @property
    def system_abbrev(self):
        return self._sysabbrev

    @property
    def subsystem_name(self):
        return self._subname

    @property
    def subsystem_abbrev(self):
        return self._subabbrev

    @property
    def system_version(self):
        return self._version
