"""
A client library for querying the University of Cambridge Lookup directory service.

The public methods of :py:class:`LookupClient` never raise exceptions because of a
failure to get data from the service:  a timeout, an error response, or an
unexpected response are all logged and reported as an empty result.
"""
import logging
from collections.abc import Mapping
from typing import Iterable, List, Union

import requests

from . import LookupException, LookupServerError, LookupClientError, LookupResourceNotFound
from .crsid import valid_crsid
from .records import (UserRecord, format_record, is_cancelled, crsid_of, institution_codes,
                      first_value, DEF_EMAIL_DOMAIN)
from .search import format_search_results, PLAIN_MODE, MODES
from ucam.base.config import ConfigurationException

DEF_BASE_URL = "https://www.lookup.cam.ac.uk/api/v1"
DEF_TIMEOUT = 5
DEF_SEARCH_LIMIT = 10
ANONYMOUS_USER = "anonymous"
FETCH_ATTRIBUTES = [ "displayName", "email", "institutionCode", "collegeCode", "title",
                     "website", "surname", "telephone" ]

def lookup_config(config: Mapping) -> Mapping:
    """
    return the Lookup client configuration from a larger configuration.  The client
    parameters may be given at the top level or under ``services.lookup``.
    :raises ConfigurationException:  if the configuration (or its ``services`` part) is
                                     not a dictionary
    """
    if config is None:
        return {}
    if not isinstance(config, Mapping):
        raise ConfigurationException("Lookup configuration must be a dictionary, not " +
                                     type(config).__name__)
    services = config.get('services') or {}
    if not isinstance(services, Mapping):
        raise ConfigurationException("Lookup configuration: services must be a dictionary")
    if services.get('lookup'):
        config = lookup_config(services['lookup'])
    return config

class LookupClient:
    """
    a client class for querying the Lookup directory service for people and institutions.

    This class supports the following configuration parameters:
        ``service_endpoint``
            _str_ (optional) the base URL for the service, including the version field;
            default: ``https://www.lookup.cam.ac.uk/api/v1``
        ``timeout``
            _float_ (optional) the number of seconds to wait for the service to connect
            and respond; default: 5
        ``auth``
            _dict_ (optional) credentials to pass to the service, given as ``user`` and
            ``pass``; if not provided, the anonymous (read-only) identity is used.  A
            ``type`` of ``none`` turns off the sending of credentials.
        ``drop_cancelled``
            _bool_ (optional) if True (default), cancelled accounts are left out of
            results that return multiple people.
        ``email_domain``
            _str_ (optional) the domain used to create an email address for people that
            do not have one set; default: ``cam.ac.uk``
        ``search_limit``
            _int_ (optional) the maximum number of search results to request; default: 10
        ``fetch``
            _list_ (optional) the person attributes to request from the service
    """
    PERSON_EP = "/person/crsid/{0}"
    PEOPLE_EP = "/person/list"
    MEMBERS_EP = "/inst/{0}/members"
    INSTS_EP = "/inst/list"
    SEARCH_EP = "/person/search"

    def __init__(self, baseurl: str=None, config: Mapping=None, session=None,
                 logger: logging.Logger=None):
        """
        initialize the client
        :param str    baseurl:  the base URL for the service.  This should include everything
                                up to (and including) the version field (e.g. "https://..../v1").
                                If not provided, the ``service_endpoint`` config parameter is used.
        :param Mapping config:  the configuration for this client (see class documentation)
        :param        session:  the object to use to make HTTP GET requests; it must provide a
                                ``get()`` method compatible with ``requests.get()`` (e.g. a
                                ``requests.Session``).  If not provided, ``requests`` is used.
        :param Logger  logger:  the logger to send messages to
        """
        if config is None:
            config = {}
        if not isinstance(config, Mapping):
            raise ConfigurationException("LookupClient: config must be a dictionary")
        self.cfg = config
        if not baseurl:
            baseurl = self.cfg.get('service_endpoint', DEF_BASE_URL)
        self.baseurl = baseurl.rstrip('/')
        self._http = session if session is not None else requests
        self.log = logger if logger else logging.getLogger("ucam.lookup.client")

        self.timeout = self.cfg.get('timeout', DEF_TIMEOUT)
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or \
           self.timeout <= 0:
            raise ConfigurationException("LookupClient: timeout must be a positive number: " +
                                         str(self.timeout))
        self.drop_cancelled = self.cfg.get('drop_cancelled', True)
        if not isinstance(self.drop_cancelled, bool):
            raise ConfigurationException("LookupClient: drop_cancelled must be true or false: " +
                                         str(self.drop_cancelled))
        self.email_domain = self.cfg.get('email_domain', DEF_EMAIL_DOMAIN)
        self.search_limit = self.cfg.get('search_limit', DEF_SEARCH_LIMIT)
        self.fetch = list(self.cfg.get('fetch', FETCH_ATTRIBUTES))

        self._auth = None
        self._setup_auth(self.cfg.get('auth'))

    @classmethod
    def from_config(cls, config: Mapping, session=None, logger: logging.Logger=None):
        """
        create a client from a configuration.  The client parameters may be given at the
        top level or under ``services.lookup`` (see :py:func:`lookup_config`).
        """
        config = lookup_config(config)
        return cls(config=config, session=session, logger=logger)

    def _setup_auth(self, config: Mapping=None):
        # erase any previously set-up authentication
        self._auth = (ANONYMOUS_USER, "")

        if config is None:
            return      # use the anonymous identity
        if not isinstance(config, Mapping):
            raise ConfigurationException("LookupClient: auth config must be a dictionary")

        authtype = config.get('type', 'userpass')
        if isinstance(authtype, str):
            authtype = authtype.lower()

        if authtype is None or authtype == "none":
            self._auth = None

        elif authtype == "userpass":
            if 'user' not in config:
                return
            if not config.get('user') or 'pass' not in config:
                raise ConfigurationException("LookupClient: authentication type userpass requires " +
                                             "both 'user' and 'pass' config parameters")
            self._auth = (config['user'], config['pass'] or "")

        else:
            raise ConfigurationException("LookupClient: authentication 'type' param value not " +
                                         "supported: "+str(authtype))

    def _get(self, relurl: str, params: Mapping=None) -> Mapping:
        if not relurl.startswith('/'):
            relurl = '/'+relurl
        qparams = { "format": "json" }
        if params:
            qparams.update(params)
        hdrs = { "Accept": "application/json" }

        self.log.debug("Querying Lookup: %s %s", relurl, qparams)
        resp = None
        try:
            resp = self._http.get(self.baseurl+relurl, params=qparams, headers=hdrs,
                                  auth=self._auth, timeout=self.timeout)

            if resp.status_code >= 500:
                raise LookupServerError(relurl, resp.status_code, resp.reason)
            elif resp.status_code == 404:
                raise LookupResourceNotFound(relurl, resp.reason)
            elif resp.status_code == 406:
                raise LookupClientError(relurl, resp.status_code, resp.reason,
                                        message="JSON data not available from"+
                                        " this URL (is URL correct?)")
            elif resp.status_code >= 400:
                raise LookupClientError(relurl, resp.status_code, resp.reason)
            elif resp.status_code != 200:
                raise LookupServerError(relurl, resp.status_code, resp.reason,
                                        message="Unexpected response from server: {0} {1}"
                                        .format(resp.status_code, resp.reason))

            return resp.json()

        except ValueError as ex:
            text = getattr(resp, 'text', None)
            if text and isinstance(text, str) and ("<body" in text or "<BODY" in text):
                raise LookupServerError(relurl,
                                        message="HTML returned where JSON "+
                                        "expected (is service URL correct?)", cause=ex)
            else:
                raise LookupServerError(relurl,
                                        message="Unable to parse response as "+
                                        "JSON (is service URL correct?)", cause=ex)
        except requests.Timeout as ex:
            raise LookupServerError(relurl, message="Lookup service timed out after " +
                                    f"{self.timeout} seconds", cause=ex)
        except requests.RequestException as ex:
            raise LookupServerError(relurl, cause=ex)

    def _get_result(self, relurl: str, params: Mapping, prop: str):
        # return the requested property of the "result" object in the service's response
        data = self._get(relurl, params)
        if not isinstance(data, Mapping) or not isinstance(data.get('result'), Mapping):
            raise LookupServerError(relurl, message="Unexpected response from Lookup: " +
                                    "missing 'result' property (has service changed?)")
        return data['result'].get(prop)

    def _fetch_param(self) -> Mapping:
        return { "fetch": ",".join(self.fetch) }

    def get_user(self, crsid: str) -> UserRecord:
        """
        return a description of the person with the given CRSID, or None if the person is
        not found or the service cannot be reached.
        """
        if not valid_crsid(crsid):
            self.log.debug("Not a valid CRSID: %s", repr(crsid))
            return None

        relurl = self.PERSON_EP.format(crsid)
        try:
            person = self._get_result(relurl, self._fetch_param(), "person")
        except LookupResourceNotFound:
            return None
        except LookupException as ex:
            self.log.warning("Failed to look up %s: %s", crsid, str(ex))
            return None

        if not isinstance(person, Mapping) or not crsid_of(person):
            return None
        rec = format_record(person, self.email_domain)

        codes = institution_codes([rec])
        if codes:
            rec = rec.with_institutions(self.get_institutions(codes))
        return rec

    def get_users(self, crsids: Iterable[str]) -> Mapping[str, UserRecord]:
        """
        return descriptions of the people with the given CRSIDs, indexed by CRSID.  People
        that cannot be found (or have cancelled accounts) are left out.  An empty
        dictionary is returned if the service cannot be reached.
        """
        if isinstance(crsids, str):
            crsids = [crsids]
        if not crsids or not isinstance(crsids, Iterable):
            return {}
        crsids = sorted(set(c for c in crsids if valid_crsid(c)))
        if not crsids:
            return {}

        params = self._fetch_param()
        params["crsids"] = ",".join(crsids)
        return self._get_people(self.PEOPLE_EP, params)

    def get_group_members(self, groupid: str) -> Mapping[str, UserRecord]:
        """
        return descriptions of the people who are members of a group, indexed by CRSID.
        An empty dictionary is returned if the group is not known or the service cannot
        be reached.
        """
        if not groupid or not isinstance(groupid, str):
            return {}
        return self._get_people(self.MEMBERS_EP.format(groupid.strip()), self._fetch_param())

    def _get_people(self, relurl: str, params: Mapping) -> Mapping[str, UserRecord]:
        try:
            people = self._get_result(relurl, params, "people")
        except LookupException as ex:
            self.log.warning("Failed to retrieve people from %s: %s", relurl, str(ex))
            return {}
        if not isinstance(people, list):
            return {}

        out = {}
        for person in people:
            crsid = crsid_of(person)
            if not crsid:
                continue
            if self.drop_cancelled and is_cancelled(person):
                self.log.debug("Dropping cancelled account: %s", crsid)
                continue
            out[crsid] = format_record(person, self.email_domain)

        return self.resolve_institutions(out)

    def get_institutions(self, codes: Iterable[str]) -> Mapping[str, str]:
        """
        resolve a set of institution codes into their names.  A dictionary mapping codes
        to names is returned; codes that are not known are not included.  An empty
        dictionary is returned if the service cannot be reached.
        """
        if isinstance(codes, str):
            codes = [codes]
        if not codes or not isinstance(codes, Iterable):
            return {}
        codes = sorted(set(c.strip() for c in codes if isinstance(c, str) and c.strip()))
        if not codes:
            return {}

        try:
            insts = self._get_result(self.INSTS_EP, { "instids": ",".join(codes) },
                                     "institutions")
        except LookupException as ex:
            self.log.warning("Failed to resolve institutions: %s", str(ex))
            return {}
        if not isinstance(insts, list):
            return {}

        out = {}
        for inst in insts:
            if not isinstance(inst, Mapping):
                continue
            instid = first_value(inst.get('instid'))
            name = first_value(inst.get('name'))
            if instid and name:
                out[instid] = name
        return out

    def resolve_institutions(self, records: Mapping[str, UserRecord]) -> Mapping[str, UserRecord]:
        """
        replace the department and college codes in the given records with the names of
        the institutions they refer to, using a single request to the service.  Codes that
        cannot be resolved are left in place.
        :param dict records:  the records to update, indexed by CRSID
        :return:  a new dictionary containing the updated records
        """
        codes = institution_codes(records.values())
        if not codes:
            return dict(records)
        names = self.get_institutions(codes)
        return dict((crsid, rec.with_institutions(names)) for crsid, rec in records.items())

    def search(self, term: str, mode: str=PLAIN_MODE,
               index_by_crsid: bool=False) -> Union[List, Mapping]:
        """
        search for people matching a search term, returning the results in a form usable
        by an autocomplete widget.  See :py:func:`~ucam.lookup.search.format_search_results`
        for the meaning of ``mode`` and ``index_by_crsid``.  An empty container is
        returned if the service cannot be reached.
        """
        if mode not in MODES:
            raise ValueError("search(): unrecognized mode: "+str(mode))
        empty = {} if index_by_crsid else []
        if not term or not isinstance(term, str) or not term.strip():
            return empty

        params = self._fetch_param()
        params.update({ "query": term.strip(), "limit": self.search_limit, "orderBy": "identifier" })
        try:
            hits = self._get_result(self.SEARCH_EP, params, "people")
        except LookupException as ex:
            self.log.warning("Failed to search for %s: %s", repr(term), str(ex))
            return empty
        if not isinstance(hits, list):
            return empty

        return format_search_results(hits, mode, index_by_crsid)

    def get_lookup_data(self, crsids: Union[str, Iterable[str]]):
        """
        look up one or more people:  if a single CRSID is given as a string, its
        :py:class:`~ucam.lookup.records.UserRecord` (or None) is returned; otherwise, a
        dictionary of records indexed by CRSID is returned.
        """
        if isinstance(crsids, str):
            return self.get_user(crsids)
        return self.get_users(crsids)
