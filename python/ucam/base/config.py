"""
Utilities for loading configuration data and setting up logging
"""
import os, json, logging
from collections.abc import Mapping

import yaml

from . import UCamException

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"
_log_handler = None

class ConfigurationException(UCamException):
    """
    a class indicating an error in the configuration of a component
    """
    pass

def load_from_file(configfile: str) -> Mapping:
    """
    read the configuration from the given file and return it as a dictionary.
    The file name extension is used to determine its format (with YAML as the
    default).
    """
    with open(configfile) as fd:
        if configfile.endswith('.json'):
            return json.load(fd)
        else:
            # YAML format
            return yaml.safe_load(fd) or {}

def configure_log(logfile: str=None, level: int=None, format: str=None, config: Mapping=None):
    """
    set up logging to a file for the root logger.  Calling this more than
    once replaces the previously configured handler.
    :param str logfile:  the path to the log file; if not given, the value of the
                         ``logfile`` config parameter is used
    :param int   level:  the logging level to set; default: the ``loglevel`` config
                         parameter or ``logging.INFO``
    :param str  format:  the message format string; default: ``LOG_FORMAT``
    """
    global _log_handler
    if config is None:
        config = {}
    if not logfile:
        logfile = config.get('logfile')
    if not logfile:
        raise ConfigurationException("configure_log(): no logfile specified")
    if level is None:
        level = config.get('loglevel', logging.INFO)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ConfigurationException("configure_log(): unrecognized log level: "+str(level))
    if not format:
        format = config.get('logformat', LOG_FORMAT)

    logdir = os.path.dirname(logfile)
    if logdir and not os.path.exists(logdir):
        os.makedirs(logdir)

    rootlog = logging.getLogger()
    if _log_handler:
        rootlog.removeHandler(_log_handler)
        _log_handler.close()
    _log_handler = logging.FileHandler(logfile)
    _log_handler.setFormatter(logging.Formatter(format))
    _log_handler.setLevel(logging.DEBUG)
    rootlog.addHandler(_log_handler)
    rootlog.setLevel(level)
    return _log_handler
