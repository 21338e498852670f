"""
SealedConfig: encrypted JSON settings unlocked by a sealed key file.
"""
# sealedconfig/__init__.py

from sealedconfig.errors import (
    ConfigAccessFailure,
    ConfigDecryptFailure,
    ConfigParseFailure,
    ConfigPersistFailure,
    ConfigStoreError,
    KeyFileAccessFailure,
    KeyFileDecryptFailure,
    KeyFilePersistFailure,
    KeyNotFound,
    MissingBuildSecret,
    NotInitialized,
    PromptFailure,
    TypeMismatch,
)
from sealedconfig.runtime import (
    del_config,
    get,
    get_array,
    get_bool,
    get_config_data,
    get_float,
    get_int,
    get_map,
    get_string,
    init,
    set_config,
    set_pass,
)
from sealedconfig.store import ConfigStore

__version__ = "1.0.0"
