"""Settings library for the client configuration.

Provides:
    - Schema validation for the client.json structure.
    - Loading, saving, reverting, and managing application settings.
    - The resolved REST base URL and request timeout.
"""

import json
import logging
import os
import pathlib
import shutil
from typing import Dict, Any, Optional, List

from PySide6 import QtCore, QtWidgets

from ..status import status

app_name: str = 'ExpenseClient'

DEFAULT_BASE_URL: str = 'http://localhost:8080/api/v1'
DEFAULT_TIMEOUT: int = 30

BASE_URL_ENV: str = 'EXPENSECLIENT_API_BASE_URL'
CONFIG_DIR_ENV: str = 'EXPENSECLIENT_CONFIG_DIR'

PAGE_SIZES: List[int] = [10, 20, 50, 100]
THEMES: List[str] = ['light', 'dark']

SERVER_KEYS: List[str] = ['base_url', 'timeout']

METADATA_KEYS: List[str] = [
    'locale',
    'currency',
    'theme',
    'page_size',
    'dashboard_months',
    'top_expenses',
    'loess_fraction',
    'email',
]

CLIENT_SCHEMA: Dict[str, Any] = {
    'server': {
        'type': dict,
        'required': True,
        'required_keys': SERVER_KEYS,
        'item_schema': {
            'base_url': {'type': str, 'required': True},
            'timeout': {'type': int, 'required': True},
        }
    },
    'metadata': {
        'type': dict,
        'required': True,
        'required_keys': METADATA_KEYS,
        'item_schema': {
            'locale': {'type': str, 'required': True},
            'currency': {'type': str, 'required': True},
            'theme': {'type': str, 'required': True, 'allowed_values': THEMES},
            'page_size': {'type': int, 'required': True, 'allowed_values': PAGE_SIZES},
            'dashboard_months': {'type': int, 'required': True},
            'top_expenses': {'type': int, 'required': True},
            'loess_fraction': {'type': float, 'required': True},
            'email': {'type': str, 'required': True},
        }
    },
}


def _check_items(section: str, data: Dict[str, Any], item_schema: Dict[str, Any]) -> None:
    """Check presence, types and allowed values of the fields of a section.

    Raises:
        ValueError: If a required field is missing or holds a disallowed value.
        TypeError: If a field is of the wrong type.
    """
    for field, field_specs in item_schema.items():
        if field_specs['required'] and field not in data:
            msg = f'"{section}" is missing "{field}".'
            logging.error(msg)
            raise ValueError(msg)
        if field not in data:
            continue

        value = data[field]
        _type = field_specs['type']
        # ints are valid floats, bools are not valid ints
        if _type is float and isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        if isinstance(value, bool) and _type is not bool:
            value = None
        if not isinstance(value, _type):
            msg = f'"{section}.{field}" must be {_type.__name__}, got {type(data[field]).__name__}.'
            logging.error(msg)
            raise TypeError(msg)

        allowed = field_specs.get('allowed_values')
        if allowed and value not in allowed:
            msg = f'"{section}.{field}" must be one of {allowed}, got "{value}".'
            logging.error(msg)
            raise ValueError(msg)


def _validate_server(server_dict: Dict[str, Any], specs: Dict[str, Any]) -> None:
    """Validate the 'server' section.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If the base url is empty or the timeout is not positive.
    """
    logging.debug('Validating "server" section.')
    _check_items('server', server_dict, specs['item_schema'])

    if not server_dict['base_url'].strip():
        msg = '"server.base_url" must not be empty.'
        logging.error(msg)
        raise ValueError(msg)
    if server_dict['timeout'] <= 0:
        msg = f'"server.timeout" must be greater than 0, got {server_dict["timeout"]}.'
        logging.error(msg)
        raise ValueError(msg)


def _validate_metadata(metadata_dict: Dict[str, Any], specs: Dict[str, Any]) -> None:
    """Validate the 'metadata' section.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a field is missing or out of range.
    """
    logging.debug('Validating "metadata" section.')
    _check_items('metadata', metadata_dict, specs['item_schema'])

    if not 0.0 < float(metadata_dict['loess_fraction']) <= 1.0:
        msg = f'"metadata.loess_fraction" must be in (0, 1], got {metadata_dict["loess_fraction"]}.'
        logging.error(msg)
        raise ValueError(msg)
    for key in ('dashboard_months', 'top_expenses'):
        if metadata_dict[key] < 1:
            msg = f'"metadata.{key}" must be at least 1, got {metadata_dict[key]}.'
            logging.error(msg)
            raise ValueError(msg)


class ConfigPaths:
    """Manage application file paths and make sure the default client config exists.

    The config directory is the per-user app data directory, unless the
    ``EXPENSECLIENT_CONFIG_DIR`` environment variable points elsewhere.
    """

    def __init__(self) -> None:
        QtWidgets.QApplication.setApplicationName(app_name)
        QtWidgets.QApplication.setOrganizationName('')
        logging.debug(f'Setting application name: {app_name}')

        self.template_dir: pathlib.Path = pathlib.Path(__file__).parent.parent / 'config'
        self.client_template: pathlib.Path = self.template_dir / 'client.json.template'
        self.stylesheet_path: pathlib.Path = self.template_dir / 'stylesheet.qss'

        override = os.environ.get(CONFIG_DIR_ENV, '')
        if override:
            self.config_dir: pathlib.Path = pathlib.Path(override)
        else:
            p = QtCore.QStandardPaths.writableLocation(QtCore.QStandardPaths.AppDataLocation)
            self.config_dir = pathlib.Path(p) / 'config'
        logging.debug(f'Using config directory: {self.config_dir}')

        self.client_path: pathlib.Path = self.config_dir / 'client.json'
        self.usersettings_path: pathlib.Path = self.config_dir / 'usersettings.ini'

        self._verify_and_prepare()

    def _verify_and_prepare(self) -> None:
        """Verify the template exists and seed client.json from it if absent.

        Raises:
            FileNotFoundError: If the template directory or file is missing.
        """
        logging.debug(f'Verifying required templates in {self.template_dir}')
        if not self.template_dir.exists():
            msg: str = f'Missing template directory: {self.template_dir}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        if not self.client_template.exists():
            msg = f'Missing client template: {self.client_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)

        if not self.config_dir.exists():
            logging.debug(f'Creating config directory: {self.config_dir}')
            self.config_dir.mkdir(parents=True, exist_ok=True)

        if not self.client_path.exists():
            logging.debug(f'Copying default client config from template to {self.client_path}')
            shutil.copy(self.client_template, self.client_path)

    def revert_client_to_template(self) -> None:
        """Restore client.json from the default template file."""
        logging.debug(f'Reverting client config to template: {self.client_template}')
        if not self.client_template.exists():
            msg: str = f'Client template not found: {self.client_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        shutil.copy(self.client_template, self.client_path)


class SettingsAPI(ConfigPaths):
    """
    Provides an interface to get/set/revert/save the sections of client.json.

    Metadata values are available with dictionary-style access::

        settings['currency']
        settings['page_size'] = 20

    """

    def __init__(self, client_path: Optional[str] = None) -> None:
        super().__init__()

        self.client_path: pathlib.Path = pathlib.Path(client_path) if client_path else self.client_path

        self._signals_blocked: bool = False

        self.client_data: Dict[str, Any] = {}
        for k in CLIENT_SCHEMA.keys():
            self.client_data[k] = {}

        self.init_data()

    def __getitem__(self, key: str) -> Any:
        """Retrieve a metadata value.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
            RuntimeError: If the metadata section is missing.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        if 'metadata' not in self.client_data:
            raise RuntimeError('Malformed client data, missing "metadata" section.')

        _type = CLIENT_SCHEMA['metadata']['item_schema'][key]['type']
        v = self.client_data['metadata'].get(key)

        if _type is float and isinstance(v, int):
            return float(v)
        if not isinstance(v, _type):
            logging.error(f'Metadata key "{key}" is not of type {_type}, got {type(v)}.')
            return None

        return v

    def __setitem__(self, key: str, value: Any) -> None:
        """Validate, assign and persist a metadata value.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
            ValueError: If the value cannot be converted or is out of range.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        if 'metadata' not in self.client_data:
            raise RuntimeError('Malformed client data, missing "metadata" section.')

        _type = CLIENT_SCHEMA['metadata']['item_schema'][key]['type']
        if not isinstance(value, _type):
            logging.warning(f'Metadata key "{key}" is not of type {_type}, got {type(value)}.')

            # Try to convert to the expected type
            try:
                value = _type(value)
            except (TypeError, ValueError):
                logging.error(f'Cannot convert "{value}" to {_type.__name__}.')
                raise ValueError(f'Cannot convert "{value}" to {_type.__name__}.')

        new_data = dict(self.client_data['metadata'])
        new_data[key] = value
        _validate_metadata(new_data, CLIENT_SCHEMA['metadata'])

        self.client_data['metadata'] = new_data
        self.save_section('metadata')

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.metadataChanged.emit(key, value)

    def block_signals(self, v: bool) -> None:
        """Enable or disable emission of configuration change signals."""
        self._signals_blocked = v

    @property
    def base_url(self) -> str:
        """The REST base url, the environment override taking precedence."""
        url = os.environ.get(BASE_URL_ENV, '') or self.client_data.get('server', {}).get('base_url', '')
        return (url or DEFAULT_BASE_URL).rstrip('/')

    @property
    def timeout(self) -> int:
        """The request timeout in seconds."""
        v = self.client_data.get('server', {}).get('timeout', DEFAULT_TIMEOUT)
        return v if isinstance(v, int) and v > 0 else DEFAULT_TIMEOUT

    @QtCore.Slot()
    def init_data(self) -> None:
        """Reload client data from disk and emit UI update signals."""
        self.load_client()

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit('server')
        for k, v in self.client_data.get('metadata', {}).items():
            signals.metadataChanged.emit(k, v)

    def load_client(self) -> Dict[str, Any]:
        """Load client.json from disk and validate it against the schema.

        Raises:
            status.ClientConfigNotFoundException: If client.json is missing.
            status.ClientConfigInvalidException: If parsing or validation fails.
        """
        logging.debug(f'Loading client config from "{self.client_path}"')
        if not self.client_path.exists():
            raise status.ClientConfigNotFoundException

        try:
            with self.client_path.open('r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            self.validate_client_data(data=data)
        except (ValueError, TypeError) as ex:
            raise status.ClientConfigInvalidException(str(ex)) from ex

        self.client_data = data
        return self.client_data

    def validate_client_data(self, data: Dict[str, Any] = None) -> None:
        """Validate client data against CLIENT_SCHEMA.

        Raises:
            ValueError: If a required section is missing or a value is out of range.
            TypeError: If a section or a field is of the wrong type.
        """
        if data is None:
            data = self.client_data
        if not data:
            raise ValueError('Client data is empty.')

        logging.debug('Validating client data against schema.')
        for field, specs in CLIENT_SCHEMA.items():
            if specs.get('required') and field not in data:
                raise ValueError(f'Missing required field: {field}')

            if not isinstance(data[field], specs['type']):
                raise TypeError(f'Field "{field}" must be {specs["type"]}, got {type(data[field])}.')

            if field == 'server':
                _validate_server(data[field], specs)
            elif field == 'metadata':
                _validate_metadata(data[field], specs)

        logging.debug('Client data is valid.')

    def get_section(self, section_name: str) -> Dict[str, Any]:
        """Retrieve a copy of a configuration section.

        Raises:
            KeyError: If section_name is not a known section.
        """
        return self.client_data[section_name].copy()

    def set_section(self, section_name: str, new_data: Dict[str, Any]) -> None:
        """Validate, replace and persist a configuration section.

        Raises:
            ValueError: If section_name is unknown or validation fails.
            TypeError: If new_data has the wrong types.
        """
        from ..ui.actions import signals

        if section_name not in CLIENT_SCHEMA:
            msg: str = f'Unknown section_name for set: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        if not isinstance(new_data, dict):
            msg = f'{section_name} must be a dict.'
            logging.error(msg)
            raise TypeError(msg)

        if section_name == 'server':
            _validate_server(new_data, CLIENT_SCHEMA['server'])
        else:
            _validate_metadata(new_data, CLIENT_SCHEMA['metadata'])

        self.client_data[section_name] = dict(new_data)
        self.save_section(section_name)

        if self._signals_blocked:
            return
        signals.configSectionChanged.emit(section_name)
        if section_name == 'metadata':
            for k, v in new_data.items():
                signals.metadataChanged.emit(k, v)

    def revert_section(self, section_name: str) -> None:
        """Revert a configuration section to its template default and save.

        Raises:
            ValueError: If section_name is unknown or missing from the template.
        """
        if section_name not in CLIENT_SCHEMA:
            msg: str = f'Unknown section_name for revert: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.client_template.open('r', encoding='utf-8') as f:
            template_data: Dict[str, Any] = json.load(f)

        if section_name not in template_data:
            msg = f'No template-based revert logic for section "{section_name}".'
            logging.error(msg)
            raise ValueError(msg)

        self.set_section(section_name, template_data[section_name])

    def save_section(self, section_name: str) -> None:
        """Persist a single configuration section to client.json.

        Raises:
            ValueError: If section_name is not recognized.
        """
        if section_name not in CLIENT_SCHEMA:
            msg: str = f'Unknown section_name for save: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        if self.client_path.exists():
            with self.client_path.open('r', encoding='utf-8') as f:
                original_data: Dict[str, Any] = json.load(f)
        else:
            original_data = {}

        new_data: Dict[str, Any] = original_data.copy()
        new_data[section_name] = self.client_data[section_name]

        logging.debug(f'Saving section "{section_name}" to "{self.client_path}"')
        with self.client_path.open('w', encoding='utf-8') as f:
            json.dump(new_data, f, indent=4, ensure_ascii=False)


settings: SettingsAPI = SettingsAPI()
