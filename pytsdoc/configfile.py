"""
Loading of C{tsdoc.json} files.

A C{tsdoc.json} file defines custom tags for a project, and which tags
and HTML elements the tools of the project support::

    {
      "$schema": "https://developer.microsoft.com/json-schemas/tsdoc/v0/tsdoc.schema.json",
      "extends": ["./base/tsdoc-base.json"],
      "tagDefinitions": [
        {"tagName": "@myTag", "syntaxKind": "modifier"}
      ],
      "supportForTags": {"@myTag": true}
    }

Loading never raises for a bad file: problems are recorded in
L{TSDocConfigFile.log} with C{tsdoc-config-*} message IDs.
"""
import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Set

from pytsdoc.configuration import TSDocConfiguration, TSDocTagDefinition, TSDocTagSyntaxKind
from pytsdoc.messages import ParserMessageLog, TSDocMessageId
from pytsdoc.stringchecks import explain_if_invalid_html_name, explain_if_invalid_tsdoc_tag_name
from pytsdoc.textrange import TextRange

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_URL = 'https://developer.microsoft.com/json-schemas/tsdoc/v0/tsdoc.schema.json'
CONFIG_FILENAME = 'tsdoc.json'

_SYNTAX_KIND_NAMES = {
    'inline': TSDocTagSyntaxKind.InlineTag,
    'block': TSDocTagSyntaxKind.BlockTag,
    'modifier': TSDocTagSyntaxKind.ModifierTag,
}
_SYNTAX_KIND_JSON = {kind: name for name, kind in _SYNTAX_KIND_NAMES.items()}

_TOP_LEVEL_KEYS = ('$schema', 'extends', 'noStandardTags', 'tagDefinitions', 'supportForTags',
                   'supportedHtmlElements', 'reportUnsupportedHtmlElements')
_TAG_DEFINITION_KEYS = ('tagName', 'syntaxKind', 'allowMultiple')


def _schema_errors(data: Any) -> List[str]:
    """
    Check the structure of a C{tsdoc.json} document.

    @return: A description of each problem found, empty if the document
        is valid.
    """
    if not isinstance(data, dict):
        return ['data should be object']

    errors = []
    for key in data:
        if key not in _TOP_LEVEL_KEYS:
            errors.append(f'data should NOT have additional properties ({key!r})')

    if not isinstance(data.get('$schema', ''), str):
        errors.append("data['$schema'] should be string")

    extends = data.get('extends', [])
    if not isinstance(extends, list) or not all(isinstance(e, str) for e in extends):
        errors.append('data.extends should be array of strings')

    for key in ('noStandardTags', 'reportUnsupportedHtmlElements'):
        if not isinstance(data.get(key, False), bool):
            errors.append(f'data.{key} should be boolean')

    tag_definitions = data.get('tagDefinitions', [])
    if not isinstance(tag_definitions, list):
        errors.append('data.tagDefinitions should be array')
        tag_definitions = []
    for i, tag_definition in enumerate(tag_definitions):
        where = f'data.tagDefinitions[{i}]'
        if not isinstance(tag_definition, dict):
            errors.append(f'{where} should be object')
            continue
        for key in tag_definition:
            if key not in _TAG_DEFINITION_KEYS:
                errors.append(f'{where} should NOT have additional properties ({key!r})')
        tag_name = tag_definition.get('tagName')
        if not isinstance(tag_name, str):
            errors.append(f"{where} should have required property 'tagName'")
        elif explain_if_invalid_tsdoc_tag_name(tag_name):
            errors.append(f'{where}.tagName should match pattern "^@[a-zA-Z][a-zA-Z0-9]*$"')
        if tag_definition.get('syntaxKind') not in _SYNTAX_KIND_NAMES:
            errors.append(f'{where}.syntaxKind should be equal to one of the allowed values: '
                          + ', '.join(_SYNTAX_KIND_NAMES))
        if not isinstance(tag_definition.get('allowMultiple', False), bool):
            errors.append(f'{where}.allowMultiple should be boolean')

    support_for_tags = data.get('supportForTags', {})
    if not isinstance(support_for_tags, dict):
        errors.append('data.supportForTags should be object')
    else:
        for tag_name, supported in support_for_tags.items():
            if explain_if_invalid_tsdoc_tag_name(tag_name):
                errors.append(f'data.supportForTags property name {tag_name!r} is invalid')
            elif not isinstance(supported, bool):
                errors.append(f'data.supportForTags[{tag_name!r}] should be boolean')

    html_elements = data.get('supportedHtmlElements', [])
    if not isinstance(html_elements, list):
        errors.append('data.supportedHtmlElements should be array')
    else:
        for i, html_element in enumerate(html_elements):
            if not isinstance(html_element, str) or explain_if_invalid_html_name(html_element):
                errors.append(f'data.supportedHtmlElements[{i}] should match pattern '
                              '"^[a-zA-Z]+(-[a-zA-Z]+)*$"')

    return errors


def _resolve_extends(extends_entry: str, base_folder: str) -> Optional[str]:
    """
    Find the file named by an C{"extends"} entry.  Relative paths start at
    C{base_folder}, other names are looked up in the C{node_modules}
    folders of C{base_folder} and its parents, the way Node.js resolves
    modules.

    @return: The absolute path, or C{None} if no such file exists.
    """
    if os.path.isabs(extends_entry) or extends_entry.startswith(('./', '../')):
        candidate = os.path.normpath(os.path.join(base_folder, extends_entry))
        return candidate if os.path.isfile(candidate) else None

    folder = os.path.abspath(base_folder)
    while True:
        candidate = os.path.join(folder, 'node_modules', extends_entry)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(folder)
        if parent == folder:
            return None
        folder = parent


class TSDocConfigFile:
    """
    The contents of a C{tsdoc.json} file, along with the files that it
    extends.

    Use one of the C{load_*} class methods to create an instance, then
    L{configure_parser} to apply it to a L{TSDocConfiguration}.
    """

    def __init__(self) -> None:
        self.log = ParserMessageLog()
        """Problems found while loading this file.  Problems of the extended files are in their own logs."""

        self.file_path = ''
        """The absolute path of the file, or C{""} when not loaded from a file."""

        self.file_not_found = False
        """Whether the file could not be read.  In that case L{has_errors} is C{False}."""

        self.tsdoc_schema = ''
        """The C{"$schema"} field."""

        self.extends_paths: List[str] = []
        """The C{"extends"} field, as written."""

        self.extends_files: List['TSDocConfigFile'] = []
        """The loaded files of L{extends_paths}, in the same order."""

        self.no_standard_tags: Optional[bool] = None
        """
        The C{"noStandardTags"} field: whether L{configure_parser} should
        leave the standard tags undefined.  C{None} defers to the extended
        files, the last one that sets it wins.
        """

        self.supported_html_elements: Optional[List[str]] = None
        """The C{"supportedHtmlElements"} field.  C{None} inherits the value of the extended files."""

        self.report_unsupported_html_elements: Optional[bool] = None
        """
        The C{"reportUnsupportedHtmlElements"} field.  When C{None}, it is
        enabled by a C{"supportedHtmlElements"} field.
        """

        self._has_errors = False
        self._tag_definitions: List[TSDocTagDefinition] = []
        self._tag_definition_names: Set[str] = set()
        self._support_for_tags: Dict[str, bool] = {}

    @property
    def tag_definitions(self) -> List[TSDocTagDefinition]:
        return list(self._tag_definitions)

    @property
    def support_for_tags(self) -> Mapping[str, bool]:
        """
        The C{"supportForTags"} field: maps tag names to whether the tag is supported.
        """
        return dict(self._support_for_tags)

    @property
    def has_errors(self) -> bool:
        """
        Whether this file or a file it extends has a problem.  A missing
        root file is not an error: see L{file_not_found}.
        """
        if self._has_errors:
            return True
        return any(extends_file.has_errors for extends_file in self.extends_files)

    def add_tag_definition(self, tag_name: str, syntax_kind: TSDocTagSyntaxKind,
                           allow_multiple: bool = False) -> None:
        """
        Add a custom tag definition, reporting
        C{tsdoc-config-duplicate-tag-name} when the name is already used
        in this file.
        """
        tag_name_with_upper_case = tag_name.upper()
        if tag_name_with_upper_case in self._tag_definition_names:
            self._report_error(
                TSDocMessageId.ConfigFileDuplicateTagName,
                f'The "tagDefinitions" field specifies more than one tag with the name '
                f'"{tag_name}"')
            return
        self._tag_definition_names.add(tag_name_with_upper_case)
        self._tag_definitions.append(
            TSDocTagDefinition(tag_name, syntax_kind, allow_multiple=allow_multiple))

    def set_support_for_tag(self, tag_name: str, supported: bool) -> None:
        self._support_for_tags[tag_name] = supported

    def _report_error(self, message_id: TSDocMessageId, message_text: str) -> None:
        self.log.add_message_for_text_range(message_id, message_text, TextRange.empty)
        self._has_errors = True

    def _load_json_object(self, data: Any) -> None:
        errors = _schema_errors(data)
        if errors:
            self._report_error(TSDocMessageId.ConfigFileSchemaError,
                               'Error loading config file: ' + '; '.join(errors))
            return

        self.tsdoc_schema = data.get('$schema', '')
        if self.tsdoc_schema != CURRENT_SCHEMA_URL:
            self._report_error(TSDocMessageId.ConfigFileUnsupportedSchema,
                               f'Unsupported JSON "$schema" value; expecting "{CURRENT_SCHEMA_URL}"')
            return

        self.extends_paths = list(data.get('extends', []))
        self.no_standard_tags = data.get('noStandardTags')

        for tag_definition_json in data.get('tagDefinitions', []):
            self.add_tag_definition(tag_definition_json['tagName'],
                                    _SYNTAX_KIND_NAMES[tag_definition_json['syntaxKind']],
                                    tag_definition_json.get('allowMultiple', False))

        for tag_name, supported in data.get('supportForTags', {}).items():
            self.set_support_for_tag(tag_name, supported)

        if 'supportedHtmlElements' in data:
            self.supported_html_elements = list(data['supportedHtmlElements'])
        self.report_unsupported_html_elements = data.get('reportUnsupportedHtmlElements')

    def _load_json_file(self, config_file_path: str) -> None:
        self.file_path = config_file_path
        try:
            with open(config_file_path, encoding='utf-8') as stream:
                content = stream.read()
        except OSError:
            self.file_not_found = True
            self.log.add_message_for_text_range(TSDocMessageId.ConfigFileNotFound,
                                                'File not found', TextRange.empty)
            return

        try:
            data = json.loads(content)
        except ValueError as ex:
            self._report_error(TSDocMessageId.ConfigInvalidJson,
                               f'Error parsing JSON input: {ex}')
            return

        logger.debug("Loaded %s", config_file_path)
        self._load_json_object(data)

    def _load_with_extends(self, config_file_path: str,
                           referencing_config_file: Optional['TSDocConfigFile'],
                           already_visited_paths: Set[str]) -> None:
        full_path = os.path.abspath(config_file_path)
        hash_key = os.path.realpath(full_path)
        if hash_key in already_visited_paths:
            self.file_path = full_path
            assert referencing_config_file is not None
            self._report_error(
                TSDocMessageId.ConfigFileCyclicExtends,
                f'Circular reference encountered for "extends" field of '
                f'"{referencing_config_file.file_path}"')
            return
        already_visited_paths.add(hash_key)

        self._load_json_file(full_path)

        config_file_folder = os.path.dirname(full_path)
        for extends_entry in self.extends_paths:
            resolved_extends_path = _resolve_extends(extends_entry, config_file_folder)
            if resolved_extends_path is None:
                self._report_error(
                    TSDocMessageId.ConfigFileUnresolvedExtends,
                    f'Unable to resolve "extends" reference to "{extends_entry}": '
                    f'file not found under {config_file_folder}')
                continue

            base_config_file = TSDocConfigFile()
            base_config_file._load_with_extends(resolved_extends_path, self,
                                                already_visited_paths)
            if base_config_file.file_not_found:
                self._report_error(
                    TSDocMessageId.ConfigFileUnresolvedExtends,
                    f'Unable to resolve "extends" reference to "{extends_entry}": '
                    f'file not found: {resolved_extends_path}')
            self.extends_files.append(base_config_file)

    @staticmethod
    def find_config_path_for_folder(folder_path: str) -> str:
        """
        Find the C{tsdoc.json} of the project containing C{folder_path}:
        the one next to the closest C{tsconfig.json} or C{package.json},
        looking in C{folder_path} and then its parents.

        @return: The path where C{tsdoc.json} is expected.  The file itself
            may not exist.
        """
        folder = os.path.abspath(folder_path)
        while True:
            for project_file in ('tsconfig.json', 'package.json'):
                if os.path.exists(os.path.join(folder, project_file)):
                    return os.path.join(folder, CONFIG_FILENAME)
            parent = os.path.dirname(folder)
            if parent == folder:
                return os.path.join(os.path.abspath(folder_path), CONFIG_FILENAME)
            folder = parent

    @classmethod
    def load_file(cls, config_file_path: str) -> 'TSDocConfigFile':
        """
        Load a C{tsdoc.json} file and the files it extends.
        """
        config_file = cls()
        config_file._load_with_extends(config_file_path, None, set())
        return config_file

    @classmethod
    def load_for_folder(cls, folder_path: str) -> 'TSDocConfigFile':
        """
        Load the C{tsdoc.json} file found by L{find_config_path_for_folder}.
        """
        return cls.load_file(cls.find_config_path_for_folder(folder_path))

    @classmethod
    def load_from_object(cls, json_object: Any) -> 'TSDocConfigFile':
        """
        Load the configuration from already parsed JSON data.

        @raises ValueError: If the data has an C{"extends"} field, which
            cannot be resolved without a file path.
        """
        config_file = cls()
        config_file._load_json_object(json_object)
        if config_file.extends_paths:
            raise ValueError('The "extends" field cannot be used with '
                             'TSDocConfigFile.load_from_object()')
        return config_file

    @classmethod
    def load_from_parser(cls, configuration: TSDocConfiguration) -> 'TSDocConfigFile':
        """
        Describe an existing configuration, for example to save it with
        L{save_to_object}.  Every tag definition is written out, so
        C{"noStandardTags"} is C{True}.
        """
        config_file = cls()
        config_file.tsdoc_schema = CURRENT_SCHEMA_URL
        config_file.no_standard_tags = True
        for tag_definition in configuration.tag_definitions:
            config_file.add_tag_definition(tag_definition.tag_name, tag_definition.syntax_kind,
                                           tag_definition.allow_multiple)
        for tag_definition in configuration.supported_tag_definitions:
            config_file.set_support_for_tag(tag_definition.tag_name, True)
        if configuration.supported_html_elements:
            config_file.supported_html_elements = list(configuration.supported_html_elements)
        config_file.report_unsupported_html_elements = \
            configuration.validation.report_unsupported_html_elements
        return config_file

    def save_to_object(self) -> Dict[str, Any]:
        """
        Serialize this file, without its C{"extends"} field, as JSON data.
        """
        json_object: Dict[str, Any] = {'$schema': CURRENT_SCHEMA_URL}
        if self.no_standard_tags is not None:
            json_object['noStandardTags'] = self.no_standard_tags
        if self._tag_definitions:
            tag_definitions = []
            for tag_definition in self._tag_definitions:
                tag_definition_json: Dict[str, Any] = {
                    'tagName': tag_definition.tag_name,
                    'syntaxKind': _SYNTAX_KIND_JSON[tag_definition.syntax_kind],
                }
                if tag_definition.allow_multiple:
                    tag_definition_json['allowMultiple'] = True
                tag_definitions.append(tag_definition_json)
            json_object['tagDefinitions'] = tag_definitions
        if self._support_for_tags:
            json_object['supportForTags'] = dict(self._support_for_tags)
        if self.supported_html_elements is not None:
            json_object['supportedHtmlElements'] = list(self.supported_html_elements)
        if self.report_unsupported_html_elements is not None:
            json_object['reportUnsupportedHtmlElements'] = self.report_unsupported_html_elements
        return json_object

    def _get_no_standard_tags_with_extends(self) -> Optional[bool]:
        if self.no_standard_tags is not None:
            return self.no_standard_tags
        # The last extended file that sets it wins
        for extends_file in reversed(self.extends_files):
            no_standard_tags = extends_file._get_no_standard_tags_with_extends()
            if no_standard_tags is not None:
                return no_standard_tags
        return None

    def configure_parser(self, configuration: TSDocConfiguration) -> None:
        """
        Reset C{configuration} and apply this file to it, the extended
        files first.  Problems found while doing so, like a
        C{"supportForTags"} entry for an undefined tag, are added to
        L{log}.
        """
        configuration.clear(no_standard_tags=bool(self._get_no_standard_tags_with_extends()))
        self.update_parser(configuration)

    def update_parser(self, configuration: TSDocConfiguration) -> None:
        """
        Like L{configure_parser}, but adds to C{configuration} instead of
        resetting it first.
        """
        for extends_file in self.extends_files:
            extends_file.update_parser(configuration)

        for tag_definition in self._tag_definitions:
            try:
                configuration.add_tag_definition(tag_definition)
            except ValueError as ex:
                self._report_error(TSDocMessageId.ConfigFileDuplicateTagName, str(ex))

        for tag_name, supported in self._support_for_tags.items():
            tag_definition = configuration.try_get_tag_definition(tag_name)
            if tag_definition is None:
                self._report_error(
                    TSDocMessageId.ConfigFileUndefinedTag,
                    f'The "supportForTags" field refers to an undefined tag {json.dumps(tag_name)}.')
            else:
                configuration.set_support_for_tag(tag_definition, supported)

        if self.supported_html_elements is not None:
            configuration.set_supported_html_elements(self.supported_html_elements)

        if self.report_unsupported_html_elements is not None:
            configuration.validation.report_unsupported_html_elements = \
                self.report_unsupported_html_elements
        elif self.supported_html_elements is not None:
            configuration.validation.report_unsupported_html_elements = True

    def __repr__(self) -> str:
        return f'<TSDocConfigFile {self.file_path!r}>'
