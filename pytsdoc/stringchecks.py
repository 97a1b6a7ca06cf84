"""
Helpers for validating the various string formats found in TSDoc: tag
names, URLs, HTML names, package names, import paths and identifiers.

The C{explain_if_invalid_*} functions return C{None} for valid input, or a
message explaining what is wrong.
"""
import json
import re
from typing import Optional

_TSDOC_TAG_NAME_RE = re.compile(r'^@[a-z][a-z0-9]*$', re.IGNORECASE)
_URL_SCHEME_RE = re.compile(r'^[a-z][a-z0-9]*://', re.IGNORECASE)
_URL_SCHEME_AFTER_RE = re.compile(r'^[a-z][a-z0-9]*://.', re.IGNORECASE)
_HTML_NAME_RE = re.compile(r'^[a-z]+(-[a-z]+)*$', re.IGNORECASE)
_IDENTIFIER_BAD_CHAR_RE = re.compile(r'[^a-z0-9_$]', re.IGNORECASE)
_IDENTIFIER_NUMBER_START_RE = re.compile(r'^[0-9]')
# See https://www.npmjs.com/package/validate-npm-package-name
_VALID_PACKAGE_NAME_RE = re.compile(r'^(?:@[a-z0-9\-_.]+/)?[a-z0-9\-_.]+$', re.IGNORECASE)

SYSTEM_SELECTORS = frozenset([
    # For classes:
    'instance', 'static', 'constructor',
    # For merged declarations:
    'class', 'enum', 'function', 'interface', 'namespace', 'type', 'variable',
])


def explain_if_invalid_tsdoc_tag_name(tag_name: str) -> Optional[str]:
    """
    TSDoc tag names start with an at-sign followed by ASCII letters using
    camelCase capitalization, like C{@myTag}.
    """
    if not tag_name.startswith('@'):
        return 'A TSDoc tag name must start with an "@" symbol'
    if not _TSDOC_TAG_NAME_RE.match(tag_name):
        return 'A TSDoc tag name must start with a letter and contain only letters and numbers'
    return None

def validate_tsdoc_tag_name(tag_name: str) -> None:
    """
    @raises ValueError: If C{tag_name} is not a valid TSDoc tag name.
    """
    explanation = explain_if_invalid_tsdoc_tag_name(tag_name)
    if explanation:
        raise ValueError(explanation)

def explain_if_invalid_link_url(url: str) -> Optional[str]:
    """
    The check is deliberately basic: a scheme made of letters and numbers,
    C{"://"}, and at least one more character.
    """
    if not url:
        return 'The URL cannot be empty'
    if not _URL_SCHEME_RE.match(url):
        return ('An @link URL must begin with a scheme comprised only of letters and numbers '
                'followed by "://". (For general URLs, use an HTML "<a>" tag instead.)')
    if not _URL_SCHEME_AFTER_RE.match(url):
        return 'An @link URL must have at least one character after "://"'
    return None

def explain_if_invalid_html_name(html_name: str) -> Optional[str]:
    if not _HTML_NAME_RE.match(html_name):
        return 'An HTML name must be an ASCII letter followed by optional hyphens and letters'
    return None

def validate_html_name(html_name: str) -> None:
    """
    @raises ValueError: If C{html_name} is not a valid HTML element or attribute name.
    """
    explanation = explain_if_invalid_html_name(html_name)
    if explanation:
        raise ValueError(explanation)

def explain_if_invalid_package_name(package_name: str) -> Optional[str]:
    if not package_name:
        return 'The package name cannot be an empty string'
    if not _VALID_PACKAGE_NAME_RE.match(package_name):
        return f'The package name {json.dumps(package_name)} is not a valid package name'
    return None

def explain_if_invalid_import_path(import_path: str,
                                   prefixed_by_package_name: bool) -> Optional[str]:
    if import_path:
        if '//' in import_path:
            return 'An import path must not contain "//"'
        if import_path.endswith('/'):
            return 'An import path must not end with "/"'
        if not prefixed_by_package_name and import_path.startswith('/'):
            return 'An import path must not start with "/" unless prefixed by a package name'
    return None

def is_system_selector(selector: str) -> bool:
    return selector in SYSTEM_SELECTORS

def explain_if_invalid_unquoted_identifier(identifier: str) -> Optional[str]:
    """
    A conservative approximation of an ECMAScript identifier: ASCII letters,
    digits, C{_} and C{$}, not starting with a digit.
    """
    if not identifier:
        return 'The identifier cannot be an empty string'
    if _IDENTIFIER_BAD_CHAR_RE.search(identifier):
        return 'The identifier cannot contain non-word characters'
    if _IDENTIFIER_NUMBER_START_RE.match(identifier):
        return 'The identifier must not start with a number'
    return None

def explain_if_invalid_unquoted_member_identifier(identifier: str) -> Optional[str]:
    """
    Like L{explain_if_invalid_unquoted_identifier}, but system selector names
    must also be quoted when used as member names.
    """
    explanation = explain_if_invalid_unquoted_identifier(identifier)
    if explanation is not None:
        return explanation
    if is_system_selector(identifier):
        return (f'The identifier "{identifier}" must be quoted because it is a TSDoc '
                'system selector name')
    return None
