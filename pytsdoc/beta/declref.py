"""
Declaration references in the newer notation::

    [source!][~]Component(.|#|~Component)*[:meaning][(overload)]

For example C{my-package/path!Namespace.Class#member:function(1)} refers
to the second overload of the instance method C{member}, reached from the
export C{Namespace} of the module C{my-package/path}.  A reference that
starts with C{!} is resolved in the global scope.

All the objects are immutable: the C{with_*} methods return a modified
copy, or the object itself when nothing changes.  C{str()} always gives
text that L{DeclarationReference.parse} accepts.

Malformed input raises L{SyntaxError}.
"""
import enum
import json
import re
from typing import Callable, List, Optional, TypeVar, Union

import attr

from pytsdoc.stringchecks import explain_if_invalid_package_name

T = TypeVar('T')


class Navigation(str, enum.Enum):
    """
    The symbol table to look up the next component in.
    """
    Exports = '.'
    Members = '#'
    Locals = '~'


class Meaning(str, enum.Enum):
    """
    The kind of declaration, written after a colon: C{MyClass:class}.
    """
    Class = 'class'
    Interface = 'interface'
    TypeAlias = 'type'
    Enum = 'enum'
    Namespace = 'namespace'
    Function = 'function'
    Variable = 'var'
    Constructor = 'constructor'
    Member = 'member'
    Event = 'event'
    CallSignature = 'call'
    ConstructSignature = 'new'
    IndexSignature = 'index'
    ComplexType = 'complex'


_MEANINGS_BY_TEXT = {meaning.value: meaning for meaning in Meaning}

# 'foo'            -> package 'foo'
# 'foo/bar'        -> package 'foo', import path 'bar'
# '@scope/foo/bar' -> package '@scope/foo', scope 'scope', import path 'bar'
_PACKAGE_NAME_RE = re.compile(r'^((?:@([^/]+?)/)?([^/]+?))(?:/(.+))?$')

# No leading './', '../' or '/', and not '.' or '..'
_INVALID_IMPORT_PATH_RE = re.compile(r'^(\.\.?([\\/]|$)|[\\/])')


@attr.s(auto_attribs=True)
class _ParsedPackage:
    package_name: str
    scope_name: str
    unscoped_package_name: str
    import_path: Optional[str] = None


def _parse_package_name(text: str) -> Optional[_ParsedPackage]:
    match = _PACKAGE_NAME_RE.match(text)
    if match is None:
        return None
    package_name, scope_name, unscoped_package_name, import_path = match.groups()
    return _ParsedPackage(package_name or '', scope_name or '',
                          unscoped_package_name or '', import_path)


class ModuleSource:
    """
    The module part of a reference, before the C{!}.
    """

    def __init__(self, path: str, user_escaped: bool = True):
        """
        @param path: The module path, like C{"my-package/lib/file"}.
        @param user_escaped: Whether C{path} is already escaped.  If not, it
            is enclosed in quotes when needed.
        @raises SyntaxError: If C{user_escaped} is true and C{path} is not a
            well-formed module source.
        """
        if user_escaped:
            if not DeclarationReference.is_well_formed_module_source_string(path):
                raise SyntaxError(f"Invalid Module source '{path}'")
            self.escaped_path = path
        else:
            self.escaped_path = DeclarationReference.escape_module_source_string(path)
        self._path: Optional[str] = None
        self._path_components: Optional[_ParsedPackage] = None

    @property
    def path(self) -> str:
        """The unescaped path."""
        if self._path is None:
            self._path = DeclarationReference.unescape_module_source_string(self.escaped_path)
        return self._path

    @property
    def package_name(self) -> str:
        return self._get_or_parse_path_components().package_name

    @property
    def scope_name(self) -> str:
        """The scope, including the C{@}, or C{""}."""
        scope_name = self._get_or_parse_path_components().scope_name
        return '@' + scope_name if scope_name else ''

    @property
    def unscoped_package_name(self) -> str:
        return self._get_or_parse_path_components().unscoped_package_name

    @property
    def import_path(self) -> str:
        return self._get_or_parse_path_components().import_path or ''

    @classmethod
    def from_scoped_package(cls, scope_name: Optional[str], unscoped_package_name: str,
                            import_path: Optional[str] = None) -> 'ModuleSource':
        package_name = unscoped_package_name
        if scope_name:
            if scope_name.startswith('@'):
                scope_name = scope_name[1:]
            package_name = f'@{scope_name}/{unscoped_package_name}'
        parsed = _ParsedPackage(package_name, scope_name or '', unscoped_package_name)
        return cls._from_package_name(parsed, package_name, import_path)

    @classmethod
    def from_package(cls, package_name: str,
                     import_path: Optional[str] = None) -> 'ModuleSource':
        """
        @raises SyntaxError: If the package name or the import path is invalid.
        """
        return cls._from_package_name(_parse_package_name(package_name), package_name,
                                      import_path)

    @classmethod
    def _from_package_name(cls, parsed: Optional[_ParsedPackage], package_name: str,
                           import_path: Optional[str]) -> 'ModuleSource':
        if parsed is None:
            raise SyntaxError(f"Invalid NPM package name '{package_name}'")

        explanation = explain_if_invalid_package_name(package_name)
        if explanation:
            raise SyntaxError(f'Invalid NPM package name: {explanation}')

        path = package_name
        if import_path:
            if _INVALID_IMPORT_PATH_RE.match(import_path):
                raise SyntaxError(f"Invalid import path '{import_path}'")
            path += '/' + import_path
            parsed.import_path = import_path

        source = cls(path, user_escaped=False)
        source._path_components = parsed
        return source

    def _get_or_parse_path_components(self) -> _ParsedPackage:
        if self._path_components is None:
            path = self.path
            parsed = _parse_package_name(path)
            if parsed is not None and not explain_if_invalid_package_name(parsed.package_name):
                self._path_components = parsed
            else:
                self._path_components = _ParsedPackage('', '', '', path)
        return self._path_components

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModuleSource):
            return NotImplemented
        return self.escaped_path == other.escaped_path

    def __hash__(self) -> int:
        return hash(self.escaped_path)

    def __str__(self) -> str:
        return f'{self.escaped_path}!'

    def __repr__(self) -> str:
        return f'<ModuleSource {self.escaped_path!r}>'


class _ParsedModuleSource(ModuleSource):
    """
    A module source read by the parser, which is already known to be well-formed.
    """

    def __init__(self, path: str):
        self.escaped_path = path
        self._path = None
        self._path_components = None


class GlobalSource:
    """
    The global scope, written as a leading C{!}.  Use L{GlobalSource.instance}.
    """
    instance: 'GlobalSource'

    def __str__(self) -> str:
        return '!'

    def __repr__(self) -> str:
        return '<GlobalSource>'


GlobalSource.instance = GlobalSource()

Source = Union[ModuleSource, GlobalSource]


class ComponentString:
    """
    A component written as a name, like C{MyClass} or C{"my name"}.
    """

    def __init__(self, text: str, user_escaped: bool = False):
        """
        @param user_escaped: Whether C{text} is already escaped.
        @raises SyntaxError: If C{user_escaped} is true and C{text} is not
            a well-formed component.
        """
        if user_escaped:
            if not DeclarationReference.is_well_formed_component_string(text):
                raise SyntaxError(f"Invalid Component '{text}'")
            self.text = text
        else:
            self.text = DeclarationReference.escape_component_string(text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComponentString):
            return NotImplemented
        return self.text == other.text

    def __hash__(self) -> int:
        return hash(self.text)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f'<ComponentString {self.text!r}>'


class _ParsedComponentString(ComponentString):
    def __init__(self, text: str):
        self.text = text


@attr.s(auto_attribs=True, frozen=True)
class ComponentReference:
    """
    A component written as a bracketed reference: C{[Symbol.iterator]}.
    """
    reference: 'DeclarationReference'

    @classmethod
    def parse(cls, text: str) -> 'ComponentReference':
        if len(text) > 2 and text.startswith('[') and text.endswith(']'):
            return cls(DeclarationReference.parse(text[1:-1]))
        raise SyntaxError(f"Invalid component reference: '{text}'")

    def with_reference(self, reference: 'DeclarationReference') -> 'ComponentReference':
        return self if self.reference is reference else ComponentReference(reference)

    def __str__(self) -> str:
        return f'[{self.reference}]'


Component = Union[ComponentString, ComponentReference]
ComponentLike = Union[ComponentString, ComponentReference, 'DeclarationReference', str]


def component_from(value: ComponentLike) -> Component:
    """
    Wrap a string or a reference as a L{Component}.
    """
    if isinstance(value, str):
        return ComponentString(value)
    if isinstance(value, DeclarationReference):
        return ComponentReference(value)
    return value


class ComponentPathBase:
    component: Component

    def add_navigation_step(self, navigation: Navigation,
                            component: ComponentLike) -> 'ComponentNavigation':
        return ComponentNavigation(self, navigation, component_from(component))  # type: ignore[arg-type]


@attr.s(auto_attribs=True, frozen=True)
class ComponentRoot(ComponentPathBase):
    """
    The first component of a symbol.
    """
    component: Component

    def with_component(self, component: ComponentLike) -> 'ComponentRoot':
        if self.component is component:
            return self
        return ComponentRoot(component_from(component))

    def __str__(self) -> str:
        return str(self.component)


@attr.s(auto_attribs=True, frozen=True)
class ComponentNavigation(ComponentPathBase):
    """
    A component reached from C{parent}, like the C{.b} in C{a.b}.
    """
    parent: 'ComponentPath'
    navigation: Navigation
    component: Component

    def with_parent(self, parent: 'ComponentPath') -> 'ComponentNavigation':
        if self.parent is parent:
            return self
        return ComponentNavigation(parent, self.navigation, self.component)

    def with_navigation(self, navigation: Navigation) -> 'ComponentNavigation':
        if self.navigation is navigation:
            return self
        return ComponentNavigation(self.parent, navigation, self.component)

    def with_component(self, component: ComponentLike) -> 'ComponentNavigation':
        if self.component is component:
            return self
        return ComponentNavigation(self.parent, self.navigation, component_from(component))

    def __str__(self) -> str:
        return f'{self.parent}{self.navigation.value}{self.component}'


ComponentPath = Union[ComponentRoot, ComponentNavigation]


@attr.s(auto_attribs=True, frozen=True)
class SymbolReference:
    """
    The symbol part of a reference: the component path, with an optional
    meaning and overload index.
    """
    component_path: Optional[ComponentPath]
    meaning: Optional[Meaning] = None
    overload_index: Optional[int] = None

    @classmethod
    def empty(cls) -> 'SymbolReference':
        return cls(None)

    def with_component_path(self, component_path: Optional[ComponentPath]) -> 'SymbolReference':
        if self.component_path is component_path:
            return self
        return attr.evolve(self, component_path=component_path)

    def with_meaning(self, meaning: Optional[Meaning]) -> 'SymbolReference':
        if self.meaning is meaning:
            return self
        return attr.evolve(self, meaning=meaning)

    def with_overload_index(self, overload_index: Optional[int]) -> 'SymbolReference':
        if self.overload_index == overload_index:
            return self
        return attr.evolve(self, overload_index=overload_index)

    def add_navigation_step(self, navigation: Navigation,
                            component: ComponentLike) -> 'SymbolReference':
        if self.component_path is None:
            raise ValueError('Cannot add a navigation step to an empty symbol reference.')
        return SymbolReference(self.component_path.add_navigation_step(navigation, component))

    def __str__(self) -> str:
        result = str(self.component_path) if self.component_path is not None else ''
        if self.meaning is not None and self.overload_index is not None:
            result += f':{self.meaning.value}({self.overload_index})'
        elif self.meaning is not None:
            result += f':{self.meaning.value}'
        elif self.overload_index is not None:
            result += f':{self.overload_index}'
        return result


class DeclarationReference:
    """
    A reference to a declaration: an optional source, and an optional symbol.
    """

    def __init__(self, source: Optional[Source] = None,
                 navigation: Optional[Navigation] = None,
                 symbol: Optional[SymbolReference] = None):
        self._source = source
        self._navigation = navigation
        self._symbol = symbol

    @property
    def source(self) -> Optional[Source]:
        return self._source

    @property
    def navigation(self) -> Optional[Navigation]:
        """
        How the symbol is looked up in the source: C{Exports} unless the
        reference says C{~}, or is global.  C{None} when there is no
        source or no symbol.
        """
        if self._source is None or self._symbol is None:
            return None
        if self._source is GlobalSource.instance:
            return Navigation.Locals
        if self._navigation is None:
            return Navigation.Exports
        return self._navigation

    @property
    def symbol(self) -> Optional[SymbolReference]:
        return self._symbol

    @property
    def is_empty(self) -> bool:
        return self.source is None and self.symbol is None

    @staticmethod
    def parse(text: str) -> 'DeclarationReference':
        """
        @raises SyntaxError: If C{text} is not a valid reference.
        """
        parser = _Parser(text)
        reference = parser.parse_declaration_reference()
        if parser.errors:
            errors = '\n  '.join(parser.errors)
            raise SyntaxError(f"Invalid DeclarationReference '{text}':\n  {errors}")
        if not parser.eof:
            raise SyntaxError(f"Invalid DeclarationReference '{text}'")
        return reference

    @staticmethod
    def parse_component(text: str) -> Component:
        if text.startswith('['):
            return ComponentReference.parse(text)
        return ComponentString(text, user_escaped=True)

    @staticmethod
    def is_well_formed_component_string(text: str) -> bool:
        """
        Whether C{text} can be used as a component without quotes, or is a
        complete quoted string.
        """
        scanner = _Scanner(text)
        if scanner.scan() is _TokenKind.String:
            return scanner.scan() is _TokenKind.EofToken
        if scanner.token is _TokenKind.Text:
            return scanner.scan() is _TokenKind.EofToken
        return scanner.token is _TokenKind.EofToken

    @staticmethod
    def escape_component_string(text: str) -> str:
        """
        Enclose C{text} in quotes if it contains any of C{!.#~:,"{}()@} or
        starts with C{[}.
        """
        if not text:
            return '""'
        if text[0] in '["' or not DeclarationReference.is_well_formed_component_string(text):
            return json.dumps(text, ensure_ascii=False)
        return text

    @staticmethod
    def unescape_component_string(text: str) -> str:
        """
        @raises SyntaxError: If C{text} is not a well-formed component.
        """
        if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
            try:
                return json.loads(text)
            except ValueError as ex:
                raise SyntaxError(f"Invalid Component '{text}'") from ex
        if not DeclarationReference.is_well_formed_component_string(text):
            raise SyntaxError(f"Invalid Component '{text}'")
        return text

    @staticmethod
    def is_well_formed_module_source_string(text: str) -> bool:
        """
        Whether C{text} can be used as a module source, without the trailing C{!}.
        """
        scanner = _Scanner(text + '!')
        return (scanner.rescan_module_source() is _TokenKind.ModuleSource
                and not scanner.string_is_unterminated
                and scanner.scan() is _TokenKind.ExclamationToken
                and scanner.scan() is _TokenKind.EofToken)

    @staticmethod
    def escape_module_source_string(text: str) -> str:
        """
        Enclose C{text} in quotes if it contains C{!} or C{"}.
        """
        if not text:
            return '""'
        if text[0] == '"' or not DeclarationReference.is_well_formed_module_source_string(text):
            return json.dumps(text, ensure_ascii=False)
        return text

    @staticmethod
    def unescape_module_source_string(text: str) -> str:
        """
        @raises SyntaxError: If C{text} is not a well-formed module source.
        """
        if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
            try:
                return json.loads(text)
            except ValueError as ex:
                raise SyntaxError(f"Invalid Module source '{text}'") from ex
        if not DeclarationReference.is_well_formed_module_source_string(text):
            raise SyntaxError(f"Invalid Module source '{text}'")
        return text

    @classmethod
    def empty(cls) -> 'DeclarationReference':
        return cls()

    @classmethod
    def package(cls, package_name: str,
                import_path: Optional[str] = None) -> 'DeclarationReference':
        return cls(ModuleSource.from_package(package_name, import_path))

    @classmethod
    def module(cls, path: str, user_escaped: bool = True) -> 'DeclarationReference':
        return cls(ModuleSource(path, user_escaped))

    @classmethod
    def global_(cls) -> 'DeclarationReference':
        return cls(GlobalSource.instance)

    @classmethod
    def from_(cls, base: Optional['DeclarationReference']) -> 'DeclarationReference':
        return base if base is not None else cls.empty()

    def with_source(self, source: Optional[Source]) -> 'DeclarationReference':
        if self._source is source:
            return self
        return DeclarationReference(source, self._navigation, self._symbol)

    def with_navigation(self, navigation: Optional[Navigation]) -> 'DeclarationReference':
        if self._navigation is navigation:
            return self
        return DeclarationReference(self._source, navigation, self._symbol)

    def with_symbol(self, symbol: Optional[SymbolReference]) -> 'DeclarationReference':
        if self._symbol is symbol:
            return self
        return DeclarationReference(self._source, self._navigation, symbol)

    def with_component_path(self, component_path: ComponentPath) -> 'DeclarationReference':
        if self.symbol is not None:
            return self.with_symbol(self.symbol.with_component_path(component_path))
        return self.with_symbol(SymbolReference(component_path))

    def with_meaning(self, meaning: Optional[Meaning]) -> 'DeclarationReference':
        if self.symbol is None:
            if meaning is None:
                return self
            return self.with_symbol(SymbolReference.empty().with_meaning(meaning))
        return self.with_symbol(self.symbol.with_meaning(meaning))

    def with_overload_index(self, overload_index: Optional[int]) -> 'DeclarationReference':
        if self.symbol is None:
            if overload_index is None:
                return self
            return self.with_symbol(SymbolReference.empty().with_overload_index(overload_index))
        return self.with_symbol(self.symbol.with_overload_index(overload_index))

    def add_navigation_step(self, navigation: Navigation,
                            component: ComponentLike) -> 'DeclarationReference':
        if self.symbol is not None:
            return self.with_symbol(self.symbol.add_navigation_step(navigation, component))
        # The first step from a source cannot be a member lookup
        if navigation is Navigation.Members:
            navigation = Navigation.Exports
        symbol = SymbolReference(ComponentRoot(component_from(component)))
        return DeclarationReference(self.source, navigation, symbol)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DeclarationReference):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def __str__(self) -> str:
        navigation = ''
        if isinstance(self._source, ModuleSource) and self._symbol is not None \
                and self.navigation is Navigation.Locals:
            navigation = '~'
        source = str(self.source) if self.source is not None else ''
        symbol = str(self.symbol) if self.symbol is not None else ''
        return f'{source}{navigation}{symbol}'

    def __repr__(self) -> str:
        return f'<DeclarationReference {str(self)!r}>'


##################################################
## Scanner and parser


class _TokenKind(enum.Enum):
    None_ = '<none>'
    EofToken = '<eof>'
    OpenBraceToken = '{'
    CloseBraceToken = '}'
    OpenParenToken = '('
    CloseParenToken = ')'
    OpenBracketToken = '['
    CloseBracketToken = ']'
    ExclamationToken = '!'
    DotToken = '.'
    HashToken = '#'
    TildeToken = '~'
    ColonToken = ':'
    CommaToken = ','
    AtToken = '@'
    DecimalDigits = '<decimal digits>'
    String = '<string>'
    Text = '<text>'
    ModuleSource = '<module source>'
    Meaning = '<meaning>'


_PUNCTUATORS = {
    '{': _TokenKind.OpenBraceToken,
    '}': _TokenKind.CloseBraceToken,
    '(': _TokenKind.OpenParenToken,
    ')': _TokenKind.CloseParenToken,
    '[': _TokenKind.OpenBracketToken,
    ']': _TokenKind.CloseBracketToken,
    '!': _TokenKind.ExclamationToken,
    '.': _TokenKind.DotToken,
    '#': _TokenKind.HashToken,
    '~': _TokenKind.TildeToken,
    ':': _TokenKind.ColonToken,
    ',': _TokenKind.CommaToken,
    '@': _TokenKind.AtToken,
}

_NAVIGATION_TOKENS = {
    _TokenKind.DotToken: Navigation.Exports,
    _TokenKind.HashToken: Navigation.Members,
    _TokenKind.TildeToken: Navigation.Locals,
}

_SINGLE_ESCAPE_CHARACTERS = frozenset('\'"\\bfnrtv')
_DECIMAL_DIGITS = frozenset('0123456789')
_HEX_DIGITS = frozenset('0123456789abcdefABCDEF')
_LINE_TERMINATORS = frozenset('\r\n')
_DECIMAL_DIGITS_RE = re.compile(r'^\d+$', re.ASCII)


def _is_character_escape_sequence(ch: str) -> bool:
    is_escape_character = (ch in 'xu' or ch in _SINGLE_ESCAPE_CHARACTERS
                           or ch in _DECIMAL_DIGITS)
    return ch in _SINGLE_ESCAPE_CHARACTERS or (not is_escape_character
                                               and ch not in _LINE_TERMINATORS)


class _Scanner:
    """
    Splits a reference into tokens.  Some tokens depend on the context, so
    the parser asks for a rescan: C{rescan_module_source()} for the text
    before a C{!}, C{rescan_meaning()} after a colon.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.token_pos = 0
        self.token = _TokenKind.None_
        self.string_is_unterminated = False

    @property
    def token_text(self) -> str:
        return self.text[self.token_pos:self.pos]

    @property
    def eof(self) -> bool:
        return self.pos >= len(self.text)

    def speculate(self, callback: Callable[[Callable[[], None]], T]) -> T:
        """
        Call C{callback(accept)}, and restore the scanner state afterwards
        unless the callback called C{accept()}.
        """
        state = (self.token_pos, self.pos, self.token, self.string_is_unterminated)
        accepted = False

        def accept() -> None:
            nonlocal accepted
            accepted = True

        try:
            return callback(accept)
        finally:
            if not accepted:
                self.token_pos, self.pos, self.token, self.string_is_unterminated = state

    def scan(self) -> _TokenKind:
        if self.eof:
            self.token = _TokenKind.EofToken
            return self.token
        self.token_pos = self.pos
        self.string_is_unterminated = False
        ch = self.text[self.pos]
        self.pos += 1
        if ch in _PUNCTUATORS:
            self.token = _PUNCTUATORS[ch]
        elif ch == '"':
            self._scan_string()
            self.token = _TokenKind.String
        else:
            self._scan_text()
            self.token = _TokenKind.Text
        return self.token

    def rescan_module_source(self) -> _TokenKind:
        if self.token in (_TokenKind.ModuleSource, _TokenKind.ExclamationToken,
                          _TokenKind.EofToken):
            return self.token
        return self.speculate(self._rescan_module_source)

    def _rescan_module_source(self, accept: Callable[[], None]) -> _TokenKind:
        if self.eof:
            return self.token
        self.pos = self.token_pos
        self.string_is_unterminated = False
        scanned = 'none'
        while not self.eof:
            ch = self.text[self.pos]
            if ch == '!':
                if scanned == 'none':
                    return self.token
                accept()
                self.token = _TokenKind.ModuleSource
                return self.token
            self.pos += 1
            if ch == '"':
                # A string must be the whole module source
                if scanned == 'other':
                    return self.token
                scanned = 'string'
                self._scan_string()
            else:
                if scanned == 'string':
                    return self.token
                scanned = 'other'
                if ch not in _PUNCTUATORS:
                    self._scan_text()
        return self.token

    def rescan_meaning(self) -> _TokenKind:
        if self.token is _TokenKind.Text and self.token_text in _MEANINGS_BY_TEXT:
            self.token = _TokenKind.Meaning
        return self.token

    def rescan_decimal_digits(self) -> _TokenKind:
        if self.token is _TokenKind.Text and _DECIMAL_DIGITS_RE.match(self.token_text):
            self.token = _TokenKind.DecimalDigits
        return self.token

    def _scan_string(self) -> None:
        while not self.eof:
            ch = self.text[self.pos]
            self.pos += 1
            if ch == '"':
                return
            if ch == '\\':
                self._scan_escape_sequence()
            elif ch in _LINE_TERMINATORS:
                self.string_is_unterminated = True
                return
        self.string_is_unterminated = True

    def _scan_escape_sequence(self) -> None:
        text, pos = self.text, self.pos
        if self.eof:
            self.string_is_unterminated = True
            return

        ch = text[pos]

        if _is_character_escape_sequence(ch):
            self.pos += 1
            return

        # \0 not followed by a digit
        if ch == '0' and (pos + 1 == len(text) or text[pos + 1] not in _DECIMAL_DIGITS):
            self.pos += 1
            return

        # \xFF
        if ch == 'x' and pos + 3 <= len(text) \
                and text[pos + 1] in _HEX_DIGITS and text[pos + 2] in _HEX_DIGITS:
            self.pos += 3
            return

        # \uFFFF
        if ch == 'u' and pos + 5 <= len(text) \
                and all(c in _HEX_DIGITS for c in text[pos + 1:pos + 5]):
            self.pos += 5
            return

        # \u{10FFFF}
        if ch == 'u' and pos + 4 <= len(text) and text[pos + 1] == '{':
            hex_digits = text[pos + 2]
            if hex_digits in _HEX_DIGITS:
                for i in range(pos + 3, len(text)):
                    ch2 = text[i]
                    if ch2 == '}':
                        if int(hex_digits, 16) <= 0x10ffff:
                            self.pos = i + 1
                            return
                        break
                    if ch2 not in _HEX_DIGITS:
                        break
                    hex_digits += ch2

        self.string_is_unterminated = True

    def _scan_text(self) -> None:
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch in _PUNCTUATORS or ch == '"':
                return
            self.pos += 1


class _Parser:
    """
    A recursive descent parser.  Errors are collected rather than raised, so
    that a parse always completes; L{DeclarationReference.parse} raises
    if there are any.
    """

    def __init__(self, text: str):
        self.errors: List[str] = []
        self._scanner = _Scanner(text)
        self._scanner.scan()

    @property
    def eof(self) -> bool:
        return self._scanner.token is _TokenKind.EofToken

    def parse_declaration_reference(self) -> DeclarationReference:
        source: Optional[Source] = None
        navigation: Optional[Navigation] = None
        symbol: Optional[SymbolReference] = None

        if self._optional_token(_TokenKind.ExclamationToken):
            source = GlobalSource.instance
        elif self._scanner.rescan_module_source() is _TokenKind.ModuleSource:
            source = self._parse_module_source()
            if self._optional_token(_TokenKind.TildeToken):
                navigation = Navigation.Locals

        if self._is_start_of_component():
            symbol = self._parse_symbol()
        elif self._scanner.token is _TokenKind.ColonToken:
            symbol = self._parse_symbol_rest(ComponentRoot(_ParsedComponentString('')))

        return DeclarationReference(source, navigation, symbol)

    def _parse_module_source(self) -> ModuleSource:
        self._scanner.rescan_module_source()
        source = self._parse_token_string(_TokenKind.ModuleSource, 'Module source')
        self._expect_token(_TokenKind.ExclamationToken)
        return _ParsedModuleSource(source)

    def _parse_symbol(self) -> SymbolReference:
        return self._parse_symbol_rest(self._parse_component_rest(self._parse_root_component()))

    def _parse_symbol_rest(self, component_path: ComponentPath) -> SymbolReference:
        meaning: Optional[Meaning] = None
        overload_index: Optional[int] = None
        if self._optional_token(_TokenKind.ColonToken):
            meaning = self._try_parse_meaning()
            overload_index = self._try_parse_overload_index(meaning is not None)
        return SymbolReference(component_path, meaning, overload_index)

    def _parse_root_component(self) -> ComponentPath:
        return ComponentRoot(self._parse_component())

    def _parse_component_rest(self, component_path: ComponentPath) -> ComponentPath:
        while self._scanner.token in _NAVIGATION_TOKENS:
            navigation = _NAVIGATION_TOKENS[self._scanner.token]
            self._scanner.scan()
            component_path = ComponentNavigation(component_path, navigation,
                                                 self._parse_component())
        return component_path

    def _try_parse_meaning(self) -> Optional[Meaning]:
        if self._scanner.rescan_meaning() is _TokenKind.Meaning:
            meaning = _MEANINGS_BY_TEXT[self._scanner.token_text]
            self._scanner.scan()
            return meaning
        return None

    def _try_parse_overload_index(self, has_meaning: bool) -> Optional[int]:
        if self._optional_token(_TokenKind.OpenParenToken):
            overload_index = self._parse_decimal_digits()
            self._expect_token(_TokenKind.CloseParenToken)
            return overload_index
        if not has_meaning:
            return self._parse_decimal_digits()
        return None

    def _parse_decimal_digits(self) -> int:
        if self._scanner.rescan_decimal_digits() is _TokenKind.DecimalDigits:
            value = int(self._scanner.token_text)
            self._scanner.scan()
            return value
        return self._fail('Decimal digit expected', 0)

    def _is_start_of_component(self) -> bool:
        return self._scanner.token in (_TokenKind.Text, _TokenKind.String,
                                       _TokenKind.OpenBracketToken)

    def _parse_component(self) -> Component:
        if not self._is_start_of_component():
            # "a..b" has an empty component
            return self._fail('Component expected', _ParsedComponentString(''))
        if self._scanner.token is _TokenKind.OpenBracketToken:
            return self._parse_bracketed_component()
        if self._scanner.token is _TokenKind.String:
            return _ParsedComponentString(self._parse_token_string(_TokenKind.String, 'String'))
        text = ''
        while self._scanner.token is _TokenKind.Text:
            text += self._parse_token_string(_TokenKind.Text, 'Text')
        return _ParsedComponentString(text)

    def _parse_bracketed_component(self) -> ComponentReference:
        self._expect_token(_TokenKind.OpenBracketToken)
        reference = self.parse_declaration_reference()
        self._expect_token(_TokenKind.CloseBracketToken)
        return ComponentReference(reference)

    def _parse_token_string(self, token: _TokenKind, token_string: str) -> str:
        if self._scanner.token is token:
            text = self._scanner.token_text
            string_is_unterminated = self._scanner.string_is_unterminated
            self._scanner.scan()
            if string_is_unterminated:
                return self._fail(f'{token_string} is unterminated', text)
            return text
        return self._fail(f'{token_string} expected', '')

    def _optional_token(self, token: _TokenKind) -> bool:
        if self._scanner.token is token:
            self._scanner.scan()
            return True
        return False

    def _expect_token(self, token: _TokenKind) -> None:
        if self._scanner.token is not token:
            self._fail(f"Expected token '{token.value}', received "
                       f"'{self._scanner.token.value}' instead.", None)
            return
        self._scanner.scan()

    def _fail(self, message: str, fallback: T) -> T:
        self.errors.append(message)
        return fallback
