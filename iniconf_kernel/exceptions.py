"""
Typed Exception Hierarchy for iniconf.

===============================================================================
TYPED EXCEPTIONS
===============================================================================

Callers binding configuration need to tell "the file said something wrong"
apart from "the record type cannot be bound at all" without parsing message
text. Every error here has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, log-safe)
  3. Structured DATA attributes (key name, field name, offending type)

Example - handling a bad value:
    try:
        map_to(settings, Path("app.ini"))
    except FieldBindingError as e:
        log.error("config rejected", extra={"field": ".".join(e.field_path)})
        if isinstance(e.root_cause, CoercionError):
            show_user(e.root_cause.key_name, e.root_cause.value)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from IniConfError:

    IniConfError (base)
    |
    +-- DocumentError
    |   +-- SectionNotFoundError
    |   +-- KeyNotFoundError
    |   +-- SourceLoadError
    |
    +-- BindingError
        +-- CoercionError
        +-- UnsupportedTypeError
        +-- NonMutableTargetError
        +-- FieldBindingError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                  | When Raised
----------------|-----------------------|------------------------------------------
Document        | SECTION_NOT_FOUND     | Document has no section by that name
                | KEY_NOT_FOUND         | Section has no key by that name
                | SOURCE_LOAD_FAILED    | Source unreadable, unparsable, unknown type
----------------|-----------------------|------------------------------------------
Binding         | COERCION_FAILED       | Key text is not a valid literal of the type
                | UNSUPPORTED_TYPE      | Field type has no coercion rule
                | NON_MUTABLE_TARGET    | Target is not a mutable record instance
                | FIELD_BINDING_FAILED  | Wraps any of the above with the field name

===============================================================================
HANDLING PATTERNS
===============================================================================

1. NOT-FOUND IS NOT FATAL TO BINDING:

    SectionNotFoundError and KeyNotFoundError are raised by the document
    model. The binder catches them and leaves the field untouched.

2. FIRST FAILURE WINS:

    A FieldBindingError is raised for the first field that fails. Nested
    records add one FieldBindingError layer per level, so ``field_path``
    reads outermost to innermost.
"""


class IniConfError(Exception):
    """
    Base exception for all iniconf errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INICONF_ERROR"


# Document-related exceptions


class DocumentError(IniConfError):
    """Base exception for document model errors."""

    code: str = "DOCUMENT_ERROR"


class SectionNotFoundError(DocumentError):
    """Document has no section with the given name."""

    code: str = "SECTION_NOT_FOUND"

    def __init__(self, section_name: str):
        self.section_name = section_name
        super().__init__(f"section '{section_name}' does not exist")


class KeyNotFoundError(DocumentError):
    """Section has no key with the given name."""

    code: str = "KEY_NOT_FOUND"

    def __init__(self, section_name: str, key_name: str):
        self.section_name = section_name
        self.key_name = key_name
        super().__init__(
            f"key '{key_name}' does not exist in section '{section_name}'"
        )


class SourceLoadError(DocumentError):
    """A configuration source could not be read or parsed."""

    code: str = "SOURCE_LOAD_FAILED"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"cannot load source {source}: {reason}")


# Binding-related exceptions


class BindingError(IniConfError):
    """Base exception for record binding errors."""

    code: str = "BINDING_ERROR"


class CoercionError(BindingError):
    """
    A key's text cannot be converted to the requested type.

    Raised by the Key coercion methods; the binder wraps it in a
    FieldBindingError naming the field.
    """

    code: str = "COERCION_FAILED"

    def __init__(self, key_name: str, value: str, target: str, reason: str = ""):
        self.key_name = key_name
        self.value = value
        self.target = target
        self.reason = reason
        message = f"parsing {value!r} as {target}: invalid syntax"
        if reason:
            message = f"parsing {value!r} as {target}: {reason}"
        super().__init__(message)


class UnsupportedTypeError(BindingError):
    """A field's declared type has no coercion rule."""

    code: str = "UNSUPPORTED_TYPE"

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"unsupported type '{type_name}'")


class NonMutableTargetError(BindingError):
    """
    The bind target is not a mutable record instance.

    Raised by the top-level entry points before any field is visited.
    """

    code: str = "NON_MUTABLE_TARGET"

    def __init__(self, target_type: str, reason: str):
        self.target_type = target_type
        self.reason = reason
        super().__init__(f"cannot map to {target_type}: {reason}")


class FieldBindingError(BindingError):
    """
    Binding one field failed.

    Wraps the underlying error with the effective (resolved) field name.
    Nested records produce one layer per level.
    """

    code: str = "FIELD_BINDING_FAILED"

    def __init__(self, field_name: str, cause: Exception):
        self.field_name = field_name
        self.cause = cause
        super().__init__(f"error mapping field({field_name}): {cause}")

    @property
    def field_path(self) -> tuple[str, ...]:
        """Resolved field names from the outermost record to the failing field."""
        if isinstance(self.cause, FieldBindingError):
            return (self.field_name, *self.cause.field_path)
        return (self.field_name,)

    @property
    def root_cause(self) -> Exception:
        """The innermost non-wrapping error."""
        if isinstance(self.cause, FieldBindingError):
            return self.cause.root_cause
        return self.cause
