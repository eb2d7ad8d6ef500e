"""typeschema - JSON Schema to structural type AST for Python 3.12+."""

from typeschema.ast import (
    AST,
    INDEX_KEY,
    ASTType,
    EnumParam,
    InterfaceParam,
)
from typeschema.classify import (
    SchemaType,
    classify,
)
from typeschema.definitions import (
    DefinitionsCache,
    collect_definitions,
)
from typeschema.errors import (
    ConflictingIdError,
    ErrorKind,
    MalformedEnumError,
    SchemaError,
    UnresolvedReferenceError,
)
from typeschema.naming import (
    generate_name,
    to_safe_string,
)
from typeschema.normalizer import (
    RULES,
    Rule,
    apply_rules,
    normalize,
)
from typeschema.options import Options
from typeschema.parser import (
    Parser,
    compile_schema,
    parse,
)
from typeschema.schema import (
    UNSET,
    Schema,
)
from typeschema.serialization import (
    to_dict,
    to_json,
)
from typeschema.traversal import traverse

__all__ = [
    # AST
    "AST",
    "INDEX_KEY",
    # Normalization
    "RULES",
    # Schema model
    "UNSET",
    "ASTType",
    # Errors
    "ConflictingIdError",
    # Definitions
    "DefinitionsCache",
    "EnumParam",
    "ErrorKind",
    "InterfaceParam",
    "MalformedEnumError",
    # Configuration
    "Options",
    # Parsing
    "Parser",
    "Rule",
    "Schema",
    "SchemaError",
    # Classification
    "SchemaType",
    "UnresolvedReferenceError",
    "apply_rules",
    "classify",
    "collect_definitions",
    "compile_schema",
    # Naming
    "generate_name",
    "normalize",
    "parse",
    # Serialization
    "to_dict",
    "to_json",
    "to_safe_string",
    "traverse",
]
