"""
envconfig - typed, validated startup configuration from the environment.

Declare a dataclass whose fields carry tags, compile it once, and populate
instances from environment variables (or any other key/value lookup).
Invalid values fall back to defaults with a warning; missing values are
reported as fatal errors, all fields at once.

Quick start::

    from dataclasses import dataclass
    from envconfig import compile_parser, env_field

    @dataclass
    class ServerConfig:
        host: str = env_field("HOST,parser=nonempty-string,default=0.0.0.0")
        port: int = env_field("PORT,parser=int,default=8080")
        admin_port: int = env_field("ADMIN_PORT,parser=int,defaultFrom=port")

    parser = compile_parser(ServerConfig)
    cfg, outcome = parser.parse_new()
    outcome.log()
    outcome.raise_for_fatal()

Architecture::

    tags.py        tag grammar (NAME,key=value,...,default=rest)
    schema.py      RecordType / FieldSpec, describe_record(), env_field()
    handlers.py    TypeHandler + default registry
    compiler.py    compile_parser() -> RecordParser, parser_for() cache
    resolver.py    per-field fallback algorithm
    outcome.py     ParseOutcome(warnings, fatal)
    lookup.py      environ / mapping lookups
    errors.py      EnvConfigError hierarchy
    logging.py     structlog configuration
    settings.py    EnvConfigSettings (ENVCONFIG_*)
"""

__version__ = "0.1.0"

from envconfig.compiler import RecordParser, clear_parser_cache, compile_parser, parser_for
from envconfig.errors import (
    CompileError,
    ConfigurationError,
    EnvConfigError,
    ErrorCategory,
    ErrorContext,
    FieldDiagnostic,
    InternalDefectError,
    InvalidDefaultError,
    InvalidValueWarning,
    NotSetError,
    TagSyntaxError,
    UnsupportedTypeError,
)
from envconfig.handlers import TypeHandler, default_type_handlers
from envconfig.lookup import LookupFunc, as_lookup, environ_lookup, mapping_lookup
from envconfig.outcome import ParseOutcome
from envconfig.schema import FieldSpec, RecordType, describe_record, env_field
from envconfig.tags import Tag, TagOption, parse_tag

__all__ = [
    "__version__",
    # Compile & parse
    "compile_parser",
    "parser_for",
    "clear_parser_cache",
    "RecordParser",
    "ParseOutcome",
    # Schema
    "RecordType",
    "FieldSpec",
    "describe_record",
    "env_field",
    # Tags
    "Tag",
    "TagOption",
    "parse_tag",
    # Handlers
    "TypeHandler",
    "default_type_handlers",
    # Lookup
    "LookupFunc",
    "as_lookup",
    "environ_lookup",
    "mapping_lookup",
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "EnvConfigError",
    "CompileError",
    "TagSyntaxError",
    "UnsupportedTypeError",
    "InvalidDefaultError",
    "FieldDiagnostic",
    "InvalidValueWarning",
    "NotSetError",
    "ConfigurationError",
    "InternalDefectError",
]
