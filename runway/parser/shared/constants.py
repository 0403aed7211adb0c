"""
Constants for the parser module.
"""

# Supported file extensions
SUPPORTED_SQL_EXTENSIONS = [".sql"]

# Parser strategies
PARSER_STRATEGY_SQLGLOT = "sqlglot"
PARSER_STRATEGY_REGEX = "regex"
PARSER_STRATEGY_AUTO = "auto"
PARSER_STRATEGIES = [PARSER_STRATEGY_AUTO, PARSER_STRATEGY_SQLGLOT, PARSER_STRATEGY_REGEX]

DEFAULT_DIALECT = "postgres"

# Verbose spellings collapsed to the canonical type token
DATA_TYPE_ALIASES = {
    "CHARACTER VARYING": "VARCHAR",
    "CHARACTER": "CHAR",
    "INTEGER": "INT",
    "INT4": "INT",
    "INT8": "BIGINT",
    "INT2": "SMALLINT",
    "BOOLEAN": "BOOL",
    "DOUBLE PRECISION": "DOUBLE",
    "FLOAT8": "DOUBLE",
    "FLOAT4": "REAL",
    "DECIMAL": "NUMERIC",
    "TIMESTAMP WITH TIME ZONE": "TIMESTAMPTZ",
    "TIMESTAMP WITHOUT TIME ZONE": "TIMESTAMP",
    "TIME WITH TIME ZONE": "TIMETZ",
    "TIME WITHOUT TIME ZONE": "TIME",
    "SERIAL4": "SERIAL",
    "SERIAL8": "BIGSERIAL",
    "SERIAL2": "SMALLSERIAL",
}

# Built-in PostgreSQL type names (canonical spellings and their aliases)
BUILT_IN_DATA_TYPES = {
    "SMALLINT",
    "INT",
    "BIGINT",
    "NUMERIC",
    "REAL",
    "DOUBLE",
    "FLOAT",
    "SMALLSERIAL",
    "SERIAL",
    "BIGSERIAL",
    "CHAR",
    "VARCHAR",
    "TEXT",
    "BYTEA",
    "DATE",
    "TIME",
    "TIMETZ",
    "TIMESTAMP",
    "TIMESTAMPTZ",
    "INTERVAL",
    "BOOL",
    "UUID",
    "JSON",
    "JSONB",
    "XML",
    "MONEY",
    "INET",
    "CIDR",
    "MACADDR",
    "MACADDR8",
    "BIT",
    "VARBIT",
    "BIT VARYING",
    "TSVECTOR",
    "TSQUERY",
    "POINT",
    "LINE",
    "POLYGON",
    "BOX",
    "CIRCLE",
    "PATH",
    "LSEG",
    "OID",
    "REGCLASS",
    "INT4RANGE",
    "INT8RANGE",
    "NUMRANGE",
    "TSRANGE",
    "TSTZRANGE",
    "DATERANGE",
    "HSTORE",
    "CITEXT",
} | set(DATA_TYPE_ALIASES)

# Column constraint keywords that end the data type of a column definition
COLUMN_CONSTRAINT_KEYWORDS = [
    "NOT NULL",
    "NULL",
    "DEFAULT",
    "PRIMARY KEY",
    "UNIQUE",
    "REFERENCES",
    "CHECK",
    "CONSTRAINT",
    "GENERATED",
    "COLLATE",
]
