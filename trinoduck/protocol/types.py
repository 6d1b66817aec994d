"""Standard Trino column type names.

These are the ``rawType`` values of a column's type signature. Some special
types keep their mixed-case spelling (``HyperLogLog``, ``Geometry``...).

Source: io.trino.client.ClientStandardTypes
"""

BIGINT = "bigint"
INTEGER = "integer"
SMALLINT = "smallint"
TINYINT = "tinyint"
BOOLEAN = "boolean"
DATE = "date"
DECIMAL = "decimal"
REAL = "real"
DOUBLE = "double"
HYPER_LOG_LOG = "HyperLogLog"
QDIGEST = "qdigest"
TDIGEST = "tdigest"
SET_DIGEST = "SetDigest"
P4_HYPER_LOG_LOG = "P4HyperLogLog"
INTERVAL_DAY_TO_SECOND = "interval day to second"
INTERVAL_YEAR_TO_MONTH = "interval year to month"
TIMESTAMP = "timestamp"
TIMESTAMP_WITH_TIME_ZONE = "timestamp with time zone"
TIME = "time"
TIME_WITH_TIME_ZONE = "time with time zone"
VARBINARY = "varbinary"
VARCHAR = "varchar"
CHAR = "char"
ROW = "row"
ARRAY = "array"
MAP = "map"
JSON = "json"
JSON_2016 = "json2016"
IPADDRESS = "ipaddress"
UUID = "uuid"
GEOMETRY = "Geometry"
SPHERICAL_GEOGRAPHY = "SphericalGeography"
BING_TILE = "BingTile"
KDB_TREE = "KdbTree"
COLOR = "color"

STANDARD_TYPES = frozenset(
    {
        BIGINT,
        INTEGER,
        SMALLINT,
        TINYINT,
        BOOLEAN,
        DATE,
        DECIMAL,
        REAL,
        DOUBLE,
        HYPER_LOG_LOG,
        QDIGEST,
        TDIGEST,
        SET_DIGEST,
        P4_HYPER_LOG_LOG,
        INTERVAL_DAY_TO_SECOND,
        INTERVAL_YEAR_TO_MONTH,
        TIMESTAMP,
        TIMESTAMP_WITH_TIME_ZONE,
        TIME,
        TIME_WITH_TIME_ZONE,
        VARBINARY,
        VARCHAR,
        CHAR,
        ROW,
        ARRAY,
        MAP,
        JSON,
        JSON_2016,
        IPADDRESS,
        UUID,
        GEOMETRY,
        SPHERICAL_GEOGRAPHY,
        BING_TILE,
        KDB_TREE,
        COLOR,
    }
)

# Parameter kinds of a ClientTypeSignature argument
PARAMETER_TYPE = "TYPE"
PARAMETER_LONG = "LONG"
PARAMETER_VARIABLE = "VARIABLE"
PARAMETER_NAMED_TYPE = "NAMED_TYPE"
