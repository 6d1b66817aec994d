"""Trino client protocol header vocabulary.

All names are lower case. HTTP header names are case-insensitive and both
``httpx`` and Starlette normalise them, so lookups against these constants
must lower-case the other side as well.

See https://trino.io/docs/current/develop/client-protocol.html
"""

PREFIX = "x-trino-"

# Request headers (client -> coordinator)
USER = "x-trino-user"
ORIGINAL_USER = "x-trino-original-user"
ORIGINAL_ROLES = "x-trino-original-roles"
SOURCE = "x-trino-source"
CATALOG = "x-trino-catalog"
SCHEMA = "x-trino-schema"
PATH = "x-trino-path"
TIME_ZONE = "x-trino-time-zone"
LANGUAGE = "x-trino-language"
TRACE_TOKEN = "x-trino-trace-token"
SESSION = "x-trino-session"
ROLE = "x-trino-role"
PREPARED_STATEMENT = "x-trino-prepared-statement"
TRANSACTION_ID = "x-trino-transaction-id"
CLIENT_INFO = "x-trino-client-info"
CLIENT_TAGS = "x-trino-client-tags"
CLIENT_CAPABILITIES = "x-trino-client-capabilities"
RESOURCE_ESTIMATE = "x-trino-resource-estimate"
EXTRA_CREDENTIAL = "x-trino-extra-credential"
QUERY_DATA_ENCODING = "x-trino-query-data-encoding"

REQUEST_HEADERS = frozenset(
    {
        USER,
        ORIGINAL_USER,
        ORIGINAL_ROLES,
        SOURCE,
        CATALOG,
        SCHEMA,
        PATH,
        TIME_ZONE,
        LANGUAGE,
        TRACE_TOKEN,
        SESSION,
        ROLE,
        PREPARED_STATEMENT,
        TRANSACTION_ID,
        CLIENT_INFO,
        CLIENT_TAGS,
        CLIENT_CAPABILITIES,
        RESOURCE_ESTIMATE,
        EXTRA_CREDENTIAL,
        QUERY_DATA_ENCODING,
    }
)

# Response headers (coordinator -> client)
SET_CATALOG = "x-trino-set-catalog"
SET_SCHEMA = "x-trino-set-schema"
SET_PATH = "x-trino-set-path"
SET_SESSION = "x-trino-set-session"
CLEAR_SESSION = "x-trino-clear-session"
SET_ROLE = "x-trino-set-role"
SET_ORIGINAL_ROLES = "x-trino-set-original-roles"
ADDED_PREPARE = "x-trino-added-prepare"
DEALLOCATED_PREPARE = "x-trino-deallocated-prepare"
STARTED_TRANSACTION_ID = "x-trino-started-transaction-id"
CLEAR_TRANSACTION_ID = "x-trino-clear-transaction-id"
SET_AUTHORIZATION_USER = "x-trino-set-authorization-user"
RESET_AUTHORIZATION_USER = "x-trino-reset-authorization-user"

RESPONSE_HEADERS = frozenset(
    {
        SET_CATALOG,
        SET_SCHEMA,
        SET_PATH,
        SET_SESSION,
        CLEAR_SESSION,
        SET_ROLE,
        SET_ORIGINAL_ROLES,
        QUERY_DATA_ENCODING,
        ADDED_PREPARE,
        DEALLOCATED_PREPARE,
        STARTED_TRANSACTION_ID,
        CLEAR_TRANSACTION_ID,
        SET_AUTHORIZATION_USER,
        RESET_AUTHORIZATION_USER,
    }
)

AUTHORIZATION = "authorization"
CONTENT_TYPE = "content-type"
