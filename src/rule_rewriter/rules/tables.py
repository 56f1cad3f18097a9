"""Built-in rule tables (data only).

Each table is one version step of the application framework's property
schema.  The engine treats them exactly like caller-supplied tables.
"""

from __future__ import annotations

from rule_rewriter.rules.table import RuleTable, TransformKind

__all__ = [
    "BOOT_21_TO_22",
    "BOOT_22_TO_23",
    "BOOT_23_TO_24",
    "BOOT_24_TO_25",
    "TABLES",
    "get_table",
]

BOOT_21_TO_22 = RuleTable.from_mapping(
    "2.1-2.2",
    {
        "logging.file": "logging.file.name",
        "logging.path": "logging.file.path",
        "server.connection-timeout": "server.tomcat.connection-timeout",
        "server.use-forward-headers": (
            "server.forward-headers-strategy",
            TransformKind.VALUE_TRANSFORM,
        ),
    },
)

BOOT_22_TO_23 = RuleTable.from_mapping(
    "2.2-2.3",
    {
        "spring.http.encoding.charset": "server.servlet.encoding.charset",
        "spring.http.encoding.enabled": "server.servlet.encoding.enabled",
        "spring.http.encoding.force": "server.servlet.encoding.force",
        "spring.http.encoding.force-request": "server.servlet.encoding.force-request",
        "spring.http.encoding.force-response": "server.servlet.encoding.force-response",
        "spring.http.converters.preferred-json-mapper": "spring.mvc.converters.preferred-json-mapper",
    },
)

# The 2.4 profile syntax change only applies to scalar selectors, so
# DocumentClassifier performs it rather than a table.
BOOT_23_TO_24 = RuleTable.from_mapping(
    "2.3-2.4",
    {
        # Logback rolling policy
        "logging.pattern.rolling-file-name": "logging.logback.rollingpolicy.file-name-pattern",
        "logging.file.max-size": "logging.logback.rollingpolicy.max-file-size",
        "logging.file.max-history": "logging.logback.rollingpolicy.max-history",
        "logging.file.total-size-cap": "logging.logback.rollingpolicy.total-size-cap",
        "logging.file.clean-history-on-start": (
            "logging.logback.rollingpolicy.clean-history-on-start"
        ),
        # Neo4j driver
        "spring.data.neo4j.uri": "spring.neo4j.uri",
        "spring.data.neo4j.username": "spring.neo4j.authentication.username",
        "spring.data.neo4j.password": "spring.neo4j.authentication.password",
    },
)

# SQL script initialization moved out of spring.datasource.
BOOT_24_TO_25 = RuleTable.from_mapping(
    "2.4-2.5",
    {
        "spring.datasource.initialization-mode": "spring.sql.init.mode",
        "spring.datasource.schema": "spring.sql.init.schema-locations",
        "spring.datasource.data": "spring.sql.init.data-locations",
        "spring.datasource.platform": "spring.sql.init.platform",
        "spring.datasource.continue-on-error": "spring.sql.init.continue-on-error",
        "spring.datasource.separator": "spring.sql.init.separator",
        "spring.datasource.sql-script-encoding": "spring.sql.init.encoding",
    },
)

TABLES: dict[str, RuleTable] = {
    table.name: table
    for table in (BOOT_21_TO_22, BOOT_22_TO_23, BOOT_23_TO_24, BOOT_24_TO_25)
}


def get_table(name: str) -> RuleTable:
    """Return a built-in table by name.

    Raises:
        KeyError: If no built-in table has that name.
    """
    try:
        return TABLES[name]
    except KeyError:
        known = ", ".join(sorted(TABLES))
        msg = f"unknown rule table {name!r} (known: {known})"
        raise KeyError(msg) from None
