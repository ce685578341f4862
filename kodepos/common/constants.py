"""Application constants."""

USER_AGENT = "kodepos-harvest/1.0 (+research; contact: configured-email)"
ENTITY_TYPES = ("province", "regency", "village")
STAGES = (
    "fetch",
    "build",
)
EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "entity",
    "parent",
    "page",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)

# Query selector (`_i`) the source expects for each entity listing.
SOURCE_SELECTORS = {
    "province": "provinsi-kodepos",
    "regency": "kota-kodepos",
    "village": "desa-kodepos",
}

# Source data carries misspelled district names; keys are rewritten to values.
KNOWN_DISTRICT_CORRECTIONS = {
    "Kinovaru": "Kinovaro",
}
