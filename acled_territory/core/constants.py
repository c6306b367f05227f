"""Project-wide constants for sub-event classes and analysis policy values."""

# ACLED sub-event types compared throughout the analysis
SUB_EVENT_CLASSES = [
    "Government regains territory",
    "Non-state actor overtakes territory",
]
POSITIVE_CLASS = "Government regains territory"

LABEL_MAP = {
    "Government regains territory": "GOV",
    "Non-state actor overtakes territory": "NSA",
}

# ACLED exports carry the row key as `data_id`; the analysis calls it `id`
ID_COLUMN_SOURCE = "data_id"
ID_COLUMN = "id"
TEXT_COLUMN = "notes"
TARGET_COLUMN = "sub_event_type"

EXPECTED_COLUMNS = [
    "id",
    "event_date",
    "actor1",
    "admin1",
    "admin2",
    "event_type",
    "sub_event_type",
    "fatalities",
    "notes",
]

# Source CSV used by the pipeline
CSV_SRC = "datasets/2017-01-01-2021-12-31-Syria.csv"
RESULTS_DIR = "results/territorial_control"

# Language markers and reporting boilerplate that recur in ACLED notes
DOMAIN_STOP_WORDS = frozenset({
    "arabic",
    "english",
    "kurdish",
    "turkish",
    "size",
    "report",
    "reported",
    "reports",
    "coded",
})

# Lexical analysis
TOP_TOKENS = 20
COOCCURRENCE_MIN_COUNT = 150

# Topic models
LDA_N_TOPICS = 6
STM_N_TOPICS = 2
TOP_TERMS_PER_TOPIC = 10

# Classification
TRAIN_PROP = 0.75
MAX_TOKENS = 500
NGRAM_RANGE = (1, 2)
PENALTY_LEVELS = 40
PENALTY_RANGE = (-10.0, 0.0)  # log10 of the L1 penalty, glmnet defaults
N_BOOTSTRAPS = 25
TOP_IMPORTANCES = 20

RANDOM_SEED = 1234
