# Registration status codes (closed set persisted on RegistrationStatusRecord.statusCode)

# Packet is moving through the pipeline (also used for the introducer on-hold case)
PROCESSING = "PROCESSING"

# Paused by an operator or rule; resumes at resumeTimestamp with defaultResumeAction
PAUSED = "PAUSED"

# Paused until an additional-info flow (e.g. CORRECTION) answers
PAUSED_FOR_ADDITIONAL_INFO = "PAUSED_FOR_ADDITIONAL_INFO"

# Terminal outcomes
PROCESSED = "PROCESSED"
REJECTED = "REJECTED"
FAILED = "FAILED"

# Re-enters the pipeline from the last successful stage
REPROCESS = "REPROCESS"

# Eligible for resume by the workflow action service
RESUMABLE = "RESUMABLE"

ALL_STATUSES = frozenset({
    PROCESSING,
    PAUSED,
    PAUSED_FOR_ADDITIONAL_INFO,
    PROCESSED,
    REJECTED,
    FAILED,
    REPROCESS,
    RESUMABLE,
})

TERMINAL_STATUSES = frozenset({PROCESSED, REJECTED, FAILED})


# Workflow internal action codes

MARK_AS_PAUSED = "MARK_AS_PAUSED"
MARK_AS_REPROCESS = "MARK_AS_REPROCESS"
COMPLETE_AS_PROCESSED = "COMPLETE_AS_PROCESSED"
COMPLETE_AS_REJECTED = "COMPLETE_AS_REJECTED"
COMPLETE_AS_FAILED = "COMPLETE_AS_FAILED"
COMPLETE_AS_REJECTED_WITHOUT_PARENT_FLOW = "COMPLETE_AS_REJECTED_WITHOUT_PARENT_FLOW"
PAUSE_AND_REQUEST_ADDITIONAL_INFO = "PAUSE_AND_REQUEST_ADDITIONAL_INFO"
RESTART_PARENT_FLOW = "RESTART_PARENT_FLOW"

ALL_ACTIONS = frozenset({
    MARK_AS_PAUSED,
    MARK_AS_REPROCESS,
    COMPLETE_AS_PROCESSED,
    COMPLETE_AS_REJECTED,
    COMPLETE_AS_FAILED,
    COMPLETE_AS_REJECTED_WITHOUT_PARENT_FLOW,
    PAUSE_AND_REQUEST_ADDITIONAL_INFO,
    RESTART_PARENT_FLOW,
})


# Registration types that require an introducer for under-age applicants
NEW = "NEW"
UPDATE = "UPDATE"
INTRODUCER_REGISTRATION_TYPES = frozenset({NEW, UPDATE})


# Latest transaction status codes
TX_SUCCESS = "SUCCESS"
TX_FAILED = "FAILED"
TX_REJECTED = "REJECTED"
TX_REPROCESS = "REPROCESS"
TX_ERROR = "ERROR"
TX_IN_PROGRESS = "IN-PROGRESS"
