import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    API_KEY: str = os.getenv("API_KEY", "")

    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    RQ_WORKFLOW_QUEUE: str = os.getenv("RQ_WORKFLOW_QUEUE", "workflow-internal-action")
    RQ_VALIDATION_QUEUE: str = os.getenv("RQ_VALIDATION_QUEUE", "proxy-validation")
    RQ_JOB_TIMEOUT_SEC: int = int(os.getenv("RQ_JOB_TIMEOUT_SEC", "180"))

    # Introducer validation
    AGE_LIMIT: int = int(os.getenv("AGE_LIMIT", "5"))
    DOB_FORMAT: str = os.getenv("DOB_FORMAT", "%Y/%m/%d")
    VALIDATE_INTRODUCER: bool = os.getenv("VALIDATE_INTRODUCER", "true").lower() == "true"
    DEMOGRAPHIC_IDENTITY_SCHEMA: str = os.getenv("DEMOGRAPHIC_IDENTITY_SCHEMA", "identity")

    # Supervisor validation
    # Both flags are compared against this literal; anything else is a failed password/OTP check.
    PASSWORD_OTP_TRUE_FLAG: str = "true"
    USER_APP_ID: str = os.getenv("USER_APP_ID", "regproc")

    # Error code the auth service returns when its own backend is down. Treated as retryable.
    AUTH_SYSTEM_UNAVAILABLE_CODE: str = os.getenv("AUTH_SYSTEM_UNAVAILABLE_CODE", "IDA-MLC-007")

    # Collaborator endpoints
    ID_AUTH_URL: str = os.getenv("ID_AUTH_URL", "")
    IDREPO_URL: str = os.getenv("IDREPO_URL", "")
    USER_DETAILS_URL: str = os.getenv("USER_DETAILS_URL", "")
    INDIVIDUAL_ID_URL: str = os.getenv("INDIVIDUAL_ID_URL", "")
    PACKET_MANAGER_URL: str = os.getenv("PACKET_MANAGER_URL", "")
    WORKFLOW_ACTION_URL: str = os.getenv("WORKFLOW_ACTION_URL", "")
    WEBSUB_HUB_URL: str = os.getenv("WEBSUB_HUB_URL", "")
    WORKFLOW_COMPLETED_TOPIC: str = os.getenv("WORKFLOW_COMPLETED_TOPIC", "registration-processor/workflow-completed-event")
    WORKFLOW_PAUSED_FOR_ADDITIONAL_INFO_TOPIC: str = os.getenv(
        "WORKFLOW_PAUSED_FOR_ADDITIONAL_INFO_TOPIC",
        "registration-processor/workflow-paused-for-additional-info-event",
    )
    HTTP_TIMEOUT_SEC: float = float(os.getenv("HTTP_TIMEOUT_SEC", "10.0"))

    # Workflow engine
    RESUME_PARENT_FLOW_ACTION: str = os.getenv("RESUME_PARENT_FLOW_ACTION", "RESUME_PARENT_FLOW")
    WORKFLOW_MODULE_ID: str = os.getenv("WORKFLOW_MODULE_ID", "RPR-WIA-001")
    WORKFLOW_MODULE_NAME: str = os.getenv("WORKFLOW_MODULE_NAME", "WorkflowInternalAction")
    STATUS_HISTORY_MAX: int = int(os.getenv("STATUS_HISTORY_MAX", "200"))

    # Security & Privacy
    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"
    ADMIN_RBAC_ENABLED: bool = os.getenv("ADMIN_RBAC_ENABLED", "true").lower() == "true"
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")
    # Comma separated; empty disables cross-origin access
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")


settings = Settings()
