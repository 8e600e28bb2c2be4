"""
Status codes & messages for proxy validation outcomes, and the mapping from
exception type codes to latest-transaction status codes.
"""
from dataclasses import dataclass

from regproc.core import status_codes as sc


@dataclass(frozen=True)
class StatusEntry:
    code: str
    message: str


# Introducer
UIN_RID_NOT_FOUND = StatusEntry("RPR-IVA-001", "UIN or RID of introducer not present in packet")
PARENT_UIN_NOT_FOUND = StatusEntry("RPR-IVA-002", "Introducer UIN not found for the given RID")
CHILD_PACKET_REJECTED = StatusEntry("RPR-IVA-003", "Packet rejected as the parent packet is rejected or failed")
PACKET_ON_HOLD = StatusEntry("RPR-IVA-004", "Packet is on hold as the parent packet is still being processed")
PARENT_BIOMETRIC_FILE_NAME_NOT_FOUND = StatusEntry("RPR-IVA-005", "Introducer biometrics not present in packet")
INTRODUCER_AUTHENTICATION_FAILED = StatusEntry("RPR-IVA-006", "Introducer authentication failed for UIN : ")

# Supervisor
SUPERVISOR_NOT_FOUND_PACKET = StatusEntry("RPR-SVA-001", "Supervisor id not present in packet")
PACKET_CREATION_DATE_NOT_FOUND = StatusEntry("RPR-SVA-002", "Packet creation date not present in packet meta info")
SUPERVISOR_WAS_INACTIVE = StatusEntry("RPR-SVA-003", "Supervisor was inactive at packet creation time : ")
PASSWORD_OTP_FAILURE_SUPERVISOR = StatusEntry("RPR-SVA-004", "Password or OTP verification failed for supervisor : ")
BIOMETRICS_VALIDATION_FAILURE = StatusEntry("RPR-SVA-005", "Biometrics validation failed")
SUPERVISOR_AUTHENTICATION_FAILED = StatusEntry("RPR-SVA-006", "Supervisor authentication failed : ")

# System
AUTH_SYSTEM_EXCEPTION = StatusEntry("RPR-SYS-001", "Authentication system is unavailable")
API_RESOURCE_ACCESS_FAILED = StatusEntry("RPR-SYS-002", "Could not reach an external api resource")
USERID_INDIVIDUALID_LINK_FAILED = StatusEntry("RPR-SYS-003", "Could not resolve individual id for user id")
TABLE_NOT_ACCESSIBLE = StatusEntry("RPR-SYS-004", "Status store is not accessible")
PACKET_MANAGER_EXCEPTION = StatusEntry("RPR-SYS-005", "Packet manager request failed")
UNKNOWN_EXCEPTION_OCCURED = StatusEntry("RPR-SYS-999", "Unknown exception occurred")


# Exception type codes -> latest transaction status code
PARENT_UIN_AND_RID_NOT_IN_PACKET = "PARENT_UIN_AND_RID_NOT_IN_PACKET"
PARENT_UIN_NOT_AVAIALBLE = "PARENT_UIN_NOT_AVAIALBLE"
OSI_FAILED_ON_HOLD_PARENT_PACKET = "OSI_FAILED_ON_HOLD_PARENT_PACKET"
OSI_FAILED_REJECTED_PARENT = "OSI_FAILED_REJECTED_PARENT"
PARENT_BIOMETRIC_NOT_IN_PACKET = "PARENT_BIOMETRIC_NOT_IN_PACKET"
SUPERVISORID_NOT_PRESENT_IN_PACKET = "SUPERVISORID_NOT_PRESENT_IN_PACKET"
SUPERVISOR_WAS_INACTIVE_TYPE = "SUPERVISOR_WAS_INACTIVE"
PACKET_CREATION_DATE_NOT_PRESENT_IN_PACKET = "PACKET_CREATION_DATE_NOT_PRESENT_IN_PACKET"
PASSWORD_OTP_FAILURE = "PASSWORD_OTP_FAILURE"
AUTH_FAILED = "AUTH_FAILED"
AUTH_ERROR = "AUTH_ERROR"
AUTH_SYSTEM_EXCEPTION_TYPE = "AUTH_SYSTEM_EXCEPTION"
APIS_RESOURCE_ACCESS_EXCEPTION = "APIS_RESOURCE_ACCESS_EXCEPTION"
TABLE_NOT_ACCESSIBLE_EXCEPTION = "TABLE_NOT_ACCESSIBLE_EXCEPTION"
PACKET_MANAGER_EXCEPTION_TYPE = "PACKET_MANAGER_EXCEPTION"
EXCEPTION = "EXCEPTION"

_TRANSACTION_STATUS = {
    PARENT_UIN_AND_RID_NOT_IN_PACKET: sc.TX_REJECTED,
    PARENT_UIN_NOT_AVAIALBLE: sc.TX_FAILED,
    OSI_FAILED_ON_HOLD_PARENT_PACKET: sc.TX_IN_PROGRESS,
    OSI_FAILED_REJECTED_PARENT: sc.TX_FAILED,
    PARENT_BIOMETRIC_NOT_IN_PACKET: sc.TX_FAILED,
    SUPERVISORID_NOT_PRESENT_IN_PACKET: sc.TX_FAILED,
    SUPERVISOR_WAS_INACTIVE_TYPE: sc.TX_FAILED,
    PACKET_CREATION_DATE_NOT_PRESENT_IN_PACKET: sc.TX_FAILED,
    PASSWORD_OTP_FAILURE: sc.TX_FAILED,
    AUTH_FAILED: sc.TX_FAILED,
    AUTH_ERROR: sc.TX_FAILED,
    AUTH_SYSTEM_EXCEPTION_TYPE: sc.TX_REPROCESS,
    APIS_RESOURCE_ACCESS_EXCEPTION: sc.TX_REPROCESS,
    TABLE_NOT_ACCESSIBLE_EXCEPTION: sc.TX_REPROCESS,
    PACKET_MANAGER_EXCEPTION_TYPE: sc.TX_REPROCESS,
    EXCEPTION: sc.TX_ERROR,
}


def transaction_status_for(type_code: str) -> str:
    return _TRANSACTION_STATUS.get(type_code, sc.TX_ERROR)
