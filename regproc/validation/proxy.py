"""
Proxy-authentication validation.

A packet can be approved on behalf of someone else:
- Introducer: a parent/guardian vouches for an under-age applicant (NEW/UPDATE only).
- Supervisor: the officer who supervised the enrollment.

Both end in the same biometric step against the ID-authentication service.

Every failure path mutates the caller's RegistrationStatusRecord *before* raising,
so whatever the caller persists afterwards reflects the outcome. Nothing here
persists the record itself.
"""
from typing import Dict, List, Optional

from regproc.auth.gateway import REJECTED as AUTH_REJECTED, AuthGateway
from regproc.core import status_codes as sc
from regproc.core import status_util
from regproc.core.errors import (
    ApisResourceAccessError,
    AuthSystemError,
    ParentOnHoldError,
    ValidationError,
)
from regproc.core.status_util import StatusEntry
from regproc.directory.client import Directory
from regproc.observability.logging import log
from regproc.packet import reader as packet_keys
from regproc.packet.reader import PacketReader, SupervisorDetails
from regproc.settings import settings
from regproc.store.models import BiometricSegment, RegistrationStatusRecord

INDIVIDUAL_TYPE_UIN = "UIN"
INDIVIDUAL_TYPE_USERID = "USERID"

INTRODUCER_STAGE = "IntroducerValidatorStage"
SUPERVISOR_STAGE = "SupervisorValidatorStage"


def _mark(record: RegistrationStatusRecord, type_code: str, status_code: str, **extra) -> None:
    record.latestTransactionStatusCode = status_util.transaction_status_for(type_code)
    record.statusCode = status_code
    for k, v in extra.items():
        setattr(record, k, v)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value == ""


class BiometricProxyAuthenticator:
    """
    Shared biometric step. `failure` is the role-specific *_AUTHENTICATION_FAILED entry.

    USERID subjects are first resolved to an individual id through the directory;
    the auth service then infers the id type itself.
    """

    def __init__(self, gateway: AuthGateway, failure: StatusEntry, directory: Optional[Directory] = None):
        self.gateway = gateway
        self.failure = failure
        self.directory = directory

    def authenticate(
        self,
        registration_id: str,
        subject_id: str,
        subject_type: Optional[str],
        segments: List[BiometricSegment],
        record: RegistrationStatusRecord,
    ) -> bool:
        if subject_type == INDIVIDUAL_TYPE_USERID:
            individual_id = self.directory.get_individual_id_by_user_id(subject_id)
            if _is_blank(individual_id):
                raise ApisResourceAccessError.from_status(
                    status_util.USERID_INDIVIDUALID_LINK_FAILED, subject_id=subject_id)
            subject_id, subject_type = individual_id, None

        outcome = self.gateway.authenticate(subject_id, subject_type, segments, registration_id=registration_id)

        if outcome.authenticated:
            return True

        if outcome.status == AUTH_REJECTED:
            _mark(record, status_util.AUTH_FAILED, sc.FAILED)
            raise ValidationError.from_status(self.failure, suffix=subject_id, subject_id=subject_id)

        if outcome.has_error_code(settings.AUTH_SYSTEM_UNAVAILABLE_CODE):
            # Backend down: retry later, the packet itself is not known to be bad
            log(event="proxy_auth_system_unavailable", rid=registration_id)
            raise AuthSystemError.from_status(status_util.AUTH_SYSTEM_EXCEPTION, subject_id=subject_id)

        result = outcome.joined_error_messages()
        _mark(record, status_util.AUTH_ERROR, sc.FAILED)
        log(event="proxy_auth_error", rid=registration_id, errors=result)
        raise ValidationError(self.failure.code, result, subject_id=subject_id)


class IntroducerValidator:
    def __init__(
        self,
        packet_reader: PacketReader,
        status_store,
        directory: Directory,
        gateway: AuthGateway,
        age_limit: Optional[int] = None,
        enabled: Optional[bool] = None,
    ):
        self.packet_reader = packet_reader
        self.status_store = status_store
        self.directory = directory
        self.biometric_auth = BiometricProxyAuthenticator(gateway, status_util.INTRODUCER_AUTHENTICATION_FAILED)
        self.age_limit = settings.AGE_LIMIT if age_limit is None else int(age_limit)
        self.enabled = settings.VALIDATE_INTRODUCER if enabled is None else bool(enabled)

    def is_valid_introducer(self, registration_id: str, record: RegistrationStatusRecord) -> bool:
        reg_type = (record.registrationType or "").upper()
        if reg_type not in sc.INTRODUCER_REGISTRATION_TYPES:
            return True

        age = self.packet_reader.get_applicant_age(registration_id, record.registrationType, INTRODUCER_STAGE)
        if age >= self.age_limit:
            return True

        if not self.enabled:
            return True

        introducer_uin = self.packet_reader.get_field_by_key(
            registration_id, packet_keys.INTRODUCER_UIN, record.registrationType, INTRODUCER_STAGE)
        introducer_rid = self.packet_reader.get_field_by_key(
            registration_id, packet_keys.INTRODUCER_RID, record.registrationType, INTRODUCER_STAGE)

        if _is_blank(introducer_uin) and _is_blank(introducer_rid):
            _mark(record, status_util.PARENT_UIN_AND_RID_NOT_IN_PACKET, sc.REJECTED)
            log(event="introducer_uin_rid_missing", rid=registration_id)
            raise ValidationError.from_status(status_util.UIN_RID_NOT_FOUND)

        if _is_blank(introducer_uin):
            self._check_introducer_packet(introducer_rid, registration_id, record)
            introducer_uin = self.directory.resolve_uin_by_rid(
                introducer_rid, settings.DEMOGRAPHIC_IDENTITY_SCHEMA)
            if _is_blank(introducer_uin):
                _mark(record, status_util.PARENT_UIN_NOT_AVAIALBLE, sc.FAILED)
                log(event="introducer_uin_not_available", rid=registration_id)
                raise ValidationError.from_status(status_util.PARENT_UIN_NOT_FOUND)

        return self._validate_introducer_biometric(registration_id, record, introducer_uin)

    def _check_introducer_packet(self, introducer_rid: str, registration_id: str,
                                 record: RegistrationStatusRecord) -> None:
        """Gate on the introducer's own packet before trusting its UIN."""
        parent = self.status_store.get_status(introducer_rid)

        if parent is None or parent.statusCode == sc.PROCESSING:
            _mark(
                record,
                status_util.OSI_FAILED_ON_HOLD_PARENT_PACKET,
                sc.PROCESSING,
                subStatusCode=status_util.PACKET_ON_HOLD.code,
                statusComment=status_util.PACKET_ON_HOLD.message,
            )
            log(event="introducer_packet_on_hold", rid=registration_id,
                introducerRid=introducer_rid, parentFound=parent is not None)
            raise ParentOnHoldError.from_status(status_util.PACKET_ON_HOLD)

        if parent.statusCode in (sc.REJECTED, sc.FAILED):
            _mark(record, status_util.OSI_FAILED_REJECTED_PARENT, sc.FAILED)
            log(event="introducer_packet_rejected", rid=registration_id, introducerRid=introducer_rid)
            raise ValidationError.from_status(status_util.CHILD_PACKET_REJECTED)

    def _validate_introducer_biometric(self, registration_id: str, record: RegistrationStatusRecord,
                                       introducer_uin: str) -> bool:
        segments = self.packet_reader.get_biometrics_by_key(
            registration_id, packet_keys.INTRODUCER_BIO, record.registrationType, INTRODUCER_STAGE)
        if segments is None:
            _mark(record, status_util.PARENT_BIOMETRIC_NOT_IN_PACKET, sc.FAILED)
            log(event="introducer_biometrics_missing", rid=registration_id)
            raise ValidationError.from_status(status_util.PARENT_BIOMETRIC_FILE_NAME_NOT_FOUND)
        return self.biometric_auth.authenticate(
            registration_id, introducer_uin, INDIVIDUAL_TYPE_UIN, segments, record)


class SupervisorValidator:
    def __init__(self, packet_reader: PacketReader, directory: Directory, gateway: AuthGateway):
        self.packet_reader = packet_reader
        self.directory = directory
        self.biometric_auth = BiometricProxyAuthenticator(
            gateway, status_util.SUPERVISOR_AUTHENTICATION_FAILED, directory=directory)

    def is_valid_supervisor(self, registration_id: str, record: RegistrationStatusRecord,
                            meta_info: Dict[str, str]) -> bool:
        details = SupervisorDetails.from_meta_info(meta_info)
        supervisor_id = details.supervisorId

        # Callers only route packets here when a supervisor is mandatory
        if _is_blank(supervisor_id):
            _mark(record, status_util.SUPERVISORID_NOT_PRESENT_IN_PACKET, sc.FAILED)
            log(event="supervisor_id_missing", rid=registration_id)
            raise ValidationError.from_status(status_util.SUPERVISOR_NOT_FOUND_PACKET)

        if not self._was_active(registration_id, supervisor_id, meta_info, record):
            _mark(record, status_util.SUPERVISOR_WAS_INACTIVE_TYPE, sc.FAILED)
            log(event="supervisor_was_inactive", rid=registration_id)
            raise ValidationError.from_status(
                status_util.SUPERVISOR_WAS_INACTIVE, suffix=supervisor_id, subject_id=supervisor_id)

        return self._validate_credentials(registration_id, details, record)

    def _was_active(self, registration_id: str, supervisor_id: str, meta_info: Dict[str, str],
                    record: RegistrationStatusRecord) -> bool:
        creation_date = (meta_info or {}).get(packet_keys.META_CREATION_DATE)
        if _is_blank(creation_date):
            _mark(record, status_util.PACKET_CREATION_DATE_NOT_PRESENT_IN_PACKET, sc.FAILED)
            log(event="packet_creation_date_missing", rid=registration_id)
            raise ValidationError.from_status(status_util.PACKET_CREATION_DATE_NOT_FOUND)

        user = self.directory.get_user_details(supervisor_id, creation_date)
        if user.errors:
            _mark(record, status_util.AUTH_ERROR, sc.FAILED)
            raise ValidationError.from_status(
                status_util.SUPERVISOR_AUTHENTICATION_FAILED,
                suffix=user.first_error_message(),
                subject_id=supervisor_id,
            )
        return user.isActive

    def _validate_credentials(self, registration_id: str, details: SupervisorDetails,
                              record: RegistrationStatusRecord) -> bool:
        supervisor_id = details.supervisorId

        if _is_blank(details.supervisorBiometricFileName):
            if validate_otp_and_pwd(details.supervisorPassword, details.supervisorOTPAuthentication):
                return True
            _mark(record, status_util.PASSWORD_OTP_FAILURE, sc.FAILED)
            log(event="supervisor_password_otp_failure", rid=registration_id)
            raise ValidationError.from_status(
                status_util.PASSWORD_OTP_FAILURE_SUPERVISOR, suffix=supervisor_id, subject_id=supervisor_id)

        segments = self.packet_reader.get_biometrics_by_key(
            registration_id, packet_keys.SUPERVISOR_BIO, record.registrationType, SUPERVISOR_STAGE)
        if not segments:
            record.statusCode = sc.FAILED
            log(event="supervisor_biometrics_missing", rid=registration_id)
            raise ValidationError.from_status(
                status_util.BIOMETRICS_VALIDATION_FAILURE,
                suffix=f" for Supervisor : {supervisor_id}",
                subject_id=supervisor_id,
            )

        return self.biometric_auth.authenticate(
            registration_id, supervisor_id, INDIVIDUAL_TYPE_USERID, segments, record)


def validate_otp_and_pwd(pwd: Optional[str], otp: Optional[str]) -> bool:
    flag = settings.PASSWORD_OTP_TRUE_FLAG
    return pwd == flag or otp == flag
