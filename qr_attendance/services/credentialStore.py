import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qr_attendance import config
from qr_attendance.enums import OtpPurpose, Role
from qr_attendance.exceptions import ExpiredError, ValidationError
from qr_attendance.models import LoginOtp, PendingRegistration
from qr_attendance.utils.clock import utcnow
from qr_attendance.utils.generateOtp import generate_otp, hash_otp, verify_otp

logger = logging.getLogger(__name__)

OtpRecord = Union[PendingRegistration, LoginOtp]

INVALID_OTP_MESSAGE = "Invalid or expired OTP"


class CredentialStore:
    """Issues and redeems one-time passcodes.

    Registration codes live on the pending registration row (keyed by email);
    login codes live in ``login_otps`` keyed by (email, user type). Issuing
    again for the same key overwrites the earlier code. Redeeming deletes the
    row, so a code works exactly once.
    """

    def __init__(
        self,
        db: Session,
        notifier,
        *,
        ttl: Optional[timedelta] = None,
        max_attempts: Optional[int] = None,
    ):
        self.db = db
        self.notifier = notifier
        self.ttl = ttl or timedelta(minutes=config.OTP_TTL_MINUTES)
        self.max_attempts = max_attempts or config.OTP_MAX_ATTEMPTS

    # ---------------------------- issue
    def issue(
        self,
        email: str,
        purpose: OtpPurpose,
        user_type: Role,
        *,
        device_id: Optional[str] = None,
        profile: Optional[dict] = None,
        now: Optional[datetime] = None,
    ) -> datetime:
        """Stores a fresh code for the key and dispatches it. Returns the expiry.

        Raises DependencyError when the notifier fails; the stored code is
        left in place and simply expires.
        """
        now = now or utcnow()
        otp = generate_otp()
        expiry = now + self.ttl

        if purpose == OtpPurpose.REGISTRATION:
            if profile is None:
                raise ValidationError("Registration details are required")
            self._upsert_pending_registration(email, profile, otp, expiry, now)
        else:
            if user_type == Role.STUDENT and not device_id:
                raise ValidationError("Device ID is required")
            self._upsert_login_otp(email, user_type, device_id, otp, expiry, now)

        logger.info(f"Issued {purpose.value} OTP for {user_type.value} {email}")
        self.notifier.send_otp(email, otp, user_type.value)
        return expiry

    def _upsert_pending_registration(self, email, profile, otp, expiry, now):
        values = {
            "full_name": profile["full_name"],
            "enrollment_number": profile["enrollment_number"],
            "branch": profile["branch"],
            "year": profile["year"],
            "device_id": profile["device_id"],
            "otp_hash": hash_otp(otp),
            "otp_expiry": expiry,
            "attempts": 0,
            "created_at": now,
        }
        self._upsert(
            PendingRegistration,
            {"email": email},
            values,
        )

    def _upsert_login_otp(self, email, user_type, device_id, otp, expiry, now):
        values = {
            "device_id": device_id,
            "otp_hash": hash_otp(otp),
            "otp_expiry": expiry,
            "attempts": 0,
            "created_at": now,
        }
        self._upsert(
            LoginOtp,
            {"email": email, "user_type": user_type.value},
            values,
        )

    def _upsert(self, model, key: dict, values: dict):
        # Last write wins. A concurrent insert of the same key loses the
        # unique constraint race and is retried once as an update.
        for attempt in range(2):
            existing = self.db.query(model).filter_by(**key).first()
            if existing:
                for field, value in values.items():
                    setattr(existing, field, value)
            else:
                self.db.add(model(**key, **values))
            try:
                self.db.commit()
                return
            except IntegrityError:
                self.db.rollback()
                if attempt:
                    raise

    # ---------------------------- verify
    def verify(
        self,
        email: str,
        code: str,
        purpose: OtpPurpose,
        user_type: Role,
        *,
        device_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> OtpRecord:
        """Redeems a code. Returns the consumed row on success.

        Wrong code, expired code, missing row and (for student logins) a device
        other than the one the code was issued to all raise the same
        ExpiredError, so callers can't probe which one it was.
        """
        now = now or utcnow()
        record = self._lookup(email, purpose, user_type)
        if record is None:
            raise ExpiredError(INVALID_OTP_MESSAGE)

        if record.otp_expiry <= now:
            raise ExpiredError(INVALID_OTP_MESSAGE)

        device_ok = (
            purpose != OtpPurpose.LOGIN
            or user_type != Role.STUDENT
            or record.device_id == device_id
        )
        if not device_ok or not verify_otp(str(code), record.otp_hash):
            self._register_failure(record)
            raise ExpiredError(INVALID_OTP_MESSAGE)

        self._consume(record)
        return record

    def _lookup(self, email, purpose, user_type) -> Optional[OtpRecord]:
        if purpose == OtpPurpose.REGISTRATION:
            return (
                self.db.query(PendingRegistration)
                .filter(PendingRegistration.email == email)
                .first()
            )
        return (
            self.db.query(LoginOtp)
            .filter(LoginOtp.email == email, LoginOtp.user_type == user_type.value)
            .first()
        )

    def _register_failure(self, record: OtpRecord):
        model = type(record)
        if record.attempts + 1 >= self.max_attempts:
            logger.warning(
                f"OTP for {record.email} discarded after {self.max_attempts} failed attempts"
            )
            self.db.execute(delete(model).where(model.id == record.id))
        else:
            self.db.execute(
                update(model)
                .where(model.id == record.id)
                .values(attempts=model.attempts + 1)
            )
        self.db.commit()

    def _consume(self, record: OtpRecord):
        model = type(record)
        # Detach first so the returned object keeps its loaded fields after the delete.
        self.db.expunge(record)
        result = self.db.execute(
            delete(model).where(
                model.id == record.id,
                model.otp_hash == record.otp_hash,
            )
        )
        self.db.commit()
        if result.rowcount != 1:
            # Another request redeemed (or re-issued) the code first.
            raise ExpiredError(INVALID_OTP_MESSAGE)

    # ---------------------------- maintenance
    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        removed = self.db.execute(
            delete(PendingRegistration).where(PendingRegistration.otp_expiry <= now)
        ).rowcount
        removed += self.db.execute(
            delete(LoginOtp).where(LoginOtp.otp_expiry <= now)
        ).rowcount
        self.db.commit()
        return removed
