"""Form validation for pilgrims, bookings and payments"""
import re
from typing import Any, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError, field_validator

NAME_RE = re.compile(r"^[a-zA-Z\s'.-]+$")
PHONE_RE = re.compile(r"^(\+62|62|0)[0-9]{9,13}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NIK_RE = re.compile(r"^[0-9]{16}$")
PASSPORT_RE = re.compile(r"^[A-Z0-9]{6,9}$")
URL_RE = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)

MAX_INPUT_LENGTH = 500

REQUIRED_MESSAGES = {
    "gender": "Jenis kelamin wajib dipilih",
    "amount": "Jumlah pembayaran wajib diisi",
    "payment_method": "Metode pembayaran wajib dipilih",
}


class PilgrimForm(BaseModel):
    name: str
    gender: Literal["male", "female"]
    phone: Optional[str] = None
    email: Optional[str] = None
    nik: Optional[str] = None
    birth_date: Optional[str] = None
    passport_number: Optional[str] = None
    passport_expiry: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Nama minimal 3 karakter")
        if len(v) > 100:
            raise ValueError("Nama maksimal 100 karakter")
        if not NAME_RE.fullmatch(v):
            raise ValueError("Nama hanya boleh berisi huruf, spasi, dan tanda baca")
        return v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        if v and not PHONE_RE.fullmatch(re.sub(r"\s", "", v)):
            raise ValueError("Format nomor HP tidak valid (contoh: 08123456789)")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        if v and not EMAIL_RE.fullmatch(v):
            raise ValueError("Format email tidak valid")
        return v

    @field_validator("nik")
    @classmethod
    def check_nik(cls, v: Optional[str]) -> Optional[str]:
        if v and not NIK_RE.fullmatch(v):
            raise ValueError("NIK harus 16 digit angka")
        return v

    @field_validator("passport_number")
    @classmethod
    def check_passport(cls, v: Optional[str]) -> Optional[str]:
        if v and not PASSPORT_RE.fullmatch(v.upper()):
            raise ValueError("Nomor paspor tidak valid")
        return v


class BookingRoomForm(BaseModel):
    room_type: Literal["quad", "triple", "double"]
    quantity: int = Field(ge=0)
    price: float = Field(ge=0)


class BookingForm(BaseModel):
    rooms: list[BookingRoomForm]
    pilgrims: list[PilgrimForm]
    pic_type: Literal["pusat", "cabang", "agen"]
    pic_id: Optional[UUID] = None

    @field_validator("rooms")
    @classmethod
    def check_rooms(cls, v: list[BookingRoomForm]) -> list[BookingRoomForm]:
        if not any(room.quantity > 0 for room in v):
            raise ValueError("Pilih minimal 1 kamar")
        return v

    @field_validator("pilgrims")
    @classmethod
    def check_pilgrims(cls, v: list[PilgrimForm]) -> list[PilgrimForm]:
        if len(v) < 1:
            raise ValueError("Minimal 1 data jemaah")
        return v


class PaymentForm(BaseModel):
    amount: float
    payment_method: str
    proof_url: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def check_amount(cls, v: float) -> float:
        if v < 1:
            raise ValueError("Jumlah pembayaran wajib diisi")
        return v

    @field_validator("payment_method")
    @classmethod
    def check_method(cls, v: str) -> str:
        if not v:
            raise ValueError("Metode pembayaran wajib dipilih")
        return v

    @field_validator("proof_url")
    @classmethod
    def check_proof_url(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not URL_RE.fullmatch(v):
            raise ValueError("URL bukti pembayaran tidak valid")
        return v


def _error_message(err: dict) -> str:
    """Our own messages without pydantic's 'Value error, ' prefix"""
    if err.get("type") == "missing" and err["loc"]:
        field = str(err["loc"][-1])
        if field in REQUIRED_MESSAGES:
            return REQUIRED_MESSAGES[field]
    if err.get("type") == "value_error":
        ctx_error = err.get("ctx", {}).get("error")
        if ctx_error is not None:
            return str(ctx_error)
    return err["msg"]


def validate_pilgrim(data: Any) -> tuple[bool, dict[str, str]]:
    """Validate pilgrim form data, returning field -> message on failure"""
    try:
        PilgrimForm.model_validate(data)
    except ValidationError as e:
        errors: dict[str, str] = {}
        for err in e.errors():
            path = ".".join(str(part) for part in err["loc"])
            errors[path] = _error_message(err)
        return False, errors
    return True, {}


def validate_booking(data: Any) -> tuple[bool, list[str]]:
    """Validate a complete booking, returning the list of messages on failure"""
    try:
        BookingForm.model_validate(data)
    except ValidationError as e:
        return False, [_error_message(err) for err in e.errors()]
    return True, []


def sanitize_input(text: str) -> str:
    """Strip angle brackets, trim and cap free-text input"""
    return re.sub(r"[<>]", "", text).strip()[:MAX_INPUT_LENGTH]
